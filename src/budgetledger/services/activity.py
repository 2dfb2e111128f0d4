"""Activity updater for regular categories."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..models.budget_month import BudgetMonth
from ..models.category import Category
from .carryforward import resolve_carryforward

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext


def calculate_available(carryforward: int, assigned: int, activity: int) -> int:
    return carryforward + assigned + activity


def available_for(ctx: "LedgerContext", category: Category, month: str) -> int:
    """Available of a persisted row, or the carryforward of a virtual one."""

    row = ctx.ledger.get(category.id, month, budget_id=ctx.budget_id)
    if row is not None:
        return row.available
    return resolve_carryforward(ctx, category, month)


def recompute_category_month(
    ctx: "LedgerContext", category: Category, month: str, *, assigned: Optional[int] = None
) -> Optional[BudgetMonth]:
    """Rebuild one regular category's row from its transactions and carryforward.

    ``assigned`` overrides the stored value; otherwise the existing row's
    assigned (or 0) is kept. Returns ``None`` when the row is a ghost.
    """

    activity = ctx.transactions.category_activity(
        category.id, month, budget_id=ctx.budget_id, today=ctx.today
    )
    if assigned is None:
        existing = ctx.ledger.get(category.id, month, budget_id=ctx.budget_id)
        assigned = existing.assigned if existing is not None else 0
    carryforward = resolve_carryforward(ctx, category, month)
    return ctx.ledger.upsert(
        category.id,
        month,
        budget_id=ctx.budget_id,
        assigned=assigned,
        activity=activity,
        available=calculate_available(carryforward, assigned, activity),
    )
