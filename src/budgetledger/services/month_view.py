"""Read-side ledger views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..months import add_months, month_of
from .carryforward import resolve_carryforward

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext


@dataclass(slots=True)
class LedgerLine:
    """One category's ledger figures for a month, with its display metadata."""

    category_id: int
    category_name: str
    category_sort_order: int
    group_id: int
    group_name: str
    group_sort_order: int
    hidden: bool
    linked_account_id: Optional[int]
    month: str
    assigned: int
    activity: int
    available: int
    persisted: bool


def ledger_for_month(ctx: "LedgerContext", month: str) -> list[LedgerLine]:
    """Every non-income category for ``month``; missing rows show their carryforward."""

    lines: list[LedgerLine] = []
    for category, group in ctx.categories.list_with_groups(budget_id=ctx.budget_id):
        row = ctx.ledger.get(category.id, month, budget_id=ctx.budget_id)
        if row is not None:
            assigned, activity, available = row.assigned, row.activity, row.available
        else:
            assigned, activity = 0, 0
            available = resolve_carryforward(ctx, category, month)
        lines.append(
            LedgerLine(
                category_id=category.id,
                category_name=category.name,
                category_sort_order=category.sort_order,
                group_id=group.id,
                group_name=group.name,
                group_sort_order=group.sort_order,
                hidden=category.hidden or group.hidden,
                linked_account_id=category.linked_account_id,
                month=month,
                assigned=assigned,
                activity=activity,
                available=available,
                persisted=row is not None,
            )
        )
    return lines


def month_range(ctx: "LedgerContext") -> tuple[str, str]:
    """(earliest transaction month or the current month, current month + 12)."""

    earliest = ctx.transactions.earliest_date(budget_id=ctx.budget_id)
    current = ctx.current_month
    start = current
    if earliest is not None:
        start = min(month_of(earliest), current)
    return start, add_months(current, 12)
