"""Assignment mutator: set how much is budgeted to a category in a month."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Optional

from ..logging_config import get_logger
from ..models.budget_month import BudgetMonth
from ..models.category import Category
from .propagation import fund_credit_cards, propagate, propagate_delta, recompute

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext

logger = get_logger(__name__)

MAX_ASSIGNED_VALUE = 100_000_000_000_000


def validate_assignment(
    value: Any, *, ceiling: int = MAX_ASSIGNED_VALUE, category_id: Optional[int] = None
) -> Optional[int]:
    """Return a storable Milliunit assignment, or ``None`` when rejected.

    Non-numeric and non-finite input is rejected; magnitudes above ``ceiling``
    are clamped. Both outcomes are logged, neither raises.
    """

    context = {"category_id": category_id, "value": repr(value)}
    if value is None or isinstance(value, bool):
        logger.error(f"Rejected assignment {value!r}: not a number", extra=context)
        return None
    if isinstance(value, float) and not math.isfinite(value):
        logger.error(f"Rejected assignment {value!r}: not finite", extra=context)
        return None
    try:
        amount = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        logger.error(f"Rejected assignment {value!r}: not a number", extra=context)
        return None
    if not amount.is_finite():
        logger.error(f"Rejected assignment {value!r}: not finite", extra=context)
        return None

    milliunits = int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if abs(milliunits) > ceiling:
        clamped = ceiling if milliunits > 0 else -ceiling
        logger.warning(f"Clamped assignment {milliunits} to {clamped}", extra=context)
        return clamped
    return milliunits


def update_assignment(
    ctx: "LedgerContext", category: Category, month: str, value: Any
) -> Optional[BudgetMonth]:
    """Set ``assigned`` for (category, month) and propagate the change forward.

    Returns the written row, or ``None`` when the input was rejected, the
    category is an income category, or the row became a ghost and was removed.
    """

    amount = validate_assignment(
        value, ceiling=ctx.config.MAX_ASSIGNED_MILLIUNITS, category_id=category.id
    )
    if amount is None:
        return None
    if ctx.is_income(category):
        logger.warning(
            f"Ignored assignment to income category {category.id}",
            extra={"budget_id": ctx.budget_id, "category_id": category.id},
        )
        return None

    existing = ctx.ledger.get(category.id, month, budget_id=ctx.budget_id)
    if existing is None:
        row = recompute(ctx, category, month, assigned=amount)
        visited = propagate(ctx, category, month)
    else:
        delta = amount - existing.assigned
        if delta == 0:
            return existing
        before = existing.available
        after = before + delta
        row = ctx.ledger.upsert(
            category.id,
            month,
            budget_id=ctx.budget_id,
            assigned=amount,
            activity=existing.activity,
            available=after,
        )
        visited = propagate_delta(ctx, category, month, before=before, after=after)

    fund_credit_cards(ctx, category, [month, *visited])
    return row
