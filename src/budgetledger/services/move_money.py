"""Move assigned money between two categories in one month."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from ..logging_config import get_logger
from ..models.budget_month import BudgetMonth
from .activity import available_for
from .assignment import update_assignment, validate_assignment

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext

logger = get_logger(__name__)


@dataclass(slots=True)
class MoveResult:
    amount: int
    source: Optional[BudgetMonth]
    target: Optional[BudgetMonth]
    exceeds_available: bool = False


def validate_move(
    amount: Any, source_id: int, target_id: int, *, ceiling: int
) -> Optional[int]:
    """Return the Milliunits to move, or ``None`` when the move is rejected."""

    if source_id == target_id:
        logger.error(f"Rejected move: source and target are both category {source_id}")
        return None
    value = validate_assignment(amount, ceiling=ceiling, category_id=source_id)
    if value is None:
        return None
    if value <= 0:
        logger.error(f"Rejected move of {value}: amount must be positive")
        return None
    return value


def move_money(
    ctx: "LedgerContext", month: str, source_id: int, target_id: int, amount: Any
) -> Optional[MoveResult]:
    """Lower the source's assigned and raise the target's by the same amount."""

    value = validate_move(amount, source_id, target_id, ceiling=ctx.config.MAX_ASSIGNED_MILLIUNITS)
    if value is None:
        return None
    source = ctx.category(source_id)
    target = ctx.category(target_id)
    if source is None or target is None or ctx.is_income(source) or ctx.is_income(target):
        return None

    exceeds = value > available_for(ctx, source, month)
    if exceeds:
        logger.warning(
            f"Moving {value} from category {source.id} exceeds its available",
            extra={"budget_id": ctx.budget_id, "category_id": source.id, "month": month},
        )

    source_row = ctx.ledger.get(source.id, month, budget_id=ctx.budget_id)
    target_row = ctx.ledger.get(target.id, month, budget_id=ctx.budget_id)
    source_assigned = source_row.assigned if source_row is not None else 0
    target_assigned = target_row.assigned if target_row is not None else 0

    new_source = update_assignment(ctx, source, month, source_assigned - value)
    new_target = update_assignment(ctx, target, month, target_assigned + value)
    return MoveResult(amount=value, source=new_source, target=new_target, exceeds_available=exceeds)
