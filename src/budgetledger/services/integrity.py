"""Ledger verification: re-derive persisted rows and report inconsistencies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from .carryforward import resolve_carryforward

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext

GHOST_ROW = "ghost_row"
AVAILABLE_MISMATCH = "available_mismatch"
UNKNOWN_CATEGORY = "unknown_category"


@dataclass(slots=True, frozen=True)
class LedgerViolation:
    kind: str
    category_id: int
    month: str
    expected: Optional[int] = None
    actual: Optional[int] = None

    def __str__(self) -> str:
        if self.kind == AVAILABLE_MISMATCH:
            return f"{self.kind} category={self.category_id} month={self.month} expected={self.expected} actual={self.actual}"
        return f"{self.kind} category={self.category_id} month={self.month}"


def verify_ledger(
    ctx: "LedgerContext", category_ids: Optional[set[int]] = None
) -> list[LedgerViolation]:
    """Check ghost-freedom and ``available = carryforward + assigned + activity``."""

    violations: list[LedgerViolation] = []
    for row in ctx.ledger.rows_for_categories(budget_id=ctx.budget_id, category_ids=category_ids):
        if row.is_ghost:
            violations.append(LedgerViolation(GHOST_ROW, row.category_id, row.month))
            continue
        category = ctx.category(row.category_id)
        if category is None:
            violations.append(LedgerViolation(UNKNOWN_CATEGORY, row.category_id, row.month))
            continue
        expected = resolve_carryforward(ctx, category, row.month) + row.assigned + row.activity
        if expected != row.available:
            violations.append(
                LedgerViolation(AVAILABLE_MISMATCH, row.category_id, row.month, expected, row.available)
            )
    return violations
