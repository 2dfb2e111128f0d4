"""Ledger Store protocol (BudgetMonth rows)."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.budget_month import BudgetMonth
from ...models.category import Category


class LedgerStore(Protocol):
    """Durable (budget, category, month) -> assigned/activity/available table."""

    touched_categories: set[int]

    def get(self, category_id: int, month: str, *, budget_id: int) -> Optional[BudgetMonth]:
        """Point read of one ledger row."""
        ...

    def latest_before(self, category_id: int, month: str, *, budget_id: int) -> Optional[BudgetMonth]:
        """Latest persisted row strictly before ``month``."""
        ...

    def rows_after(
        self, category_id: int, month: str, *, budget_id: int, for_update: bool = False
    ) -> list[BudgetMonth]:
        """Existing rows strictly after ``month``, oldest first."""
        ...

    def upsert(
        self,
        category_id: int,
        month: str,
        *,
        budget_id: int,
        assigned: int,
        activity: int,
        available: int,
    ) -> Optional[BudgetMonth]:
        """Write a row; an all-zero row is deleted instead and ``None`` returned."""
        ...

    def rows_for_month(
        self, month: str, *, budget_id: int
    ) -> list[tuple[BudgetMonth, Category]]:
        """Rows of non-income categories in ``month`` with their category."""
        ...

    def rows_for_categories(
        self, *, budget_id: int, category_ids: Optional[set[int]] = None
    ) -> list[BudgetMonth]:
        ...

    def latest_month_with_at_least(self, min_rows: int, *, budget_id: int, up_to: str) -> Optional[str]:
        ...

    def sum_assigned(self, *, budget_id: int, month: Optional[str] = None, after: Optional[str] = None) -> int:
        ...
