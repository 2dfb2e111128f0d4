"""SQLModel implementation of the Ledger Store (BudgetMonth rows)."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...logging_config import get_logger
from ...models.budget_month import BudgetMonth
from ...models.category import Category, CategoryGroup

logger = get_logger(__name__)


class SQLModelLedgerStore:
    """SQLModel-based ledger store.

    ``upsert`` is the only writer and owns ghost-row cleanup: a row whose
    assigned, activity and available are all zero is deleted, never stored.
    Month keys are ``YYYY-MM`` strings, so lexical order is month order.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory
        self.touched_categories: set[int] = set()

    @staticmethod
    def _get(session: Session, category_id: int, month: str, budget_id: int) -> Optional[BudgetMonth]:
        return session.exec(
            select(BudgetMonth)
            .where(BudgetMonth.budget_id == budget_id)
            .where(BudgetMonth.category_id == category_id)
            .where(BudgetMonth.month == month)
        ).first()

    def get(self, category_id: int, month: str, *, budget_id: int) -> Optional[BudgetMonth]:
        """Point read of one ledger row."""
        with self.session_factory() as session:
            return self._get(session, category_id, month, budget_id)

    def latest_before(self, category_id: int, month: str, *, budget_id: int) -> Optional[BudgetMonth]:
        """Latest persisted row strictly before ``month``."""
        with self.session_factory() as session:
            statement = (
                select(BudgetMonth)
                .where(BudgetMonth.budget_id == budget_id)
                .where(BudgetMonth.category_id == category_id)
                .where(BudgetMonth.month < month)
                .order_by(BudgetMonth.month.desc())  # type: ignore
                .limit(1)
            )
            return session.exec(statement).first()

    def rows_after(
        self, category_id: int, month: str, *, budget_id: int, for_update: bool = False
    ) -> list[BudgetMonth]:
        """Existing rows strictly after ``month``, oldest first.

        ``for_update`` locks the category's forward chain for the rest of the
        transaction on backends with row locks.
        """
        with self.session_factory() as session:
            statement = (
                select(BudgetMonth)
                .where(BudgetMonth.budget_id == budget_id)
                .where(BudgetMonth.category_id == category_id)
                .where(BudgetMonth.month > month)
                .order_by(BudgetMonth.month)  # type: ignore
            )
            if for_update:
                statement = statement.with_for_update()
            return list(session.exec(statement).all())

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
        with self.session_factory() as session:
            self.touched_categories.add(category_id)
            row = self._get(session, category_id, month, budget_id)
            if assigned == 0 and activity == 0 and available == 0:
                if row is not None:
                    session.delete(row)
                    session.flush()
                    logger.debug(
                        f"Deleted ghost ledger row {category_id}/{month}",
                        extra={"budget_id": budget_id, "category_id": category_id, "month": month},
                    )
                return None
            if row is None:
                row = BudgetMonth(budget_id=budget_id, category_id=category_id, month=month)
            row.assigned = assigned
            row.activity = activity
            row.available = available
            session.add(row)
            session.flush()
            return row

    def rows_for_month(self, month: str, *, budget_id: int) -> list[tuple[BudgetMonth, Category]]:
        """Rows of non-income categories in ``month`` with their category."""
        with self.session_factory() as session:
            statement = (
                select(BudgetMonth, Category)
                .join(Category, Category.id == BudgetMonth.category_id)
                .join(CategoryGroup, CategoryGroup.id == Category.group_id)
                .where(BudgetMonth.budget_id == budget_id)
                .where(BudgetMonth.month == month)
                .where(CategoryGroup.is_income == False)  # noqa: E712
                .order_by(BudgetMonth.category_id)  # type: ignore
            )
            return [(row, category) for row, category in session.exec(statement).all()]

    def rows_for_categories(
        self, *, budget_id: int, category_ids: Optional[set[int]] = None
    ) -> list[BudgetMonth]:
        """Every row of the budget (or of ``category_ids``), by category then month."""
        with self.session_factory() as session:
            statement = select(BudgetMonth).where(BudgetMonth.budget_id == budget_id)
            if category_ids is not None:
                if not category_ids:
                    return []
                statement = statement.where(BudgetMonth.category_id.in_(sorted(category_ids)))  # type: ignore
            statement = statement.order_by(BudgetMonth.category_id, BudgetMonth.month)  # type: ignore
            return list(session.exec(statement).all())

    def latest_month_with_at_least(self, min_rows: int, *, budget_id: int, up_to: str) -> Optional[str]:
        """Most recent month on or before ``up_to`` holding at least ``min_rows`` rows."""
        with self.session_factory() as session:
            statement = (
                select(BudgetMonth.month)
                .where(BudgetMonth.budget_id == budget_id)
                .where(BudgetMonth.month <= up_to)
                .group_by(BudgetMonth.month)
                .having(func.count(BudgetMonth.id) >= min_rows)
                .order_by(BudgetMonth.month.desc())  # type: ignore
                .limit(1)
            )
            return session.exec(statement).first()

    def sum_assigned(self, *, budget_id: int, month: Optional[str] = None, after: Optional[str] = None) -> int:
        """Assigned total of non-income categories in ``month`` or in every month after ``after``."""
        with self.session_factory() as session:
            statement = (
                select(func.coalesce(func.sum(BudgetMonth.assigned), 0))
                .select_from(BudgetMonth)
                .join(Category, Category.id == BudgetMonth.category_id)
                .join(CategoryGroup, CategoryGroup.id == Category.group_id)
                .where(BudgetMonth.budget_id == budget_id)
                .where(CategoryGroup.is_income == False)  # noqa: E712
            )
            if month is not None:
                statement = statement.where(BudgetMonth.month == month)
            if after is not None:
                statement = statement.where(BudgetMonth.month > after)
            return int(session.exec(statement).one())
