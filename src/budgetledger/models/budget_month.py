"""Ledger row table: one per (budget, category, month)."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlalchemy import BigInteger, UniqueConstraint
from sqlmodel import Field, SQLModel


class BudgetMonth(SQLModel, table=True):
    """Cumulative assigned/activity/available for a category in a ``YYYY-MM`` month."""

    __tablename__: ClassVar[str] = "budget_month"
    __table_args__ = (
        UniqueConstraint("budget_id", "category_id", "month", name="uq_budget_month_key"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    budget_id: int = Field(foreign_key="budget.id", nullable=False, index=True)
    category_id: int = Field(foreign_key="category.id", nullable=False, index=True)
    month: str = Field(nullable=False, max_length=7, index=True)
    assigned: int = Field(default=0, sa_type=BigInteger, nullable=False)
    activity: int = Field(default=0, sa_type=BigInteger, nullable=False)
    available: int = Field(default=0, sa_type=BigInteger, nullable=False)

    @property
    def is_ghost(self) -> bool:
        return self.assigned == 0 and self.activity == 0 and self.available == 0
