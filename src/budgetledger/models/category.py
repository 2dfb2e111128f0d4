"""Category and category group tables."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel


class CategoryGroup(SQLModel, table=True):
    """Ordered group of categories; income groups sit outside all ledger math."""

    __tablename__: ClassVar[str] = "category_group"

    id: Optional[int] = Field(default=None, primary_key=True)
    budget_id: int = Field(foreign_key="budget.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    sort_order: int = Field(default=0, nullable=False)
    is_income: bool = Field(default=False, nullable=False)
    hidden: bool = Field(default=False, nullable=False)

    categories: list["Category"] = Relationship(
        back_populates="group",
        sa_relationship=relationship("Category", back_populates="group"),
    )


class Category(SQLModel, table=True):
    """Budget category.

    A non-null ``linked_account_id`` marks the auto-managed CC Payment
    category of that credit account.
    """

    __tablename__: ClassVar[str] = "category"

    id: Optional[int] = Field(default=None, primary_key=True)
    group_id: int = Field(foreign_key="category_group.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    sort_order: int = Field(default=0, nullable=False)
    hidden: bool = Field(default=False, nullable=False)
    linked_account_id: Optional[int] = Field(
        default=None, foreign_key="account.id", unique=True, nullable=True
    )

    group: "CategoryGroup" = Relationship(
        back_populates="categories",
        sa_relationship=relationship("CategoryGroup", back_populates="categories"),
    )

    @property
    def is_credit_card_payment(self) -> bool:
        return self.linked_account_id is not None
