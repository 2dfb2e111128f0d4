"""SQLModel implementation of the category/group registry."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...models.category import Category, CategoryGroup


class SQLModelCategoryRepository:
    """SQLModel-based category repository implementation.

    Categories carry no budget column; scoping goes through their group.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, category_id: int, *, budget_id: int) -> Optional[Category]:
        """Retrieve a category by ID."""
        with self.session_factory() as session:
            statement = (
                select(Category)
                .join(CategoryGroup, CategoryGroup.id == Category.group_id)
                .where(Category.id == category_id)
                .where(CategoryGroup.budget_id == budget_id)
            )
            return session.exec(statement).first()

    def get_by_linked_account(self, account_id: int, *, budget_id: int) -> Optional[Category]:
        """Return the CC Payment category linked to a credit account."""
        with self.session_factory() as session:
            statement = (
                select(Category)
                .join(CategoryGroup, CategoryGroup.id == Category.group_id)
                .where(Category.linked_account_id == account_id)
                .where(CategoryGroup.budget_id == budget_id)
            )
            return session.exec(statement).first()

    def list_with_groups(
        self, *, budget_id: int, include_income: bool = False
    ) -> list[tuple[Category, CategoryGroup]]:
        """List categories with their group, ordered for display."""
        with self.session_factory() as session:
            statement = (
                select(Category, CategoryGroup)
                .join(CategoryGroup, CategoryGroup.id == Category.group_id)
                .where(CategoryGroup.budget_id == budget_id)
            )
            if not include_income:
                statement = statement.where(CategoryGroup.is_income == False)  # noqa: E712
            statement = statement.order_by(
                CategoryGroup.sort_order, CategoryGroup.id, Category.sort_order, Category.id  # type: ignore
            )
            return [(category, group) for category, group in session.exec(statement).all()]

    def list_payment_categories(self, *, budget_id: int) -> list[Category]:
        """List every CC Payment category in the budget."""
        with self.session_factory() as session:
            statement = (
                select(Category)
                .join(CategoryGroup, CategoryGroup.id == Category.group_id)
                .where(CategoryGroup.budget_id == budget_id)
                .where(Category.linked_account_id.is_not(None))  # type: ignore
                .order_by(Category.id)  # type: ignore
            )
            return list(session.exec(statement).all())

    def get_group(self, group_id: int, *, budget_id: int) -> Optional[CategoryGroup]:
        with self.session_factory() as session:
            return session.exec(
                select(CategoryGroup).where(
                    CategoryGroup.id == group_id, CategoryGroup.budget_id == budget_id
                )
            ).first()

    def find_group_by_name(self, name: str, *, budget_id: int) -> Optional[CategoryGroup]:
        with self.session_factory() as session:
            return session.exec(
                select(CategoryGroup)
                .where(CategoryGroup.budget_id == budget_id, CategoryGroup.name == name)
                .order_by(CategoryGroup.id)  # type: ignore
            ).first()

    def create_group(self, group: CategoryGroup, *, budget_id: int) -> CategoryGroup:
        """Persist a group after the budget's last group."""
        with self.session_factory() as session:
            last = session.exec(
                select(func.max(CategoryGroup.sort_order)).where(CategoryGroup.budget_id == budget_id)
            ).one()
            group.budget_id = budget_id
            group.sort_order = 0 if last is None else last + 1
            session.add(group)
            session.flush()
            session.refresh(group)
            return group

    def create_category(self, category: Category, *, budget_id: int) -> Category:
        """Persist a category after the last category of its group."""
        with self.session_factory() as session:
            group = session.exec(
                select(CategoryGroup).where(
                    CategoryGroup.id == category.group_id, CategoryGroup.budget_id == budget_id
                )
            ).first()
            if group is None:
                raise ValueError(f"Group {category.group_id} does not belong to budget {budget_id}")
            last = session.exec(
                select(func.max(Category.sort_order)).where(Category.group_id == category.group_id)
            ).one()
            category.sort_order = 0 if last is None else last + 1
            session.add(category)
            session.flush()
            session.refresh(category)
            return category
