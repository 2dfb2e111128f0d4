"""Category/group registry protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.category import Category, CategoryGroup


class CategoryRepository(Protocol):
    """Repository for categories and category groups."""

    def get_by_id(self, category_id: int, *, budget_id: int) -> Optional[Category]:
        """Retrieve a category by ID."""
        ...

    def get_by_linked_account(self, account_id: int, *, budget_id: int) -> Optional[Category]:
        """Return the CC Payment category for a credit account."""
        ...

    def list_with_groups(
        self, *, budget_id: int, include_income: bool = False
    ) -> list[tuple[Category, CategoryGroup]]:
        """List categories with their group, ordered by group then category sort order."""
        ...

    def list_payment_categories(self, *, budget_id: int) -> list[Category]:
        ...

    def get_group(self, group_id: int, *, budget_id: int) -> Optional[CategoryGroup]:
        ...

    def find_group_by_name(self, name: str, *, budget_id: int) -> Optional[CategoryGroup]:
        ...

    def create_group(self, group: CategoryGroup, *, budget_id: int) -> CategoryGroup:
        """Persist a group, appending it after the budget's last group."""
        ...

    def create_category(self, category: Category, *, budget_id: int) -> Category:
        """Persist a category, appending it after the group's last category."""
        ...
