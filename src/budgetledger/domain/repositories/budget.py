"""Budget repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.budget import Budget


class BudgetRepository(Protocol):
    """Repository for budgets (tenants)."""

    def get_by_id(self, budget_id: int) -> Optional[Budget]:
        ...

    def list_all(self) -> list[Budget]:
        ...

    def create(self, budget: Budget) -> Budget:
        ...
