"""Account registry protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.account import Account


class AccountRepository(Protocol):
    """Repository for accounts and their cached running balances."""

    def get_by_id(self, account_id: int, *, budget_id: int) -> Optional[Account]:
        """Retrieve an account by ID."""
        ...

    def list_all(self, *, budget_id: int, account_type: Optional[str] = None) -> list[Account]:
        """List accounts, optionally filtered by type."""
        ...

    def create(self, account: Account, *, budget_id: int) -> Account:
        ...

    def update(self, account: Account, *, budget_id: int) -> Account:
        ...
