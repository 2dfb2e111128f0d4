"""Transaction log protocol.

Every aggregate ignores transactions dated after ``today``.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.transaction import Transaction, Transfer


class TransactionRepository(Protocol):
    """Authoritative transaction log plus the aggregates the ledger needs."""

    def get_by_id(self, transaction_id: int, *, budget_id: int) -> Optional[Transaction]:
        ...

    def list_for_account(self, account_id: int, *, budget_id: int) -> list[Transaction]:
        ...

    def create(self, transaction: Transaction, *, budget_id: int) -> Transaction:
        ...

    def update(self, transaction: Transaction, *, budget_id: int) -> Transaction:
        ...

    def delete(self, transaction_id: int, *, budget_id: int) -> None:
        ...

    def create_transfer(self, transfer: Transfer, *, budget_id: int) -> Transfer:
        ...

    def get_transfer(self, transfer_id: int, *, budget_id: int) -> Optional[Transfer]:
        ...

    def transfer_for_transaction(self, transaction_id: int, *, budget_id: int) -> Optional[Transfer]:
        ...

    def delete_transfer(self, transfer_id: int, *, budget_id: int) -> None:
        ...

    def category_activity(self, category_id: int, month: str, *, budget_id: int, today: date) -> int:
        """Sum of inflow minus outflow for a category in a month."""
        ...

    def cash_spending(self, category_id: int, month: str, *, budget_id: int, today: date) -> int:
        """Sum of outflow minus inflow for a category on non-credit accounts."""
        ...

    def card_spending(self, account_id: int, month: str, *, budget_id: int, today: date) -> dict[int, int]:
        """Net spending per regular category on one credit account."""
        ...

    def card_payments(self, account_id: int, month: str, *, budget_id: int, today: date) -> int:
        """Uncategorized inflows into a credit account."""
        ...

    def cards_with_spending(
        self, category_id: int, month: str, *, budget_id: int, today: date
    ) -> list[int]:
        ...

    def card_activity_months(self, account_id: int, *, budget_id: int, today: date) -> list[str]:
        ...

    def cash_balance(self, *, budget_id: int, today: date) -> int:
        ...

    def credit_balances(self, *, budget_id: int, today: date) -> dict[int, int]:
        ...

    def income_inflow(self, month: str, *, budget_id: int, today: date) -> int:
        ...

    def account_totals(self, account_id: int, *, budget_id: int, today: date) -> dict[str, int]:
        ...

    def earliest_date(self, *, budget_id: int) -> Optional[date]:
        ...
