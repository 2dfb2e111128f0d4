"""SQLModel implementation of the transaction log."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from ...models.account import CREDIT, Account
from ...models.category import Category, CategoryGroup
from ...models.transaction import CLEARED, RECONCILED, UNCLEARED, Transaction, Transfer
from ...months import month_bounds, month_of

_NET = Transaction.inflow - Transaction.outflow
_SPENT = Transaction.outflow - Transaction.inflow


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation.

    Aggregates only see transactions dated on or before ``today``; later
    ones are upcoming and not yet part of any balance.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    @staticmethod
    def _scoped(statement, *, budget_id: int, today: Optional[date] = None, month: Optional[str] = None):
        statement = (
            statement.select_from(Transaction)
            .join(Account, Account.id == Transaction.account_id)
            .where(Account.budget_id == budget_id)
        )
        if today is not None:
            statement = statement.where(Transaction.date <= today)
        if month is not None:
            start, end = month_bounds(month)
            statement = statement.where(Transaction.date >= start).where(Transaction.date < end)
        return statement

    def _get(self, session: Session, transaction_id: int, budget_id: int) -> Optional[Transaction]:
        statement = self._scoped(select(Transaction), budget_id=budget_id).where(
            Transaction.id == transaction_id
        )
        return session.exec(statement).first()

    def get_by_id(self, transaction_id: int, *, budget_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        with self.session_factory() as session:
            return self._get(session, transaction_id, budget_id)

    def list_for_account(self, account_id: int, *, budget_id: int) -> list[Transaction]:
        """All transactions of an account, oldest first."""
        with self.session_factory() as session:
            statement = (
                self._scoped(select(Transaction), budget_id=budget_id)
                .where(Transaction.account_id == account_id)
                .order_by(Transaction.date, Transaction.id)  # type: ignore
            )
            return list(session.exec(statement).all())

    def create(self, transaction: Transaction, *, budget_id: int) -> Transaction:
        """Create a new transaction; the account must belong to ``budget_id``."""
        with self.session_factory() as session:
            account = session.get(Account, transaction.account_id)
            if account is None or account.budget_id != budget_id:
                raise ValueError(f"Account {transaction.account_id} is not in budget {budget_id}")
            session.add(transaction)
            session.flush()
            session.refresh(transaction)
            return transaction

    def update(self, transaction: Transaction, *, budget_id: int) -> Transaction:
        """Update an existing transaction."""
        with self.session_factory() as session:
            account = session.get(Account, transaction.account_id)
            if account is None or account.budget_id != budget_id:
                raise ValueError(f"Account {transaction.account_id} is not in budget {budget_id}")
            session.add(transaction)
            session.flush()
            return transaction

    def delete(self, transaction_id: int, *, budget_id: int) -> None:
        """Delete a transaction by ID."""
        with self.session_factory() as session:
            transaction = self._get(session, transaction_id, budget_id)
            if transaction:
                session.delete(transaction)
                session.flush()

    # ------------------------------------------------------------------ transfers

    def create_transfer(self, transfer: Transfer, *, budget_id: int) -> Transfer:
        """Link two existing legs."""
        with self.session_factory() as session:
            for leg_id in (transfer.from_transaction_id, transfer.to_transaction_id):
                if self._get(session, leg_id, budget_id) is None:
                    raise ValueError(f"Transaction {leg_id} is not in budget {budget_id}")
            session.add(transfer)
            session.flush()
            session.refresh(transfer)
            return transfer

    @staticmethod
    def _get_transfer(session: Session, transfer_id: int, budget_id: int) -> Optional[Transfer]:
        statement = (
            select(Transfer)
            .join(Transaction, Transaction.id == Transfer.from_transaction_id)
            .join(Account, Account.id == Transaction.account_id)
            .where(Transfer.id == transfer_id, Account.budget_id == budget_id)
        )
        return session.exec(statement).first()

    def get_transfer(self, transfer_id: int, *, budget_id: int) -> Optional[Transfer]:
        with self.session_factory() as session:
            return self._get_transfer(session, transfer_id, budget_id)

    def transfer_for_transaction(self, transaction_id: int, *, budget_id: int) -> Optional[Transfer]:
        with self.session_factory() as session:
            statement = (
                select(Transfer)
                .join(Transaction, Transaction.id == Transfer.from_transaction_id)
                .join(Account, Account.id == Transaction.account_id)
                .where(Account.budget_id == budget_id)
                .where(
                    or_(
                        Transfer.from_transaction_id == transaction_id,
                        Transfer.to_transaction_id == transaction_id,
                    )
                )
            )
            return session.exec(statement).first()

    def delete_transfer(self, transfer_id: int, *, budget_id: int) -> None:
        """Delete the link and both legs."""
        with self.session_factory() as session:
            transfer = self._get_transfer(session, transfer_id, budget_id)
            if transfer is None:
                return
            legs = [
                self._get(session, leg_id, budget_id)
                for leg_id in (transfer.from_transaction_id, transfer.to_transaction_id)
            ]
            session.delete(transfer)
            session.flush()
            for leg in legs:
                if leg is not None:
                    session.delete(leg)
            session.flush()

    # ----------------------------------------------------------------- aggregates

    def category_activity(self, category_id: int, month: str, *, budget_id: int, today: date) -> int:
        """Sum of inflow minus outflow for a category in a month."""
        with self.session_factory() as session:
            statement = self._scoped(
                select(func.coalesce(func.sum(_NET), 0)), budget_id=budget_id, today=today, month=month
            ).where(Transaction.category_id == category_id)
            return int(session.exec(statement).one())

    def cash_spending(self, category_id: int, month: str, *, budget_id: int, today: date) -> int:
        """Outflow minus inflow for a category on non-credit accounts in a month."""
        with self.session_factory() as session:
            statement = (
                self._scoped(
                    select(func.coalesce(func.sum(_SPENT), 0)), budget_id=budget_id, today=today, month=month
                )
                .where(Transaction.category_id == category_id)
                .where(Account.type != CREDIT)
            )
            return int(session.exec(statement).one())

    def card_spending(self, account_id: int, month: str, *, budget_id: int, today: date) -> dict[int, int]:
        """Net spending (outflow minus inflow) per regular category on one card."""
        with self.session_factory() as session:
            statement = (
                self._scoped(
                    select(Transaction.category_id, func.sum(_SPENT)),
                    budget_id=budget_id,
                    today=today,
                    month=month,
                )
                .join(Category, Category.id == Transaction.category_id)
                .join(CategoryGroup, CategoryGroup.id == Category.group_id)
                .where(Transaction.account_id == account_id)
                .where(Category.linked_account_id.is_(None))  # type: ignore
                .where(CategoryGroup.is_income == False)  # noqa: E712
                .group_by(Transaction.category_id)
                .order_by(Transaction.category_id)  # type: ignore
            )
            return {int(category_id): int(total or 0) for category_id, total in session.exec(statement).all()}

    def card_payments(self, account_id: int, month: str, *, budget_id: int, today: date) -> int:
        """Uncategorized inflows into a card: payments made to it."""
        with self.session_factory() as session:
            statement = (
                self._scoped(
                    select(func.coalesce(func.sum(Transaction.inflow), 0)),
                    budget_id=budget_id,
                    today=today,
                    month=month,
                )
                .where(Transaction.account_id == account_id)
                .where(Transaction.category_id.is_(None))  # type: ignore
                .where(Transaction.inflow > 0)
            )
            return int(session.exec(statement).one())

    def cards_with_spending(
        self, category_id: int, month: str, *, budget_id: int, today: date
    ) -> list[int]:
        """Credit accounts that carry transactions of ``category_id`` in ``month``."""
        with self.session_factory() as session:
            statement = (
                self._scoped(select(Transaction.account_id), budget_id=budget_id, today=today, month=month)
                .where(Transaction.category_id == category_id)
                .where(Account.type == CREDIT)
                .distinct()
                .order_by(Transaction.account_id)  # type: ignore
            )
            return [int(account_id) for account_id in session.exec(statement).all()]

    def card_activity_months(self, account_id: int, *, budget_id: int, today: date) -> list[str]:
        """Months in which a card has any realized transaction."""
        with self.session_factory() as session:
            statement = (
                self._scoped(select(Transaction.date), budget_id=budget_id, today=today)
                .where(Transaction.account_id == account_id)
                .distinct()
            )
            return sorted({month_of(day) for day in session.exec(statement).all()})

    def cash_balance(self, *, budget_id: int, today: date) -> int:
        """Net of every non-credit account."""
        with self.session_factory() as session:
            statement = self._scoped(
                select(func.coalesce(func.sum(_NET), 0)), budget_id=budget_id, today=today
            ).where(Account.type != CREDIT)
            return int(session.exec(statement).one())

    def credit_balances(self, *, budget_id: int, today: date) -> dict[int, int]:
        """Balance per credit account."""
        with self.session_factory() as session:
            statement = (
                self._scoped(select(Transaction.account_id, func.sum(_NET)), budget_id=budget_id, today=today)
                .where(Account.type == CREDIT)
                .group_by(Transaction.account_id)
            )
            return {int(account_id): int(total or 0) for account_id, total in session.exec(statement).all()}

    def income_inflow(self, month: str, *, budget_id: int, today: date) -> int:
        """Inflows categorized to income groups on non-credit accounts in a month."""
        with self.session_factory() as session:
            statement = (
                self._scoped(
                    select(func.coalesce(func.sum(Transaction.inflow), 0)),
                    budget_id=budget_id,
                    today=today,
                    month=month,
                )
                .join(Category, Category.id == Transaction.category_id)
                .join(CategoryGroup, CategoryGroup.id == Category.group_id)
                .where(CategoryGroup.is_income == True)  # noqa: E712
                .where(Account.type != CREDIT)
            )
            return int(session.exec(statement).one())

    def account_totals(self, account_id: int, *, budget_id: int, today: date) -> dict[str, int]:
        """Running, cleared and uncleared balance of one account."""
        with self.session_factory() as session:
            statement = (
                self._scoped(select(Transaction.cleared, func.sum(_NET)), budget_id=budget_id, today=today)
                .where(Transaction.account_id == account_id)
                .group_by(Transaction.cleared)
            )
            by_state = {state: int(total or 0) for state, total in session.exec(statement).all()}
        cleared = by_state.get(CLEARED, 0) + by_state.get(RECONCILED, 0)
        uncleared = by_state.get(UNCLEARED, 0)
        return {"balance": cleared + uncleared, "cleared": cleared, "uncleared": uncleared}

    def earliest_date(self, *, budget_id: int) -> Optional[date]:
        with self.session_factory() as session:
            statement = self._scoped(select(func.min(Transaction.date)), budget_id=budget_id)
            return session.exec(statement).one()
