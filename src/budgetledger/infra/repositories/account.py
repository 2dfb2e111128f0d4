"""SQLModel implementation of Account repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.account import Account


class SQLModelAccountRepository:
    """SQLModel-based account repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, account_id: int, *, budget_id: int) -> Optional[Account]:
        """Retrieve an account by ID."""
        with self.session_factory() as session:
            return session.exec(
                select(Account).where(Account.id == account_id, Account.budget_id == budget_id)
            ).first()

    def list_all(self, *, budget_id: int, account_type: Optional[str] = None) -> list[Account]:
        """List accounts, optionally filtered by type."""
        with self.session_factory() as session:
            statement = select(Account).where(Account.budget_id == budget_id)
            if account_type:
                statement = statement.where(Account.type == account_type)
            statement = statement.order_by(Account.name, Account.id)  # type: ignore
            return list(session.exec(statement).all())

    def create(self, account: Account, *, budget_id: int) -> Account:
        """Create a new account."""
        with self.session_factory() as session:
            account.budget_id = budget_id
            session.add(account)
            session.flush()
            session.refresh(account)
            return account

    def update(self, account: Account, *, budget_id: int) -> Account:
        """Update an existing account."""
        with self.session_factory() as session:
            account.budget_id = budget_id
            session.add(account)
            session.flush()
            return account
