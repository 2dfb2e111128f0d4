"""SQLModel implementation of Budget repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.budget import Budget


class SQLModelBudgetRepository:
    """SQLModel-based budget repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, budget_id: int) -> Optional[Budget]:
        """Retrieve a budget by ID."""
        with self.session_factory() as session:
            return session.get(Budget, budget_id)

    def list_all(self) -> list[Budget]:
        """List all budgets."""
        with self.session_factory() as session:
            statement = select(Budget).order_by(Budget.id)  # type: ignore
            return list(session.exec(statement).all())

    def create(self, budget: Budget) -> Budget:
        """Create a new budget."""
        with self.session_factory() as session:
            session.add(budget)
            session.flush()
            session.refresh(budget)
            return budget
