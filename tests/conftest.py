"""Pytest configuration and shared fixtures for ledger tests.

Every test gets its own SQLite file, a pinned clock and a LedgerService
running with strict invariants, so the real data directory is never touched.
"""

from __future__ import annotations

from datetime import date

import pytest
from sqlmodel import Session, select

from budgetledger.clock import FixedClock
from budgetledger.config import TestConfig
from budgetledger.context import create_ledger_context
from budgetledger.infra.database import create_db_engine, create_session_factory, init_database
from budgetledger.models import Account, BudgetMonth, Category, CategoryGroup
from budgetledger.models.account import CHECKING
from budgetledger.services.ledger_service import LedgerService

TODAY = date(2024, 3, 15)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Test configuration pointing at a throwaway data directory and database."""

    monkeypatch.setenv("BUDGETLEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("BUDGETLEDGER_DATABASE_URL", f"sqlite:///{tmp_path / 'ledger-test.db'}")
    return TestConfig()


@pytest.fixture
def db_engine(config):
    """Create an isolated SQLite database with all tables for each test.

    Yields:
        Engine: SQLModel engine connected to the test database
    """
    engine = create_db_engine(config)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    """Session factory matching the one the service uses in production."""

    return create_session_factory(db_engine)


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def service(session_factory, config, clock) -> LedgerService:
    return LedgerService(session_factory, config=config, clock=clock)


@pytest.fixture
def ledger_context(db_engine, config, budget):
    """Open a LedgerContext for direct engine-function tests; commits on exit."""

    sessions: list[Session] = []

    def _open(today: date = TODAY):
        session = Session(db_engine, expire_on_commit=False)
        sessions.append(session)
        return create_ledger_context(session, budget_id=budget.id, today=today, config=config)

    yield _open

    for session in sessions:
        session.commit()
        session.close()


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def budget(service):
    """Default budget every factory scopes to."""

    return service.create_budget("Household")


@pytest.fixture
def group_factory(service, budget):
    """Factory for category groups."""

    def _create_group(name: str = "Everyday", *, is_income: bool = False, budget_id: int | None = None) -> CategoryGroup:
        return service.create_category_group(budget_id or budget.id, name, is_income=is_income)

    return _create_group


@pytest.fixture
def default_group(group_factory):
    return group_factory("Everyday")


@pytest.fixture
def category_factory(service, budget, default_group):
    """Factory for regular categories (in the default group unless told otherwise)."""

    def _create_category(
        name: str = "Groceries", *, group_id: int | None = None, budget_id: int | None = None
    ) -> Category:
        return service.create_category(budget_id or budget.id, group_id or default_group.id, name)

    return _create_category


@pytest.fixture
def income_category(service, budget, group_factory):
    group = group_factory("Income", is_income=True)
    return service.create_category(budget.id, group.id, "Inflow: Ready to Assign")


@pytest.fixture
def account_factory(service, budget):
    """Factory for accounts; credit accounts come with their CC Payment category."""

    def _create_account(
        name: str = "Checking", account_type: str = CHECKING, *, budget_id: int | None = None
    ) -> Account:
        return service.create_account(budget_id or budget.id, name, account_type)

    return _create_account


@pytest.fixture
def checking(account_factory):
    return account_factory("Checking")


@pytest.fixture
def visa(account_factory):
    return account_factory("Visa", "credit")


@pytest.fixture
def spend(service, budget):
    """Record an outflow (amount in Milliunits)."""

    def _spend(account, category, amount: int, on: date, *, budget_id: int | None = None):
        return service.record_transaction(
            budget_id or budget.id,
            account_id=account.id,
            date=on,
            payee="Store",
            category_id=category.id if category is not None else None,
            outflow=amount,
        )

    return _spend


@pytest.fixture
def earn(service, budget, income_category):
    """Record income on a cash account."""

    def _earn(account, amount: int, on: date):
        return service.record_transaction(
            budget.id,
            account_id=account.id,
            date=on,
            payee="Employer",
            category_id=income_category.id,
            inflow=amount,
        )

    return _earn


@pytest.fixture
def row_of(session_factory, budget):
    """Read a persisted ledger row (or None)."""

    def _row_of(category, month: str, *, budget_id: int | None = None) -> BudgetMonth | None:
        with session_factory() as session:
            return session.exec(
                select(BudgetMonth)
                .where(BudgetMonth.budget_id == (budget_id or budget.id))
                .where(BudgetMonth.category_id == category.id)
                .where(BudgetMonth.month == month)
            ).first()

    return _row_of


@pytest.fixture
def payment_category_of(session_factory):
    """CC Payment category linked to an account."""

    def _payment_category_of(account) -> Category | None:
        with session_factory() as session:
            return session.exec(select(Category).where(Category.linked_account_id == account.id)).first()

    return _payment_category_of


@pytest.fixture
def ledger_snapshot(session_factory, budget):
    """Every ledger row of the default budget as comparable tuples."""

    def _snapshot() -> list[tuple[int, str, int, int, int]]:
        with session_factory() as session:
            rows = session.exec(
                select(BudgetMonth)
                .where(BudgetMonth.budget_id == budget.id)
                .order_by(BudgetMonth.category_id, BudgetMonth.month)
            ).all()
            return [(r.category_id, r.month, r.assigned, r.activity, r.available) for r in rows]

    return _snapshot
