"""Per-operation context: one budget, one "today", repositories on one session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlmodel import Session

from .config import BaseConfig
from .domain.repositories import (
    AccountRepository,
    CategoryRepository,
    LedgerStore,
    TransactionRepository,
)
from .infra.database import bound_session_factory
from .infra.repositories import (
    SQLModelAccountRepository,
    SQLModelCategoryRepository,
    SQLModelLedgerStore,
    SQLModelTransactionRepository,
)
from .models.category import Category
from .months import month_of


@dataclass
class LedgerContext:
    """Everything an engine function needs for a single unit of work."""

    budget_id: int
    today: date
    config: BaseConfig
    ledger: LedgerStore
    transactions: TransactionRepository
    accounts: AccountRepository
    categories: CategoryRepository

    @property
    def current_month(self) -> str:
        return month_of(self.today)

    def category(self, category_id: Optional[int]) -> Optional[Category]:
        if category_id is None:
            return None
        return self.categories.get_by_id(category_id, budget_id=self.budget_id)

    def is_income(self, category: Category) -> bool:
        return bool(category.group is not None and category.group.is_income)


def create_ledger_context(
    session: Session, *, budget_id: int, today: date, config: BaseConfig
) -> LedgerContext:
    """Bind fresh repositories to ``session`` for one budget."""

    factory = bound_session_factory(session)
    return LedgerContext(
        budget_id=budget_id,
        today=today,
        config=config,
        ledger=SQLModelLedgerStore(factory),
        transactions=SQLModelTransactionRepository(factory),
        accounts=SQLModelAccountRepository(factory),
        categories=SQLModelCategoryRepository(factory),
    )
