"""LedgerService: the engine's public operations, one unit of work each.

Every call opens one session, binds fresh repositories to it for a single
budget and a single "today", and commits only when the whole operation
(propagation tail included) succeeded. Store conflicts are retried.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Optional, TypeVar

from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from ..clock import Clock, SystemClock
from ..config import BaseConfig
from ..context import LedgerContext, create_ledger_context
from ..devtools import dev_log, enforce_invariants
from ..errors import LedgerUnavailableError
from ..infra.database import bound_session_factory
from ..infra.repositories import SQLModelBudgetRepository
from ..logging_config import get_logger
from ..models.account import ACCOUNT_TYPES, CHECKING, Account
from ..models.budget import Budget
from ..models.budget_month import BudgetMonth
from ..models.category import Category, CategoryGroup
from ..models.transaction import UNCLEARED, Transaction, Transfer
from ..months import parse_month
from . import transactions as txn_ops
from .assignment import update_assignment
from .credit_card import ensure_payment_category
from .integrity import LedgerViolation, verify_ledger
from .month_view import LedgerLine, ledger_for_month, month_range
from .move_money import MoveResult, move_money
from .overspending import overspending_types
from .propagation import propagate, recompute, refresh_all, settle
from .ready_to_assign import RTABreakdown, ready_to_assign, ready_to_assign_breakdown

logger = get_logger(__name__)

T = TypeVar("T")


def _check_month(month: str) -> str:
    parse_month(month)
    return month


class LedgerService:
    """Facade over the ledger engine for an API or CLI layer."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        config: Optional[BaseConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.session_factory = session_factory
        self.config = config or BaseConfig()
        self.clock = clock or SystemClock()

    # ------------------------------------------------------------------ plumbing

    def _run(
        self,
        operation: str,
        budget_id: int,
        work: Callable[[LedgerContext], T],
        *,
        mutation: bool = True,
    ) -> T:
        attempts = self.config.MAX_RETRIES
        for attempt in range(1, attempts + 1):
            try:
                with self.session_factory() as session:
                    ctx = create_ledger_context(
                        session, budget_id=budget_id, today=self.clock.today(), config=self.config
                    )
                    result = work(ctx)
                    if mutation and self.config.STRICT_INVARIANTS:
                        touched = ctx.ledger.touched_categories
                        if touched:
                            enforce_invariants(
                                self.config, verify_ledger(ctx, set(touched)), operation=operation
                            )
                    return result
            except OperationalError as exc:
                logger.warning(
                    f"{operation} hit a store conflict (attempt {attempt}/{attempts})",
                    extra={"budget_id": budget_id, "operation": operation},
                )
                dev_log(self.config, f"{operation} retry", exc=exc, context={"attempt": attempt})
                if attempt == attempts:
                    raise LedgerUnavailableError(
                        f"{operation} failed after {attempts} attempt(s); nothing was written",
                        operation=operation,
                    ) from exc
        raise AssertionError("unreachable")  # pragma: no cover

    def _read(self, operation: str, budget_id: int, work: Callable[[LedgerContext], T]) -> T:
        return self._run(operation, budget_id, work, mutation=False)

    # --------------------------------------------------------------- registries

    def create_budget(self, name: str, *, currency_code: str = "USD") -> Budget:
        with self.session_factory() as session:
            repo = SQLModelBudgetRepository(bound_session_factory(session))
            budget = repo.create(Budget(name=name, currency_code=currency_code))
            logger.info(f"Created budget {budget.id}", extra={"budget_id": budget.id})
            return budget

    def get_budget(self, budget_id: int) -> Optional[Budget]:
        with self.session_factory() as session:
            return SQLModelBudgetRepository(bound_session_factory(session)).get_by_id(budget_id)

    def create_account(self, budget_id: int, name: str, account_type: str = CHECKING) -> Account:
        """Create an account; credit accounts get their CC Payment category."""

        if account_type not in ACCOUNT_TYPES:
            raise ValueError(f"Unknown account type {account_type!r}")

        def work(ctx: LedgerContext) -> Account:
            account = ctx.accounts.create(Account(name=name, type=account_type), budget_id=ctx.budget_id)
            ensure_payment_category(ctx, account)
            return account

        return self._run("create_account", budget_id, work)

    def create_category_group(self, budget_id: int, name: str, *, is_income: bool = False) -> CategoryGroup:
        return self._run(
            "create_category_group",
            budget_id,
            lambda ctx: ctx.categories.create_group(
                CategoryGroup(name=name, is_income=is_income), budget_id=ctx.budget_id
            ),
        )

    def create_category(self, budget_id: int, group_id: int, name: str) -> Optional[Category]:
        def work(ctx: LedgerContext) -> Optional[Category]:
            if ctx.categories.get_group(group_id, budget_id=ctx.budget_id) is None:
                return None
            return ctx.categories.create_category(
                Category(group_id=group_id, name=name), budget_id=ctx.budget_id
            )

        return self._run("create_category", budget_id, work)

    def ensure_credit_card_payment_category(
        self, budget_id: int, account_id: int, name: Optional[str] = None
    ) -> Optional[Category]:
        """Find or create the CC Payment category; a new one is funded from past card activity."""

        def work(ctx: LedgerContext) -> Optional[Category]:
            account = ctx.accounts.get_by_id(account_id, budget_id=ctx.budget_id)
            if account is None:
                return None
            category, created = ensure_payment_category(ctx, account, name)
            if category is not None and created:
                months = ctx.transactions.card_activity_months(
                    account.id, budget_id=ctx.budget_id, today=ctx.today
                )
                if months:
                    recompute(ctx, category, months[0])
                    propagate(ctx, category, months[0], include=months[1:])
            return category

        return self._run("ensure_credit_card_payment_category", budget_id, work)

    # ------------------------------------------------------------- transactions

    def record_transaction(
        self,
        budget_id: int,
        *,
        account_id: int,
        date: date,
        payee: str = "",
        category_id: Optional[int] = None,
        memo: str = "",
        outflow: int = 0,
        inflow: int = 0,
        cleared: str = UNCLEARED,
    ) -> Optional[Transaction]:
        return self._run(
            "record_transaction",
            budget_id,
            lambda ctx: txn_ops.record_transaction(
                ctx,
                account_id=account_id,
                date=date,
                payee=payee,
                category_id=category_id,
                memo=memo,
                outflow=outflow,
                inflow=inflow,
                cleared=cleared,
            ),
        )

    def update_transaction(self, budget_id: int, transaction_id: int, **changes: Any) -> Optional[Transaction]:
        return self._run(
            "update_transaction",
            budget_id,
            lambda ctx: txn_ops.update_transaction(ctx, transaction_id, **changes),
        )

    def delete_transaction(self, budget_id: int, transaction_id: int) -> bool:
        return self._run(
            "delete_transaction", budget_id, lambda ctx: txn_ops.delete_transaction(ctx, transaction_id)
        )

    def create_transfer(
        self,
        budget_id: int,
        *,
        from_account_id: int,
        to_account_id: int,
        amount: int,
        date: date,
        memo: str = "",
    ) -> Transfer:
        return self._run(
            "create_transfer",
            budget_id,
            lambda ctx: txn_ops.create_transfer(
                ctx,
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                amount=amount,
                date=date,
                memo=memo,
            ),
        )

    def delete_transfer(self, budget_id: int, transfer_id: int) -> bool:
        return self._run(
            "delete_transfer", budget_id, lambda ctx: txn_ops.delete_transfer(ctx, transfer_id)
        )

    def toggle_cleared(self, budget_id: int, transaction_id: int) -> Optional[Transaction]:
        return self._run(
            "toggle_cleared", budget_id, lambda ctx: txn_ops.toggle_cleared(ctx, transaction_id)
        )

    def reconcile_account(self, budget_id: int, account_id: int) -> Optional[int]:
        return self._run(
            "reconcile_account", budget_id, lambda ctx: txn_ops.reconcile_account(ctx, account_id)
        )

    def refresh_account_balances(self, budget_id: int, account_id: int) -> Optional[Account]:
        return self._run(
            "refresh_account_balances",
            budget_id,
            lambda ctx: txn_ops.refresh_account_balances(ctx, account_id),
        )

    # ------------------------------------------------------------------- ledger

    def update_assignment(
        self, budget_id: int, category_id: int, month: str, amount: Any
    ) -> Optional[BudgetMonth]:
        _check_month(month)

        def work(ctx: LedgerContext) -> Optional[BudgetMonth]:
            category = ctx.category(category_id)
            if category is None:
                return None
            return update_assignment(ctx, category, month, amount)

        return self._run("update_assignment", budget_id, work)

    def move_money(
        self, budget_id: int, month: str, source_category_id: int, target_category_id: int, amount: Any
    ) -> Optional[MoveResult]:
        _check_month(month)
        return self._run(
            "move_money",
            budget_id,
            lambda ctx: move_money(ctx, month, source_category_id, target_category_id, amount),
        )

    def refresh_activity(self, budget_id: int, category_id: int, month: str) -> Optional[BudgetMonth]:
        _check_month(month)

        def work(ctx: LedgerContext) -> Optional[BudgetMonth]:
            category = ctx.category(category_id)
            if category is None:
                return None
            return settle(ctx, category, month)

        return self._run("refresh_activity", budget_id, work)

    def refresh_all_activity(self, budget_id: int, month: str) -> int:
        """Recompute every category for ``month``; safe to re-run."""

        _check_month(month)
        return self._run("refresh_all_activity", budget_id, lambda ctx: refresh_all(ctx, month))

    # -------------------------------------------------------------------- reads

    def get_ledger_for_month(self, budget_id: int, month: str) -> list[LedgerLine]:
        _check_month(month)
        return self._read("get_ledger_for_month", budget_id, lambda ctx: ledger_for_month(ctx, month))

    def get_ready_to_assign(self, budget_id: int, month: str) -> int:
        _check_month(month)
        return self._read("get_ready_to_assign", budget_id, lambda ctx: ready_to_assign(ctx, month))

    def get_ready_to_assign_breakdown(self, budget_id: int, month: str) -> RTABreakdown:
        _check_month(month)
        return self._read(
            "get_ready_to_assign_breakdown",
            budget_id,
            lambda ctx: ready_to_assign_breakdown(ctx, month),
        )

    def get_overspending_types(self, budget_id: int, month: str) -> dict[int, str]:
        _check_month(month)
        return self._read(
            "get_overspending_types", budget_id, lambda ctx: overspending_types(ctx, month)
        )

    def get_month_range(self, budget_id: int) -> tuple[str, str]:
        return self._read("get_month_range", budget_id, month_range)

    def verify_ledger(self, budget_id: int) -> list[LedgerViolation]:
        return self._read("verify_ledger", budget_id, verify_ledger)
