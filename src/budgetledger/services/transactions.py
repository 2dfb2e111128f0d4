"""Transaction log operations and the ledger refresh they trigger."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Iterable, Optional

from ..errors import AccountNotFoundError, FinancialSafetyError, LedgerError
from ..logging_config import get_logger
from ..models.account import Account
from ..models.transaction import (
    CLEARED,
    CLEARED_STATES,
    RECONCILED,
    UNCLEARED,
    Transaction,
    Transfer,
)
from ..money import milliunit
from ..months import month_of
from .propagation import propagate, recompute, settle

if TYPE_CHECKING:  # pragma: no cover
    from ..context import LedgerContext

logger = get_logger(__name__)

TRANSFER_PAYEE_PREFIX = "Transfer : "
EDITABLE_FIELDS = frozenset(
    {"account_id", "date", "payee", "category_id", "memo", "outflow", "inflow", "cleared"}
)

# (account, category_id, month) touched by a change
Touch = tuple[Account, Optional[int], str]


def _validate_amounts(outflow: Any, inflow: Any) -> tuple[int, int]:
    outflow, inflow = milliunit(outflow), milliunit(inflow)
    if outflow < 0 or inflow < 0:
        raise FinancialSafetyError("Transaction outflow and inflow must be non-negative")
    return outflow, inflow


def _validate_cleared(cleared: str) -> str:
    if cleared not in CLEARED_STATES:
        raise ValueError(f"Unknown cleared state {cleared!r}")
    return cleared


def refresh_account_balances(ctx: "LedgerContext", account_id: int) -> Optional[Account]:
    """Recompute an account's cached balances from its realized transactions."""

    account = ctx.accounts.get_by_id(account_id, budget_id=ctx.budget_id)
    if account is None:
        return None
    totals = ctx.transactions.account_totals(account.id, budget_id=ctx.budget_id, today=ctx.today)
    account.balance = totals["balance"]
    account.cleared_balance = totals["cleared"]
    account.uncleared_balance = totals["uncleared"]
    return ctx.accounts.update(account, budget_id=ctx.budget_id)


def refresh_ledger(ctx: "LedgerContext", touched: Iterable[Touch]) -> None:
    """Settle touched categories, then re-fund touched cards."""

    category_months: set[tuple[int, str]] = set()
    card_months: dict[int, set[str]] = {}
    for account, category_id, month in touched:
        if category_id is not None:
            category_months.add((category_id, month))
        if account.is_credit:
            card_months.setdefault(account.id, set()).add(month)

    for category_id, month in sorted(category_months, key=lambda item: (item[1], item[0])):
        category = ctx.category(category_id)
        if category is not None:
            settle(ctx, category, month)

    for account_id, months in sorted(card_months.items()):
        payment = ctx.categories.get_by_linked_account(account_id, budget_id=ctx.budget_id)
        if payment is None:
            continue
        ordered = sorted(months)
        recompute(ctx, payment, ordered[0])
        propagate(ctx, payment, ordered[0], include=ordered[1:])


def record_transaction(
    ctx: "LedgerContext",
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
    """Persist a transaction and bring balances and the ledger up to date."""

    account = ctx.accounts.get_by_id(account_id, budget_id=ctx.budget_id)
    if account is None:
        logger.warning(
            f"Transaction for unknown account {account_id} ignored", extra={"budget_id": ctx.budget_id}
        )
        return None
    if category_id is not None and ctx.category(category_id) is None:
        logger.warning(
            f"Transaction for unknown category {category_id} ignored", extra={"budget_id": ctx.budget_id}
        )
        return None
    outflow, inflow = _validate_amounts(outflow, inflow)
    transaction = ctx.transactions.create(
        Transaction(
            account_id=account.id,
            date=date,
            payee=payee,
            category_id=category_id,
            memo=memo,
            outflow=outflow,
            inflow=inflow,
            cleared=_validate_cleared(cleared),
        ),
        budget_id=ctx.budget_id,
    )
    refresh_account_balances(ctx, account.id)
    refresh_ledger(ctx, [(account, category_id, month_of(date))])
    return transaction


def update_transaction(
    ctx: "LedgerContext", transaction_id: int, **changes: Any
) -> Optional[Transaction]:
    """Apply field changes; both the old and new placement get refreshed."""

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update transaction fields: {', '.join(sorted(unknown))}")
    transaction = ctx.transactions.get_by_id(transaction_id, budget_id=ctx.budget_id)
    if transaction is None:
        return None
    old_account = ctx.accounts.get_by_id(transaction.account_id, budget_id=ctx.budget_id)
    new_account = old_account
    if "account_id" in changes:
        new_account = ctx.accounts.get_by_id(changes["account_id"], budget_id=ctx.budget_id)
        if new_account is None:
            return None
    if changes.get("category_id") is not None and ctx.category(changes["category_id"]) is None:
        return None

    old_touch: Touch = (old_account, transaction.category_id, month_of(transaction.date))
    outflow, inflow = _validate_amounts(
        changes.get("outflow", transaction.outflow), changes.get("inflow", transaction.inflow)
    )
    for name, value in changes.items():
        setattr(transaction, name, value)
    transaction.outflow, transaction.inflow = outflow, inflow
    _validate_cleared(transaction.cleared)
    ctx.transactions.update(transaction, budget_id=ctx.budget_id)

    refresh_account_balances(ctx, old_account.id)
    if new_account.id != old_account.id:
        refresh_account_balances(ctx, new_account.id)
    refresh_ledger(ctx, [old_touch, (new_account, transaction.category_id, month_of(transaction.date))])
    return transaction


def delete_transaction(ctx: "LedgerContext", transaction_id: int) -> bool:
    """Remove a transaction; a transfer leg takes its whole transfer with it."""

    transaction = ctx.transactions.get_by_id(transaction_id, budget_id=ctx.budget_id)
    if transaction is None:
        return False
    transfer = ctx.transactions.transfer_for_transaction(transaction.id, budget_id=ctx.budget_id)
    if transfer is not None:
        return delete_transfer(ctx, transfer.id)

    account = ctx.accounts.get_by_id(transaction.account_id, budget_id=ctx.budget_id)
    touch: Touch = (account, transaction.category_id, month_of(transaction.date))
    ctx.transactions.delete(transaction.id, budget_id=ctx.budget_id)
    refresh_account_balances(ctx, account.id)
    refresh_ledger(ctx, [touch])
    return True


def create_transfer(
    ctx: "LedgerContext",
    *,
    from_account_id: int,
    to_account_id: int,
    amount: int,
    date: date,
    memo: str = "",
) -> Transfer:
    """Move money between two accounts as a pair of linked, uncategorized legs.

    Raises:
        AccountNotFoundError: either account is missing from the budget
    """

    source = ctx.accounts.get_by_id(from_account_id, budget_id=ctx.budget_id)
    if source is None:
        raise AccountNotFoundError(from_account_id, budget_id=ctx.budget_id)
    destination = ctx.accounts.get_by_id(to_account_id, budget_id=ctx.budget_id)
    if destination is None:
        raise AccountNotFoundError(to_account_id, budget_id=ctx.budget_id)
    if source.id == destination.id:
        raise LedgerError("Cannot transfer an account to itself", operation="create_transfer")
    amount = milliunit(amount)
    if amount <= 0:
        raise FinancialSafetyError("Transfer amount must be positive")

    outgoing = ctx.transactions.create(
        Transaction(
            account_id=source.id,
            date=date,
            payee=f"{TRANSFER_PAYEE_PREFIX}{destination.name}",
            memo=memo,
            outflow=amount,
        ),
        budget_id=ctx.budget_id,
    )
    incoming = ctx.transactions.create(
        Transaction(
            account_id=destination.id,
            date=date,
            payee=f"{TRANSFER_PAYEE_PREFIX}{source.name}",
            memo=memo,
            inflow=amount,
        ),
        budget_id=ctx.budget_id,
    )
    transfer = ctx.transactions.create_transfer(
        Transfer(from_transaction_id=outgoing.id, to_transaction_id=incoming.id),
        budget_id=ctx.budget_id,
    )
    refresh_account_balances(ctx, source.id)
    refresh_account_balances(ctx, destination.id)
    month = month_of(date)
    refresh_ledger(ctx, [(source, None, month), (destination, None, month)])
    logger.info(
        f"Transfer {transfer.id}: {amount} from account {source.id} to {destination.id}",
        extra={"budget_id": ctx.budget_id, "transfer_id": transfer.id},
    )
    return transfer


def delete_transfer(ctx: "LedgerContext", transfer_id: int) -> bool:
    transfer = ctx.transactions.get_transfer(transfer_id, budget_id=ctx.budget_id)
    if transfer is None:
        return False
    touched: list[Touch] = []
    for leg_id in (transfer.from_transaction_id, transfer.to_transaction_id):
        leg = ctx.transactions.get_by_id(leg_id, budget_id=ctx.budget_id)
        if leg is None:
            continue
        account = ctx.accounts.get_by_id(leg.account_id, budget_id=ctx.budget_id)
        touched.append((account, leg.category_id, month_of(leg.date)))
    ctx.transactions.delete_transfer(transfer.id, budget_id=ctx.budget_id)
    for account, _category_id, _month in touched:
        refresh_account_balances(ctx, account.id)
    refresh_ledger(ctx, touched)
    return True


def toggle_cleared(ctx: "LedgerContext", transaction_id: int) -> Optional[Transaction]:
    """Flip Cleared and Uncleared; reconciled transactions are left alone."""

    transaction = ctx.transactions.get_by_id(transaction_id, budget_id=ctx.budget_id)
    if transaction is None:
        return None
    if transaction.cleared == RECONCILED:
        return transaction
    transaction.cleared = UNCLEARED if transaction.cleared == CLEARED else CLEARED
    ctx.transactions.update(transaction, budget_id=ctx.budget_id)
    refresh_account_balances(ctx, transaction.account_id)
    return transaction


def reconcile_account(ctx: "LedgerContext", account_id: int) -> Optional[int]:
    """Lock every cleared, realized transaction of an account; returns how many."""

    account = ctx.accounts.get_by_id(account_id, budget_id=ctx.budget_id)
    if account is None:
        return None
    count = 0
    for transaction in ctx.transactions.list_for_account(account.id, budget_id=ctx.budget_id):
        if transaction.cleared == CLEARED and transaction.date <= ctx.today:
            transaction.cleared = RECONCILED
            ctx.transactions.update(transaction, budget_id=ctx.budget_id)
            count += 1
    refresh_account_balances(ctx, account.id)
    return count
