"""Integration tests for transaction log operations and account balances."""

from __future__ import annotations

from datetime import date

import pytest
from sqlmodel import select

from budgetledger.errors import AccountNotFoundError, FinancialSafetyError, LedgerError
from budgetledger.models import Transaction
from budgetledger.models.transaction import CLEARED, RECONCILED, UNCLEARED

pytestmark = pytest.mark.integration


@pytest.fixture
def all_transactions(session_factory):
    def _all() -> list[Transaction]:
        with session_factory() as session:
            return list(session.exec(select(Transaction).order_by(Transaction.id)).all())

    return _all


def test_unknown_account_or_category_is_ignored(service, budget, checking, all_transactions):
    assert service.record_transaction(budget.id, account_id=9999, date=date(2024, 3, 1), outflow=10) is None
    assert (
        service.record_transaction(
            budget.id, account_id=checking.id, date=date(2024, 3, 1), category_id=9999, outflow=10
        )
        is None
    )
    assert all_transactions() == []


def test_negative_amounts_are_rejected(service, budget, checking):
    with pytest.raises(FinancialSafetyError):
        service.record_transaction(budget.id, account_id=checking.id, date=date(2024, 3, 1), outflow=-5)


def test_recording_updates_activity_and_balances(service, budget, category_factory, checking, row_of):
    groceries = category_factory("Groceries")
    service.update_assignment(budget.id, groceries.id, "2024-03", 500)
    service.record_transaction(
        budget.id,
        account_id=checking.id,
        date=date(2024, 3, 2),
        payee="Market",
        category_id=groceries.id,
        outflow=120,
        cleared=CLEARED,
    )
    service.record_transaction(
        budget.id, account_id=checking.id, date=date(2024, 3, 3), category_id=groceries.id, inflow=20
    )

    row = row_of(groceries, "2024-03")
    assert (row.activity, row.available) == (-100, 400)
    account = service.refresh_account_balances(budget.id, checking.id)
    assert (account.balance, account.cleared_balance, account.uncleared_balance) == (-100, -120, 20)


def test_moving_a_transaction_refreshes_both_sides(service, budget, category_factory, checking, spend, row_of):
    groceries = category_factory("Groceries")
    dining = category_factory("Dining")
    service.update_assignment(budget.id, groceries.id, "2024-02", 300)
    txn = spend(checking, groceries, 100, date(2024, 2, 10))
    assert row_of(groceries, "2024-02").available == 200

    service.update_transaction(budget.id, txn.id, category_id=dining.id, date=date(2024, 3, 1))

    assert row_of(groceries, "2024-02").available == 300
    assert row_of(dining, "2024-02") is None
    assert row_of(dining, "2024-03").activity == -100
    assert service.verify_ledger(budget.id) == []


def test_update_rejects_unknown_fields(service, budget, category_factory, checking, spend):
    txn = spend(checking, category_factory("Groceries"), 100, date(2024, 3, 1))
    with pytest.raises(ValueError):
        service.update_transaction(budget.id, txn.id, id=7)


def test_deleting_a_transaction_reverts_activity(service, budget, category_factory, checking, spend, row_of):
    groceries = category_factory("Groceries")
    txn = spend(checking, groceries, 100, date(2024, 3, 1))
    assert row_of(groceries, "2024-03").available == -100

    assert service.delete_transaction(budget.id, txn.id) is True
    assert row_of(groceries, "2024-03") is None
    assert service.delete_transaction(budget.id, txn.id) is False


def test_transfer_creates_two_linked_legs(service, budget, checking, account_factory, all_transactions):
    savings = account_factory("Savings", "savings")
    transfer = service.create_transfer(
        budget.id, from_account_id=checking.id, to_account_id=savings.id, amount=250, date=date(2024, 3, 4)
    )

    outgoing, incoming = all_transactions()
    assert (transfer.from_transaction_id, transfer.to_transaction_id) == (outgoing.id, incoming.id)
    assert (outgoing.payee, outgoing.outflow, outgoing.category_id) == ("Transfer : Savings", 250, None)
    assert (incoming.payee, incoming.inflow) == ("Transfer : Checking", 250)
    assert service.refresh_account_balances(budget.id, checking.id).balance == -250
    assert service.refresh_account_balances(budget.id, savings.id).balance == 250


def test_transfer_to_missing_account_is_a_hard_failure(service, budget, checking, all_transactions):
    with pytest.raises(AccountNotFoundError) as excinfo:
        service.create_transfer(
            budget.id, from_account_id=checking.id, to_account_id=4242, amount=100, date=date(2024, 3, 4)
        )
    assert excinfo.value.account_id == 4242
    assert all_transactions() == []


def test_transfer_to_same_account_rejected(service, budget, checking):
    with pytest.raises(LedgerError):
        service.create_transfer(
            budget.id, from_account_id=checking.id, to_account_id=checking.id, amount=100, date=date(2024, 3, 4)
        )


def test_deleting_one_leg_removes_the_transfer(service, budget, checking, account_factory, all_transactions):
    savings = account_factory("Savings", "savings")
    transfer = service.create_transfer(
        budget.id, from_account_id=checking.id, to_account_id=savings.id, amount=250, date=date(2024, 3, 4)
    )
    assert service.delete_transaction(budget.id, transfer.to_transaction_id) is True
    assert all_transactions() == []
    assert service.refresh_account_balances(budget.id, checking.id).balance == 0
    assert service.delete_transfer(budget.id, transfer.id) is False


def test_toggle_cleared_and_reconcile(service, budget, checking):
    first = service.record_transaction(budget.id, account_id=checking.id, date=date(2024, 3, 1), inflow=1000)
    second = service.record_transaction(budget.id, account_id=checking.id, date=date(2024, 3, 2), outflow=300)

    assert service.toggle_cleared(budget.id, first.id).cleared == CLEARED
    account = service.refresh_account_balances(budget.id, checking.id)
    assert (account.cleared_balance, account.uncleared_balance) == (1000, -300)

    assert service.reconcile_account(budget.id, checking.id) == 1
    assert service.toggle_cleared(budget.id, first.id).cleared == RECONCILED
    assert service.toggle_cleared(budget.id, second.id).cleared == CLEARED
    assert service.toggle_cleared(budget.id, second.id).cleared == UNCLEARED
    assert service.reconcile_account(budget.id, 9999) is None
