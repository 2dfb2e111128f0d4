"""Unit tests for the SQLModel repositories behind the ledger engine."""

from __future__ import annotations

from datetime import date

import pytest

from budgetledger.infra.repositories import SQLModelBudgetRepository
from budgetledger.models import Category

TODAY = date(2024, 3, 15)


def _row(ctx, category, month, assigned, available=None):
    return ctx.ledger.upsert(
        category.id,
        month,
        budget_id=ctx.budget_id,
        assigned=assigned,
        activity=0,
        available=assigned if available is None else available,
    )


def test_upsert_deletes_ghost_rows(ledger_context, category_factory):
    groceries = category_factory("Groceries")
    ctx = ledger_context()

    row = _row(ctx, groceries, "2024-01", 100)
    assert (row.assigned, row.available) == (100, 100)

    assert _row(ctx, groceries, "2024-01", 0) is None
    assert ctx.ledger.get(groceries.id, "2024-01", budget_id=ctx.budget_id) is None
    assert _row(ctx, groceries, "2024-02", 0) is None
    assert ctx.ledger.touched_categories == {groceries.id}


def test_chain_navigation_is_month_ordered(ledger_context, category_factory):
    groceries = category_factory("Groceries")
    ctx = ledger_context()
    for month in ("2024-05", "2024-01", "2024-03"):
        _row(ctx, groceries, month, 10)

    assert ctx.ledger.latest_before(groceries.id, "2024-04", budget_id=ctx.budget_id).month == "2024-03"
    assert ctx.ledger.latest_before(groceries.id, "2024-01", budget_id=ctx.budget_id) is None
    later = ctx.ledger.rows_after(groceries.id, "2024-01", budget_id=ctx.budget_id, for_update=True)
    assert [row.month for row in later] == ["2024-03", "2024-05"]


def test_latest_month_with_at_least(ledger_context, category_factory):
    rent = category_factory("Rent")
    food = category_factory("Food")
    ctx = ledger_context()
    _row(ctx, rent, "2024-01", 100)
    _row(ctx, food, "2024-01", 50)
    _row(ctx, rent, "2024-02", 100)

    find = ctx.ledger.latest_month_with_at_least
    assert find(2, budget_id=ctx.budget_id, up_to="2024-02") == "2024-01"
    assert find(1, budget_id=ctx.budget_id, up_to="2024-02") == "2024-02"
    assert find(1, budget_id=ctx.budget_id, up_to="2023-12") is None
    assert find(3, budget_id=ctx.budget_id, up_to="2024-12") is None


def test_sum_assigned_skips_income(ledger_context, category_factory, income_category):
    rent = category_factory("Rent")
    ctx = ledger_context()
    _row(ctx, rent, "2024-01", 100)
    _row(ctx, rent, "2024-03", 40)
    _row(ctx, income_category, "2024-01", 999)

    assert ctx.ledger.sum_assigned(budget_id=ctx.budget_id, month="2024-01") == 100
    assert ctx.ledger.sum_assigned(budget_id=ctx.budget_id, after="2024-01") == 40
    assert [row.category_id for row, _ in ctx.ledger.rows_for_month("2024-01", budget_id=ctx.budget_id)] == [
        rent.id
    ]


def test_aggregates_ignore_future_transactions(ledger_context, category_factory, checking, spend):
    groceries = category_factory("Groceries")
    spend(checking, groceries, 100, date(2024, 3, 10))
    spend(checking, groceries, 50, date(2024, 3, 20))
    ctx = ledger_context()

    activity = ctx.transactions.category_activity
    assert activity(groceries.id, "2024-03", budget_id=ctx.budget_id, today=TODAY) == -100
    assert activity(groceries.id, "2024-03", budget_id=ctx.budget_id, today=date(2024, 3, 31)) == -150
    assert ctx.transactions.cash_spending(groceries.id, "2024-03", budget_id=ctx.budget_id, today=TODAY) == 100
    assert ctx.transactions.cash_balance(budget_id=ctx.budget_id, today=TODAY) == -100
    assert ctx.transactions.earliest_date(budget_id=ctx.budget_id) == date(2024, 3, 10)


def test_card_aggregates(service, budget, ledger_context, category_factory, income_category, checking, visa, spend):
    groceries = category_factory("Groceries")
    spend(visa, groceries, 100, date(2024, 3, 5))
    service.record_transaction(
        budget.id, account_id=visa.id, date=date(2024, 3, 6), category_id=income_category.id, inflow=30
    )
    service.create_transfer(
        budget.id, from_account_id=checking.id, to_account_id=visa.id, amount=50, date=date(2024, 3, 7)
    )
    ctx = ledger_context()
    tx = ctx.transactions

    assert tx.card_spending(visa.id, "2024-03", budget_id=ctx.budget_id, today=TODAY) == {groceries.id: 100}
    assert tx.card_payments(visa.id, "2024-03", budget_id=ctx.budget_id, today=TODAY) == 50
    assert tx.cards_with_spending(groceries.id, "2024-03", budget_id=ctx.budget_id, today=TODAY) == [visa.id]
    assert tx.card_activity_months(visa.id, budget_id=ctx.budget_id, today=TODAY) == ["2024-03"]
    assert tx.credit_balances(budget_id=ctx.budget_id, today=TODAY) == {visa.id: -20}
    assert tx.cash_spending(groceries.id, "2024-03", budget_id=ctx.budget_id, today=TODAY) == 0
    assert tx.income_inflow("2024-03", budget_id=ctx.budget_id, today=TODAY) == 0


def test_categories_are_budget_scoped(service, ledger_context, category_factory):
    groceries = category_factory("Groceries")
    other = service.create_budget("Other")
    foreign_group = service.create_category_group(other.id, "Theirs")
    ctx = ledger_context()

    assert ctx.categories.get_by_id(groceries.id, budget_id=other.id) is None
    assert ctx.category(groceries.id).group.name == "Everyday"
    with pytest.raises(ValueError):
        ctx.categories.create_category(Category(group_id=foreign_group.id, name="Sneaky"), budget_id=ctx.budget_id)


def test_categories_append_in_group_order(ledger_context, category_factory):
    first = category_factory("Rent")
    second = category_factory("Food")
    ctx = ledger_context()

    names = [category.name for category, _group in ctx.categories.list_with_groups(budget_id=ctx.budget_id)]
    assert names == ["Rent", "Food"]
    assert (first.sort_order, second.sort_order) == (0, 1)


def test_listing_queries(service, budget, ledger_context, checking, visa, session_factory):
    service.create_budget("Other")
    ctx = ledger_context()

    budgets = SQLModelBudgetRepository(session_factory).list_all()
    assert [b.name for b in budgets] == ["Household", "Other"]
    assert [a.name for a in ctx.accounts.list_all(budget_id=ctx.budget_id)] == ["Checking", "Visa"]
    assert [a.id for a in ctx.accounts.list_all(budget_id=ctx.budget_id, account_type="credit")] == [visa.id]
    payments = ctx.categories.list_payment_categories(budget_id=ctx.budget_id)
    assert [(p.name, p.linked_account_id) for p in payments] == [("Visa", visa.id)]
