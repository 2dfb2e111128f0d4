"""Tests for the cash/credit overspending classifier (no database)."""

from __future__ import annotations

from budgetledger.services.overspending import (
    CASH,
    CREDIT,
    calculate_cash_overspending,
    classify_overspending,
)


def test_cash_takes_priority_when_both_present():
    assert classify_overspending(-50, 40) == CASH


def test_pure_credit_overspending():
    assert classify_overspending(-50, 0) == CREDIT


def test_pure_cash_overspending():
    assert classify_overspending(-50, 80) == CASH


def test_payment_categories_are_always_credit():
    assert classify_overspending(-10, 500, is_credit_card_payment=True) == CREDIT


def test_not_overspent_is_unclassified():
    assert classify_overspending(0, 100) is None
    assert classify_overspending(25, 0) is None


def test_cash_overspending_amount():
    assert calculate_cash_overspending(-50, 40) == 40
    assert calculate_cash_overspending(-50, 90) == 50
    assert calculate_cash_overspending(10, 90) == 0
