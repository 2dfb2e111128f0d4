"""Tests for the credit-card funding rules (no database)."""

from __future__ import annotations

from budgetledger.services.credit_card import CreditCardFunding, calculate_funded_amount


def test_fully_funded_charge():
    """400 left after a 100 charge means 500 before it: all 100 is funded."""
    assert calculate_funded_amount(100, 400) == 100


def test_partially_funded_charge():
    """-70 after a 100 charge means 30 before it: only 30 is funded."""
    assert calculate_funded_amount(100, -70) == 30


def test_unfunded_charge():
    assert calculate_funded_amount(100, -150) == 0


def test_refund_moves_in_full():
    assert calculate_funded_amount(-40, 1000) == -40
    assert calculate_funded_amount(0, -10) == 0


def test_payments_reduce_activity():
    funding = CreditCardFunding(funded_by_category={1: 100, 2: 30}, payments=50)
    assert funding.total_funded == 130
    assert funding.activity == 80
