"""Tests for the Ready to Assign arithmetic (no database)."""

from __future__ import annotations

from budgetledger.services.ready_to_assign import (
    RTAInputs,
    calculate_breakdown,
    calculate_ready_to_assign,
)


def test_rta_scenario():
    inputs = RTAInputs(
        cash_balance=5000, positive_cc_balances=0, total_available=1000, future_assigned=500
    )
    assert calculate_ready_to_assign(inputs) == 3500


def test_without_complete_month_only_balances_count():
    inputs = RTAInputs(
        cash_balance=5000,
        positive_cc_balances=200,
        total_available=99999,
        has_complete_month=False,
    )
    assert calculate_ready_to_assign(inputs) == 5200


def test_credit_overspending_correction():
    """Credit overspending already sits on the card and is backed out of available."""
    inputs = RTAInputs(
        cash_balance=1000,
        positive_cc_balances=0,
        total_available=400,
        total_overspending=100,
        cash_overspending=0,
    )
    assert calculate_ready_to_assign(inputs) == 500


def test_past_months_clamp_to_zero():
    inputs = RTAInputs(cash_balance=100, positive_cc_balances=0, total_available=500, is_past_month=True)
    assert calculate_ready_to_assign(inputs) == 0
    current = RTAInputs(cash_balance=100, positive_cc_balances=0, total_available=500)
    assert calculate_ready_to_assign(current) == -400


def test_breakdown_left_over_is_derived():
    breakdown = calculate_breakdown(
        ready_to_assign=3500,
        inflow_this_month=5000,
        positive_cc_balances=0,
        cash_overspending_previous_month=0,
        assigned_this_month=1000,
        assigned_in_future=500,
    )
    assert breakdown.left_over_from_previous_month == 0
    assert breakdown.to_dict()["ready_to_assign"] == 3500
