"""Tests for YYYY-MM month key arithmetic."""

from __future__ import annotations

from datetime import date

import pytest

from budgetledger.months import (
    add_months,
    format_month,
    is_valid_month,
    month_bounds,
    month_of,
    next_month,
    parse_month,
    previous_month,
)


def test_parse_and_format_are_inverse():
    assert format_month(parse_month("2024-01")) == "2024-01"
    assert parse_month("2024-01") == 2024 * 12


def test_year_boundaries():
    assert previous_month("2024-01") == "2023-12"
    assert next_month("2023-12") == "2024-01"
    assert add_months("2024-03", 12) == "2025-03"
    assert add_months("2024-03", -15) == "2022-12"


@pytest.mark.parametrize("value", ["2024-13", "2024-00", "24-01", "2024/01", "", None, 202401])
def test_invalid_months(value):
    assert not is_valid_month(value)
    with pytest.raises(ValueError):
        parse_month(value)


def test_month_of_and_bounds():
    assert month_of(date(2024, 2, 29)) == "2024-02"
    assert month_bounds("2024-12") == (date(2024, 12, 1), date(2025, 1, 1))


def test_month_keys_sort_chronologically():
    months = ["2024-10", "2023-12", "2024-02"]
    assert sorted(months) == sorted(months, key=parse_month)
