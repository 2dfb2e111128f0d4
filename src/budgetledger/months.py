"""Month-key arithmetic over ``YYYY-MM`` strings.

Months are handled as integer indexes (``year * 12 + month - 1``) instead of
calendar dates.
"""

from __future__ import annotations

import re
from datetime import date

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def is_valid_month(value: object) -> bool:
    if not isinstance(value, str):
        return False
    match = _MONTH_RE.match(value)
    return bool(match) and 1 <= int(match.group(2)) <= 12


def parse_month(value: str) -> int:
    """Return the integer month index for a ``YYYY-MM`` key."""

    match = _MONTH_RE.match(value) if isinstance(value, str) else None
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValueError(f"Invalid month key {value!r}; expected YYYY-MM")
    return int(match.group(1)) * 12 + int(match.group(2)) - 1


def format_month(index: int) -> str:
    year, month0 = divmod(index, 12)
    return f"{year:04d}-{month0 + 1:02d}"


def add_months(month: str, count: int) -> str:
    return format_month(parse_month(month) + count)


def previous_month(month: str) -> str:
    return add_months(month, -1)


def next_month(month: str) -> str:
    return add_months(month, 1)


def month_of(day: date) -> str:
    """Month key containing ``day``."""

    return f"{day.year:04d}-{day.month:02d}"


def month_bounds(month: str) -> tuple[date, date]:
    """Return ``[first day, first day of next month)`` for a month key."""

    start_year, start0 = divmod(parse_month(month), 12)
    end_year, end0 = divmod(parse_month(month) + 1, 12)
    return date(start_year, start0 + 1, 1), date(end_year, end0 + 1, 1)
