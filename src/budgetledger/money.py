"""Fixed-point Milliunit money helpers.

A Milliunit is 1/1000 of the budget's display currency, stored as a plain
``int``. Conversions go through ``Decimal`` so no float drift reaches the ledger.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from .errors import FinancialSafetyError

Milliunit = int
Numeric = Union[Decimal, int, float, str]

MILLIUNITS_PER_UNIT = 1000
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_SCALE = Decimal(MILLIUNITS_PER_UNIT)


def _to_decimal(value: Numeric) -> Decimal:
    if isinstance(value, bool):
        raise FinancialSafetyError(f"Boolean is not a money value: {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise FinancialSafetyError(f"Non-finite money value: {value!r}")
        # repr-based conversion keeps 12.34 as 12.34 instead of its binary expansion
        return Decimal(repr(value))
    try:
        result = Decimal(str(value).strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise FinancialSafetyError(f"Not a money value: {value!r}") from exc
    if not result.is_finite():
        raise FinancialSafetyError(f"Non-finite money value: {value!r}")
    return result


def milliunit(value: Numeric) -> Milliunit:
    """Validate an already-scaled Milliunit amount and return it as ``int``."""

    dec = _to_decimal(value)
    if dec != dec.to_integral_value():
        raise FinancialSafetyError(f"Milliunit values must be whole numbers: {value!r}")
    result = int(dec)
    if not INT64_MIN <= result <= INT64_MAX:
        raise FinancialSafetyError(f"Milliunit value outside the 64-bit range: {value!r}")
    return result


def to_milliunits(amount: Numeric) -> Milliunit:
    """Convert a display-currency amount (e.g. ``"12.345"``) to Milliunits, rounding half-up."""

    scaled = (_to_decimal(amount) * _SCALE).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return milliunit(scaled)


def from_milliunits(value: Milliunit) -> Decimal:
    """Return the display-currency ``Decimal`` for a Milliunit amount."""

    return Decimal(milliunit(value)) / _SCALE


def multiply_milliunits(amount: Milliunit, scalar: Numeric) -> Milliunit:
    """Scale a Milliunit amount, rounding half-up."""

    product = Decimal(milliunit(amount)) * _to_decimal(scalar)
    return milliunit(product.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def divide_milliunits(amount: Milliunit, divisor: Numeric) -> Milliunit:
    """Split a Milliunit amount, using banker's rounding on the remainder."""

    dec_divisor = _to_decimal(divisor)
    if dec_divisor == 0:
        raise FinancialSafetyError("Cannot divide a money value by zero")
    quotient = Decimal(milliunit(amount)) / dec_divisor
    return milliunit(quotient.quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


def format_milliunits(value: Milliunit, currency_code: str = "") -> str:
    """Plain ``1234.56`` rendering used by the CLI."""

    text = str(from_milliunits(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    return f"{text} {currency_code}".strip()
