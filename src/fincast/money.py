# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Money helpers for FinCast.

Every monetary amount handled by the engine is an ``int`` expressed in
minor currency units (hundredths: cents, kopecks...). Floats only appear
for derived percentages and ratios; when such a float has to become an
amount again it is rounded half-up, so that 0.5 always rounds towards
positive infinity, never with Python's round-half-even.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

MINOR_UNITS_PER_MAJOR = 100


def round_half_up(value: float) -> int:
    """Round a float to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def ceil_div(numerator: int, denominator: int) -> int:
    """
    Integer ceiling division.

    The denominator must be strictly positive; callers are responsible for
    routing non-positive denominators to their own sentinel branch.
    """
    if denominator <= 0:
        raise ValueError("ceil_div requires a strictly positive denominator.")
    return -(-numerator // denominator)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` to the closed interval [low, high]."""
    return max(low, min(high, value))


def to_minor(value: Union[str, int, float, Decimal]) -> int:
    """
    Convert an amount in major units (e.g. "1234.56") into minor units.

    Raises:
        ValueError: if the value is not a finite number.
    """
    try:
        dec = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid monetary amount: {value!r}") from exc

    if not dec.is_finite():
        raise ValueError(f"Invalid monetary amount: {value!r}")

    minor = (dec * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(minor)


def to_major(minor: int) -> float:
    """Convert minor units into a float amount in major units (display only)."""
    return minor / MINOR_UNITS_PER_MAJOR


def format_money(minor: int, currency: str = "EUR") -> str:
    """
    Format a minor-unit amount as whole major units with a currency code.

    >>> format_money(1234550, "EUR")
    '12,346 EUR'
    """
    whole = round_half_up(to_major(minor))
    return f"{whole:,d} {currency}"
