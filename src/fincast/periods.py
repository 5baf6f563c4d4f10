# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Month arithmetic helpers for FinCast.

This module defines a Period value object and helpers to work with
calendar months: parsing and formatting ``YYYY-MM`` keys, rolling a month
forward (including year rollover), adding months to a date, and deriving
trailing look-back windows (e.g. "the last 3 months") from today's date.

Today's date is read through ``_today()`` only, so that tests can pin it.
The engine uses the wall clock for date labels and windows, never to
branch on business rules.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import pandas as pd

# Month length used to turn a day count into a number of months.
DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class Period:
    """Represents a date window [start, end] with a human-readable label."""

    start: date
    end: date
    label: str


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def parse_month(month: str) -> tuple[int, int]:
    """
    Parse a ``YYYY-MM`` key into a (year, month) tuple.

    Raises:
        ValueError: if the key is not a valid calendar month.
    """
    try:
        year_raw, month_raw = str(month).strip().split("-")
        year, mon = int(year_raw), int(month_raw)
    except ValueError as exc:
        raise ValueError(f"Invalid month key: {month!r}, expected YYYY-MM.") from exc

    if not 1 <= mon <= 12:
        raise ValueError(f"Invalid month key: {month!r}, month must be 01-12.")

    return year, mon


def format_month(year: int, month: int) -> str:
    """Format a (year, month) pair as ``YYYY-MM``."""
    return f"{year:04d}-{month:02d}"


def month_key(d: date) -> str:
    """Return the ``YYYY-MM`` key of the month containing ``d``."""
    return format_month(d.year, d.month)


def shift_month(month: str, offset: int) -> str:
    """Shift a ``YYYY-MM`` key by ``offset`` calendar months (may be negative)."""
    year, mon = parse_month(month)
    index = year * 12 + (mon - 1) + offset
    return format_month(index // 12, index % 12 + 1)


def next_month(month: str) -> str:
    """Return the month following ``month`` (2024-12 -> 2025-01)."""
    return shift_month(month, 1)


def add_months(d: date, months: int) -> date:
    """
    Add a number of calendar months to a date.

    The day of month is clamped to the length of the target month, so that
    31 January + 1 month is the last day of February.
    """
    index = d.year * 12 + (d.month - 1) + months
    year, mon = index // 12, index % 12 + 1
    day = min(d.day, monthrange(year, mon)[1])
    return date(year, mon, day)


def projected_date(d: date, months: int) -> Optional[date]:
    """
    Like ``add_months``, but returns None when the result falls outside
    the calendar range of ``datetime.date`` (years 1-9999).
    """
    index = d.year * 12 + (d.month - 1) + months
    if not date.min.year <= index // 12 <= date.max.year:
        return None
    return add_months(d, months)


def months_until(target: date, today: date) -> int:
    """
    Number of 30-day months from ``today`` until ``target``, rounded up.

    The result is never below 1: a deadline that is today or already past
    still leaves "one month" to plan for.
    """
    days = (target - today).days
    return max(1, -(-days // DAYS_PER_MONTH))


def trailing_window(months: int, today: Optional[date] = None) -> Period:
    """
    Trailing window covering the last ``months`` calendar months up to today.

    The window starts on the same day ``months`` months ago and ends today
    (both inclusive).
    """
    if months < 1:
        raise ValueError("A trailing window must cover at least one month.")

    end = today or _today()
    start = add_months(end, -months)
    return Period(start=start, end=end, label=f"Last {months} months")


def month_labels(count: int, start: Optional[date] = None) -> list[str]:
    """Return ``count`` consecutive ``YYYY-MM`` labels starting at ``start``'s month."""
    first = month_key(start or _today())
    return [shift_month(first, i) for i in range(count)]


def filter_by_period(frame: pd.DataFrame, period: Period, column: str = "date") -> pd.DataFrame:
    """
    Keep only the rows of ``frame`` whose ``column`` falls within the period.

    Parameters
    ----------
    frame:
        DataFrame with a datetime64 column named ``column``.
    period:
        Period defining the [start, end] boundaries (inclusive, whole days).

    Returns
    -------
    pandas.DataFrame
        Filtered copy of the input.
    """
    end_exclusive = pd.Timestamp(period.end) + pd.Timedelta(days=1)
    mask = (frame[column] >= pd.Timestamp(period.start)) & (frame[column] < end_exclusive)
    return frame.loc[mask].copy()
