# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Trend & confidence estimator for FinCast.

This module turns a series of monthly income/expense aggregates into a
forecast of next month's expense, a trend label and a confidence score.
Every figure can be explained to a non-technical user:

1. Forecast value
   --------------
   A linearly weighted average of past expenses: the i-th month (1-indexed,
   oldest first) has weight i, so recent months count more without older
   months being discarded.

2. Trend
   -----
   The average of the recent window (last 3 months, at most all but the
   oldest month) is compared with the average of the older months. A
   relative change below 5% is 'stable', otherwise the sign decides
   between 'increasing' and 'decreasing'.

3. Confidence
   ----------
   ``100 - cv * 100`` where ``cv`` is the coefficient of variation
   (standard deviation / weighted average) of the expenses, clamped to
   [50, 95].

4. Breakdown
   ---------
   When the aggregates carry per-category expenses, the same weighting is
   applied to each category.

The estimator is a pure function of its input.
"""

import logging
import math
from collections.abc import Sequence

from .advice import expense_factors
from .errors import InsufficientDataError
from .models import CategoryAmount, ExpenseForecast, MonthlyAggregate, Trend
from .money import clamp, round_half_up
from .periods import next_month, parse_month

logger = logging.getLogger(__name__)

MIN_HISTORY_MONTHS = 2
RECENT_WINDOW_MONTHS = 3
STABLE_THRESHOLD_PCT = 5.0
CONFIDENCE_FLOOR = 50.0
CONFIDENCE_CAP = 95.0


def weighted_average(values: Sequence[float]) -> float:
    """
    Linearly weighted average: ``sum(v_i * i) / sum(i)`` with i starting at 1.

    Returns 0.0 for an empty sequence.
    """
    if not values:
        return 0.0
    total_weight = len(values) * (len(values) + 1) / 2
    return sum(v * i for i, v in enumerate(values, start=1)) / total_weight


def percent_change(recent: Sequence[float], older: Sequence[float]) -> float:
    """
    Relative change (in percent) from the older average to the recent one.

    An empty ``older`` window falls back on the recent average (no change).
    When the older average is zero, a zero recent average is no change and
    anything else counts as a full +100% increase.
    """
    avg_recent = sum(recent) / len(recent) if recent else 0.0
    avg_older = sum(older) / len(older) if older else avg_recent

    if avg_older == 0:
        return 0.0 if avg_recent == 0 else 100.0
    return (avg_recent - avg_older) / avg_older * 100


def classify_trend(change_pct: float) -> Trend:
    """Map a percent change onto 'stable', 'increasing' or 'decreasing'."""
    if abs(change_pct) < STABLE_THRESHOLD_PCT:
        return "stable"
    if change_pct > 0:
        return "increasing"
    return "decreasing"


def split_recent(values: Sequence[float]) -> tuple[Sequence[float], Sequence[float]]:
    """
    Split a chronological series into (recent, older) windows.

    The recent window holds the last RECENT_WINDOW_MONTHS values, but never
    the whole series: at least one value is kept in the older window so
    that short histories can still show a direction.
    """
    size = min(RECENT_WINDOW_MONTHS, max(1, len(values) - 1))
    return values[-size:], values[:-size]


def confidence_score(values: Sequence[float], center: float) -> int:
    """
    Confidence (integer percent) from the dispersion of ``values`` around ``center``.

    Uses the population variance. A zero ``center`` means there was nothing
    to spend, which is perfectly predictable.
    """
    variance = sum((v - center) ** 2 for v in values) / len(values)
    std_dev = math.sqrt(variance)
    cv = std_dev / center if center else 0.0
    return round_half_up(clamp(100 - cv * 100, CONFIDENCE_FLOOR, CONFIDENCE_CAP))


def category_breakdown(history: Sequence[MonthlyAggregate]) -> tuple[CategoryAmount, ...]:
    """
    Weighted forecast per expense category.

    Months where a category does not appear count as zero for it. Results
    are sorted by predicted amount (descending) then category name, and
    categories predicted at zero are dropped.
    """
    categories = sorted({name for agg in history for name in agg.categories})
    breakdown = []
    for name in categories:
        series = [float(agg.categories.get(name, 0)) for agg in history]
        amount = round_half_up(weighted_average(series))
        if amount > 0:
            breakdown.append(CategoryAmount(category=name, amount=amount))

    breakdown.sort(key=lambda c: (-c.amount, c.category))
    return tuple(breakdown)


def forecast_next_month(history: Sequence[MonthlyAggregate]) -> ExpenseForecast:
    """
    Forecast next month's expense from monthly history.

    Args:
        history: Monthly aggregates, ideally sorted by month. The input is
            sorted again (on a copy) before use.

    Returns:
        An ExpenseForecast for the month following the last aggregate.

    Raises:
        InsufficientDataError: if fewer than 2 months are provided.
        ValueError: if a month key is malformed.
    """
    if len(history) < MIN_HISTORY_MONTHS:
        raise InsufficientDataError(required=MIN_HISTORY_MONTHS, received=len(history))

    ordered = sorted(history, key=lambda agg: parse_month(agg.month))
    expenses = [float(agg.expense) for agg in ordered]

    weighted = weighted_average(expenses)

    recent, older = split_recent(expenses)
    change = percent_change(recent, older)
    trend = classify_trend(change)

    confidence = confidence_score(expenses, weighted)

    target_month = next_month(ordered[-1].month)

    logger.debug(
        "Forecast for %s: weighted=%.2f change=%.2f%% trend=%s confidence=%d",
        target_month,
        weighted,
        change,
        trend,
        confidence,
    )

    return ExpenseForecast(
        month=target_month,
        predicted_expense=max(0, round_half_up(weighted)),
        confidence=confidence,
        breakdown=category_breakdown(ordered),
        trend=trend,
        factors=expense_factors(trend, change),
        percent_change=change,
    )
