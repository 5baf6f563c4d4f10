# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for FinCast.

This module turns the engine's result records into pandas DataFrames
ready to be printed by the CLI or exported as CSV. Amounts are converted
from minor units to major units, and percentages are rounded to the
requested number of decimals.

Sentinel values are rendered as plain language: a goal that cannot be
reached shows "not achievable" rather than 999 months, and a plan
without any contribution signal shows "no data yet". A completion date
that lies beyond year 9999 shows "after 9999".
"""

from collections.abc import Sequence
from datetime import date
from typing import Optional

import pandas as pd

from .models import (
    ExpenseForecast,
    GoalForecast,
    GoalProjection,
    MonthlyAggregate,
    MonthlyProgress,
    ScenarioResult,
    WhatIfScenario,
)
from .money import to_major

NOT_ACHIEVABLE = "not achievable"
NO_DATA_YET = "no data yet"
BEYOND_CALENDAR = "after 9999"


def _date_label(value: Optional[date]) -> str:
    return value.isoformat() if value is not None else BEYOND_CALENDAR


def history_to_dataframe(history: Sequence[MonthlyAggregate]) -> pd.DataFrame:
    """One row per month: month, income, expense, balance (major units)."""
    columns = ["month", "income", "expense", "balance"]
    if not history:
        return pd.DataFrame(columns=columns)

    rows = [
        {
            "month": agg.month,
            "income": to_major(agg.income),
            "expense": to_major(agg.expense),
            "balance": to_major(agg.balance),
        }
        for agg in history
    ]
    return pd.DataFrame(rows)[columns]


def forecast_to_dataframe(forecast: ExpenseForecast) -> pd.DataFrame:
    """
    Render an ExpenseForecast as a two-column (item, value) table.

    The category breakdown, when present, follows the summary rows.
    """
    rows: list[dict[str, object]] = [
        {"item": "month", "value": forecast.month},
        {"item": "predicted_expense", "value": to_major(forecast.predicted_expense)},
        {"item": "confidence_pct", "value": forecast.confidence},
        {"item": "trend", "value": forecast.trend},
    ]
    for factor in forecast.factors:
        rows.append({"item": "factor", "value": factor})
    for entry in forecast.breakdown:
        rows.append({"item": f"category: {entry.category}", "value": to_major(entry.amount)})

    return pd.DataFrame(rows, columns=["item", "value"])


def goal_forecasts_to_dataframe(
    forecasts: Sequence[GoalForecast],
    decimals: int = 1,
) -> pd.DataFrame:
    """One row per plan with its progress, pace and recommendation."""
    columns = [
        "plan_id",
        "plan_name",
        "goal",
        "current",
        "remaining",
        "progress_pct",
        "avg_monthly",
        "months_to_goal",
        "completion_date",
        "recommended_monthly",
        "target_date",
        "advice",
    ]
    if not forecasts:
        return pd.DataFrame(columns=columns)

    rows = []
    for f in forecasts:
        rows.append(
            {
                "plan_id": f.plan_id,
                "plan_name": f.plan_name,
                "goal": to_major(f.goal_amount),
                "current": to_major(f.current_amount),
                "remaining": to_major(f.remaining_amount),
                "progress_pct": round(f.progress_percentage, decimals),
                "avg_monthly": to_major(f.average_monthly_contribution),
                "months_to_goal": (
                    f.months_to_goal if f.months_to_goal is not None else NO_DATA_YET
                ),
                "completion_date": (
                    _date_label(f.estimated_completion_date)
                    if f.months_to_goal is not None
                    else NO_DATA_YET
                ),
                "recommended_monthly": to_major(f.recommended_monthly_contribution),
                "target_date": f.target_date.isoformat() if f.target_date else "",
                "advice": f.advice,
            }
        )
    return pd.DataFrame(rows)[columns]


def goal_scenarios_to_dataframe(forecast: GoalForecast) -> pd.DataFrame:
    """The conservative / current / aggressive scenarios of one plan."""
    rows = []
    for name, scenario in forecast.scenarios.items():
        # A non-positive monthly amount carries the 999-month sentinel.
        reachable = scenario.monthly_amount > 0
        rows.append(
            {
                "scenario": name,
                "monthly_amount": to_major(scenario.monthly_amount),
                "months_to_goal": scenario.months_to_goal if reachable else NOT_ACHIEVABLE,
                "completion_date": (
                    _date_label(scenario.completion_date) if reachable else NOT_ACHIEVABLE
                ),
            }
        )
    return pd.DataFrame(rows, columns=["scenario", "monthly_amount", "months_to_goal", "completion_date"])


def goal_projection_to_dataframe(projection: GoalProjection, decimals: int = 1) -> pd.DataFrame:
    """Render the simplified goal projection as an (item, value) table."""
    achievable = projection.achievable
    rows: list[dict[str, object]] = [
        {
            "item": "months_to_goal",
            "value": projection.months_to_goal if achievable else NOT_ACHIEVABLE,
        },
        {
            "item": "estimated_date",
            "value": _date_label(projection.estimated_date) if achievable else NOT_ACHIEVABLE,
        },
        {"item": "monthly_savings_needed", "value": to_major(projection.monthly_savings_needed)},
        {"item": "savings_rate_pct", "value": round(projection.savings_rate, decimals)},
        {"item": "feasibility", "value": projection.feasibility},
        {"item": "recommendation", "value": projection.recommendation},
    ]
    return pd.DataFrame(rows, columns=["item", "value"])


def monthly_progress_to_dataframe(progress: Sequence[MonthlyProgress]) -> pd.DataFrame:
    """One row per projected month: month, projected amount, percentage."""
    rows = [
        {
            "month": p.month,
            "projected_amount": to_major(p.projected_amount),
            "percentage": p.percentage,
        }
        for p in progress
    ]
    return pd.DataFrame(rows, columns=["month", "projected_amount", "percentage"])


def scenario_summary_to_dataframe(result: ScenarioResult, decimals: int = 1) -> pd.DataFrame:
    """Render the headline figures of a ScenarioResult as an (item, value) table."""
    rows: list[dict[str, object]] = [
        {"item": "scenario", "value": result.scenario.name},
        {"item": "original_balance", "value": to_major(result.original_balance)},
        {"item": "new_balance", "value": to_major(result.new_balance)},
        {"item": "difference", "value": to_major(result.difference)},
        {"item": "impact_pct", "value": round(result.impact_percentage, decimals)},
        {"item": "recommendation", "value": result.recommendation},
    ]
    return pd.DataFrame(rows, columns=["item", "value"])


def scenario_timeline_to_dataframe(result: ScenarioResult) -> pd.DataFrame:
    """
    Cumulative balances per month under both hypotheses.

    The ``gap`` column is the cumulative difference (new - original).
    """
    rows = [
        {
            "month": point.month,
            "original": to_major(point.original),
            "new": to_major(point.new),
            "gap": to_major(point.new - point.original),
        }
        for point in result.timeline
    ]
    return pd.DataFrame(rows, columns=["month", "original", "new", "gap"])


def scenarios_to_dataframe(scenarios: Sequence[WhatIfScenario]) -> pd.DataFrame:
    """List of available what-if scenarios."""
    rows = [
        {
            "name": s.name,
            "affects": s.affects,
            "monthly_change": to_major(s.monthly_change),
            "category": s.category or "",
            "description": s.description,
        }
        for s in scenarios
    ]
    return pd.DataFrame(rows, columns=["name", "affects", "monthly_change", "category", "description"])
