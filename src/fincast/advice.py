# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Rule-based narrative for FinCast results.

The numeric engines (trend.py, goals.py, scenarios.py) compute their
figures first; the functions in this module then pick a human-readable
message from those figures. Each function evaluates an ordered list of
mutually exclusive rules and returns the text of the first rule that
matches.

Nothing here feeds back into a numeric field. The optional LLM text
produced by enrichment.py is shown *in addition to* these messages, never
instead of them.
"""

from datetime import date
from typing import Optional

from .models import Trend, WhatIfScenario
from .money import ceil_div, format_money, round_half_up

# Progress (in percent) from which a goal is considered nearly reached.
NEAR_COMPLETION_PCT = 90.0

# A goal reached within this many months gets positive reinforcement...
SHORT_HORIZON_MONTHS = 12

# ...and one further away than this gets a "contribute more" nudge.
LONG_HORIZON_MONTHS = 24

# Suggested contribution increase for long horizons (fraction of the average).
LONG_HORIZON_INCREASE = 0.5


def _months(count: int) -> str:
    return "1 month" if count == 1 else f"{count} months"


def expense_factors(trend: Trend, percent_change: float) -> tuple[str, ...]:
    """Return the two explanation strings attached to an expense forecast."""
    if trend == "increasing":
        return (
            f"Expenses up {abs(percent_change):.1f}%",
            "Seasonal factors may be involved",
        )
    if trend == "decreasing":
        return (
            f"Expenses down {abs(percent_change):.1f}%",
            "Budget optimisation is paying off",
        )
    return ("Stable spending", "Predictable behaviour")


def unreachable_goal_recommendation() -> str:
    """Message shown when the monthly balance leaves nothing to save."""
    return (
        "Not achievable at the current pace: cut expenses or increase income "
        "first so that your monthly balance becomes positive."
    )


def feasibility_recommendation(
    feasibility: str,
    remaining: int,
    currency: str = "EUR",
) -> str:
    """Recommendation for a goal projection, keyed on its feasibility tier."""
    if feasibility == "easy":
        return "Great pace! Keep it up."
    if feasibility == "moderate":
        return (
            f"At the current pace you will save the remaining "
            f"{format_money(remaining, currency)}. You can get there faster by "
            "cutting non-essential spending."
        )
    if feasibility == "challenging":
        return (
            "The goal is reachable but will take discipline. Consider raising "
            "your income or trimming your largest expenses."
        )
    return "Your current balance barely allows saving. Review your budget."


def goal_advice(
    plan_name: str,
    progress_percentage: float,
    remaining_amount: int,
    average_contribution: int,
    months_to_goal: Optional[int],
    months_until_target: Optional[int],
    target_date: Optional[date],
    zero_contribution_horizon: int = 12,
    currency: str = "EUR",
) -> str:
    """
    Advice for a GoalForecast.

    Rules, first match wins:

    1. progress >= 90%                        -> nearly done
    2. deadline set and projected pace slower -> increase by the shortfall
    3. no contribution signal                 -> start contributing
    4. goal reached within 12 months          -> positive reinforcement
    5. goal further than 24 months            -> increase by 50%
    6. otherwise                              -> encouragement
    """
    if progress_percentage >= NEAR_COMPLETION_PCT:
        return (
            f"Well done! You have almost reached your goal \"{plan_name}\". "
            f"Only {format_money(remaining_amount, currency)} left to save."
        )

    if months_until_target and months_to_goal and months_to_goal > months_until_target:
        shortfall = round_half_up(
            remaining_amount / months_until_target - average_contribution
        )
        deadline = target_date.isoformat() if target_date else "the target date"
        return (
            f"To reach \"{plan_name}\" by {deadline}, increase your monthly "
            f"contribution by {format_money(shortfall, currency)} (to "
            f"{format_money(average_contribution + shortfall, currency)}/month)."
        )

    if average_contribution <= 0:
        recommended = ceil_div(remaining_amount, zero_contribution_horizon)
        return (
            f"Start contributing regularly! Setting aside "
            f"{format_money(recommended, currency)}/month reaches \"{plan_name}\" "
            f"in {_months(zero_contribution_horizon)}."
        )

    if months_to_goal and months_to_goal <= SHORT_HORIZON_MONTHS:
        return (
            f"Great progress! At your current pace you will reach \"{plan_name}\" "
            f"in {_months(months_to_goal)}."
        )

    if months_to_goal and months_to_goal > LONG_HORIZON_MONTHS:
        increase = round_half_up(average_contribution * LONG_HORIZON_INCREASE)
        return (
            f"\"{plan_name}\" is still far away ({_months(months_to_goal)}). "
            f"Consider increasing your contributions by "
            f"{format_money(increase, currency)} to speed things up."
        )

    return f"Keep it up! You are on the right track towards \"{plan_name}\"."


def scenario_recommendation(
    scenario: WhatIfScenario,
    monthly_difference: int,
    period_difference: int,
    months: int,
    currency: str = "EUR",
) -> str:
    """
    Recommendation for a ScenarioResult.

    Keyed on (affects, sign of monthly_change); amounts are quoted as
    absolute values. ``period_difference`` is the cumulative impact at the
    end of the simulated horizon (``months`` months).
    """
    monthly = format_money(abs(monthly_difference), currency)
    total = format_money(abs(period_difference), currency)
    label = scenario.category or "expenses"

    if scenario.affects == "income" and scenario.monthly_change > 0:
        return (
            f"With the extra income you will save an additional {monthly}/month. "
            f"Over {_months(months)} that is {total}."
        )
    if scenario.affects == "expense" and scenario.monthly_change < 0:
        return (
            f"By cutting {label} you will save {monthly}/month. "
            f"Over {_months(months)} that is {total}!"
        )
    if scenario.affects == "expense" and scenario.monthly_change > 0:
        return (
            f"Increasing {label} by {monthly}/month will reduce your savings by "
            f"{total} over {_months(months)}."
        )

    sign = "+" if monthly_difference > 0 else "-" if monthly_difference < 0 else ""
    return f"This scenario changes your balance by {sign}{monthly}/month."
