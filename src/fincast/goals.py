# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Goal achievement projector for FinCast.

Two entry points share the same computation shape, ``ceil(remaining /
monthly amount)``:

- ``forecast_goal_achievement()``
    A simplified projection from a flat monthly balance (income - expense).
    It classifies the goal into a feasibility tier from the savings rate.
    A non-positive balance yields the UNREACHABLE_MONTHS sentinel.

- ``calculate_goal_forecast()``
    The plan-based projection. The pace is the average contribution over
    the trailing CONTRIBUTION_WINDOW_MONTHS, always divided by the window
    length (not by the number of top-ups) so that sparse months pull the
    average down. Without any contribution signal ``months_to_goal`` is
    None. A user deadline (``plan.target_date``) overrides the historical
    pace as the recommended contribution. Three contribution scenarios
    (x0.7, x1.0, x1.5) are derived from the average.

Renderers use the two sentinels (999 vs None) to tell "not achievable at
this pace" apart from "no data yet".

Supporting helpers:

- ``calculate_all_goal_forecasts()`` runs the plan projection for a batch
  of plans.
- ``generate_monthly_progress()`` lists the projected saved amount month
  by month until the goal is met.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Optional

from .advice import (
    feasibility_recommendation,
    goal_advice,
    unreachable_goal_recommendation,
)
from .models import (
    ContributionRecord,
    Feasibility,
    GoalForecast,
    GoalProjection,
    GoalScenario,
    GoalScenarios,
    MonthlyProgress,
    Plan,
)
from .money import ceil_div, clamp, round_half_up
from .periods import _today, add_months, month_key, months_until, projected_date, trailing_window

logger = logging.getLogger(__name__)

# Product policy constants.
CONTRIBUTION_WINDOW_MONTHS = 3
ZERO_CONTRIBUTION_HORIZON_MONTHS = 12
UNREACHABLE_MONTHS = 999

CONSERVATIVE_MULTIPLIER = 0.7
CURRENT_MULTIPLIER = 1.0
AGGRESSIVE_MULTIPLIER = 1.5

# Savings-rate thresholds (percent of income), highest first.
FEASIBILITY_THRESHOLDS: tuple[tuple[float, Feasibility], ...] = (
    (30.0, "easy"),
    (15.0, "moderate"),
    (5.0, "challenging"),
)


def classify_feasibility(savings_rate: float) -> Feasibility:
    """Bucket a savings rate (percent) into a feasibility tier."""
    for threshold, tier in FEASIBILITY_THRESHOLDS:
        if savings_rate >= threshold:
            return tier
    return "unrealistic"


def forecast_goal_achievement(
    current_savings: int,
    goal_amount: int,
    monthly_income: int,
    monthly_expense: int,
    today: Optional[date] = None,
    currency: str = "EUR",
) -> GoalProjection:
    """
    Project when a goal is reached from a flat monthly balance.

    Args:
        current_savings: Amount already saved (minor units).
        goal_amount: Amount to reach (minor units).
        monthly_income: Monthly income (minor units).
        monthly_expense: Monthly expense (minor units).
        today: Reference date for the estimated date (defaults to today).
        currency: Currency code used in the recommendation text.

    Returns:
        A GoalProjection. When ``monthly_income - monthly_expense <= 0`` the
        projection is terminal: not achievable, sentinel months, no date.
        ``estimated_date`` is also None when the goal lies beyond year 9999.
    """
    monthly_balance = monthly_income - monthly_expense
    remaining = max(0, goal_amount - current_savings)
    savings_rate = monthly_balance / monthly_income * 100 if monthly_income > 0 else 0.0

    if monthly_balance <= 0:
        return GoalProjection(
            months_to_goal=UNREACHABLE_MONTHS,
            estimated_date=None,
            monthly_savings_needed=remaining,
            feasibility="unrealistic",
            recommendation=unreachable_goal_recommendation(),
            savings_rate=savings_rate,
            achievable=False,
        )

    months_to_goal = ceil_div(remaining, monthly_balance)
    feasibility = classify_feasibility(savings_rate)

    return GoalProjection(
        months_to_goal=months_to_goal,
        estimated_date=projected_date(today or _today(), months_to_goal),
        monthly_savings_needed=monthly_balance,
        feasibility=feasibility,
        recommendation=feasibility_recommendation(feasibility, remaining, currency),
        savings_rate=savings_rate,
        achievable=True,
    )


def build_goal_scenario(
    current_amount: int,
    goal_amount: int,
    monthly_amount: int,
    today: Optional[date] = None,
) -> GoalScenario:
    """
    Project a goal for a given monthly amount (999 months when the amount is <= 0).

    ``completion_date`` is None when it lies beyond year 9999.
    """
    remaining = max(0, goal_amount - current_amount)
    if monthly_amount > 0:
        months_to_goal = ceil_div(remaining, monthly_amount)
    else:
        months_to_goal = UNREACHABLE_MONTHS

    return GoalScenario(
        monthly_amount=monthly_amount,
        months_to_goal=months_to_goal,
        completion_date=projected_date(today or _today(), months_to_goal),
    )


def average_monthly_contribution(
    contributions: Sequence[ContributionRecord],
    fallback: int,
) -> int:
    """
    Average contribution per month over the contribution window.

    The sum is divided by CONTRIBUTION_WINDOW_MONTHS whatever the number of
    top-ups. Without any top-up in the window the planned ``fallback``
    contribution is used.
    """
    if not contributions:
        return fallback
    total = sum(c.amount for c in contributions)
    return round_half_up(total / CONTRIBUTION_WINDOW_MONTHS)


def contributions_in_window(
    contributions: Iterable[ContributionRecord],
    today: Optional[date] = None,
    months: int = CONTRIBUTION_WINDOW_MONTHS,
) -> tuple[ContributionRecord, ...]:
    """
    Keep the contributions made since the start of the trailing window, newest first.

    Only the lower bound applies: records dated after ``today`` are kept.
    """
    window = trailing_window(months, today)
    kept = [c for c in contributions if c.occurred_at.date() >= window.start]
    kept.sort(key=lambda c: c.occurred_at, reverse=True)
    return tuple(kept)


def calculate_goal_forecast(
    plan: Plan,
    contributions: Iterable[ContributionRecord],
    today: Optional[date] = None,
    currency: str = "EUR",
) -> GoalForecast:
    """
    Build the full projection of a plan.

    Args:
        plan: The plan to project.
        contributions: Contribution history of the plan. Records outside
            the trailing window are ignored.
        today: Reference date (defaults to today).
        currency: Currency code used in the advice text.

    Returns:
        A GoalForecast with scenarios and advice.
    """
    today = today or _today()

    window = contributions_in_window(contributions, today)
    average = average_monthly_contribution(window, plan.monthly_contribution or 0)

    current_amount = plan.current_amount or 0
    goal_amount = plan.goal_amount or 0
    remaining = max(0, goal_amount - current_amount)
    raw_progress = current_amount / goal_amount * 100 if goal_amount > 0 else 0.0
    progress = clamp(round_half_up(raw_progress * 10) / 10, 0.0, 100.0)

    months_to_goal: Optional[int] = ceil_div(remaining, average) if average > 0 else None
    estimated_completion = (
        projected_date(today, months_to_goal) if months_to_goal is not None else None
    )

    recommended = average
    months_until_target: Optional[int] = None
    if plan.target_date is not None:
        months_until_target = months_until(plan.target_date, today)
        if remaining > 0:
            recommended = ceil_div(remaining, months_until_target)

    scenarios = GoalScenarios(
        conservative=build_goal_scenario(
            current_amount,
            goal_amount,
            round_half_up(average * CONSERVATIVE_MULTIPLIER),
            today,
        ),
        current=build_goal_scenario(
            current_amount,
            goal_amount,
            round_half_up(average * CURRENT_MULTIPLIER),
            today,
        ),
        aggressive=build_goal_scenario(
            current_amount,
            goal_amount,
            round_half_up(average * AGGRESSIVE_MULTIPLIER),
            today,
        ),
    )

    advice = goal_advice(
        plan_name=plan.name,
        progress_percentage=raw_progress,
        remaining_amount=remaining,
        average_contribution=average,
        months_to_goal=months_to_goal,
        months_until_target=months_until_target,
        target_date=plan.target_date,
        zero_contribution_horizon=ZERO_CONTRIBUTION_HORIZON_MONTHS,
        currency=currency,
    )

    logger.debug(
        "Goal forecast for plan %s: remaining=%d average=%d months=%s",
        plan.id,
        remaining,
        average,
        months_to_goal,
    )

    return GoalForecast(
        plan_id=plan.id,
        plan_name=plan.name,
        goal_amount=goal_amount,
        current_amount=current_amount,
        remaining_amount=remaining,
        progress_percentage=progress,
        current_monthly_contribution=plan.monthly_contribution or 0,
        average_monthly_contribution=average,
        estimated_completion_date=estimated_completion,
        months_to_goal=months_to_goal,
        recommended_monthly_contribution=recommended,
        target_date=plan.target_date,
        months_until_target=months_until_target,
        scenarios=scenarios,
        contributions=window,
        contributions_count=len(window),
        advice=advice,
    )


def calculate_all_goal_forecasts(
    plans: Iterable[Plan],
    contributions_by_plan: Mapping[str, Sequence[ContributionRecord]],
    today: Optional[date] = None,
    currency: str = "EUR",
) -> list[GoalForecast]:
    """Project every plan, keeping the input order."""
    today = today or _today()
    return [
        calculate_goal_forecast(
            plan,
            contributions_by_plan.get(plan.id, ()),
            today=today,
            currency=currency,
        )
        for plan in plans
    ]


def generate_monthly_progress(
    current_amount: int,
    goal_amount: int,
    monthly_contribution: int,
    months: int = 12,
    today: Optional[date] = None,
) -> list[MonthlyProgress]:
    """
    Month-by-month projection of the saved amount.

    Starts with next month, caps the amount at the goal and stops at the
    first month where the goal is reached (or after ``months`` months).
    """
    start = today or _today()
    progress: list[MonthlyProgress] = []
    amount = current_amount

    for i in range(1, months + 1):
        amount = min(goal_amount, amount + monthly_contribution)
        percentage = amount / goal_amount * 100 if goal_amount > 0 else 0.0
        progress.append(
            MonthlyProgress(
                month=month_key(add_months(start, i)),
                projected_amount=amount,
                percentage=round_half_up(percentage * 10) / 10,
            )
        )
        if amount >= goal_amount:
            break

    return progress
