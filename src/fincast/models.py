# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Input and result records for FinCast.

All records are frozen dataclasses. Monetary attributes are ``int``
amounts in minor currency units (hundredths); percentages and ratios are
``float``. Input records (MonthlyAggregate, Plan, ContributionRecord,
WhatIfScenario) are produced by the history provider or by the user;
result records (ExpenseForecast, GoalForecast, GoalProjection,
ScenarioResult, MonthlyProgress) are created fresh by every engine call
and never persisted by the engine itself.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal, Optional

Trend = Literal["increasing", "decreasing", "stable"]
Feasibility = Literal["easy", "moderate", "challenging", "unrealistic"]
Affects = Literal["income", "expense"]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthlyAggregate:
    """
    Income and expense totals for one calendar month.

    Attributes:
        month: Month key in ``YYYY-MM`` format.
        income: Total income of the month (minor units).
        expense: Total expense of the month (minor units, positive).
        categories: Optional expense per category for the month.
    """

    month: str
    income: int
    expense: int
    categories: Mapping[str, int] = field(default_factory=dict)

    @property
    def balance(self) -> int:
        return self.income - self.expense


@dataclass(frozen=True)
class Plan:
    """
    A savings goal as stored by the plan store.

    Attributes:
        id: Plan identifier.
        name: Human-readable name (e.g. 'Holidays').
        goal_amount: Amount to reach (minor units).
        current_amount: Amount already saved (minor units).
        monthly_contribution: Planned monthly top-up (minor units).
        target_date: Optional deadline set by the user.
        plan_type: Free-form plan category (e.g. 'savings', 'purchase').
    """

    id: str
    name: str
    goal_amount: int
    current_amount: int
    monthly_contribution: int = 0
    target_date: Optional[date] = None
    plan_type: str = "savings"


@dataclass(frozen=True)
class ContributionRecord:
    """One historical top-up of a plan."""

    amount: int
    occurred_at: datetime


@dataclass(frozen=True)
class WhatIfScenario:
    """
    A user-authored hypothetical recurring change.

    ``monthly_change`` is signed: a positive value adds to the affected side
    (more income, or more spending), a negative value removes from it.
    """

    name: str
    description: str
    monthly_change: int
    affects: Affects
    category: Optional[str] = None


# ---------------------------------------------------------------------------
# Expense forecast
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryAmount:
    """Amount attached to an expense category."""

    category: str
    amount: int


@dataclass(frozen=True)
class ExpenseForecast:
    """
    Next-month expense forecast.

    Attributes:
        month: The month being predicted (``YYYY-MM``).
        predicted_expense: Forecast expense (minor units, >= 0).
        confidence: Confidence score, an integer in [50, 95].
        breakdown: Predicted expense per category (may be empty).
        trend: 'increasing', 'decreasing' or 'stable'.
        factors: Short human-readable explanations of the trend.
        percent_change: Recent-vs-older average change used for the trend.
    """

    month: str
    predicted_expense: int
    confidence: int
    breakdown: tuple[CategoryAmount, ...]
    trend: Trend
    factors: tuple[str, ...]
    percent_change: float = 0.0


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GoalScenario:
    """
    Projection of a goal for one monthly contribution amount.

    ``completion_date`` is None when the date lies beyond year 9999.
    """

    monthly_amount: int
    months_to_goal: int
    completion_date: Optional[date]


@dataclass(frozen=True)
class GoalScenarios:
    """The three named contribution scenarios of a GoalForecast."""

    conservative: GoalScenario
    current: GoalScenario
    aggressive: GoalScenario

    def items(self) -> list[tuple[str, GoalScenario]]:
        """Scenarios as (name, scenario) pairs, from the slowest to the fastest pace."""
        return [
            ("conservative", self.conservative),
            ("current", self.current),
            ("aggressive", self.aggressive),
        ]


@dataclass(frozen=True)
class GoalForecast:
    """
    Projection of a Plan based on its recent contribution history.

    ``months_to_goal`` and ``estimated_completion_date`` are None when
    there is no contribution signal at all (average contribution <= 0).
    ``estimated_completion_date`` is also None when a computed
    ``months_to_goal`` points beyond year 9999.
    """

    plan_id: str
    plan_name: str
    goal_amount: int
    current_amount: int
    remaining_amount: int
    progress_percentage: float
    current_monthly_contribution: int
    average_monthly_contribution: int
    estimated_completion_date: Optional[date]
    months_to_goal: Optional[int]
    recommended_monthly_contribution: int
    target_date: Optional[date]
    months_until_target: Optional[int]
    scenarios: GoalScenarios
    contributions: tuple[ContributionRecord, ...]
    contributions_count: int
    advice: str


@dataclass(frozen=True)
class GoalProjection:
    """
    Simplified goal projection from a flat monthly balance.

    When the monthly balance is not positive the goal cannot be reached:
    ``achievable`` is False, ``months_to_goal`` holds the UNREACHABLE_MONTHS
    sentinel and ``estimated_date`` is None.
    An achievable goal beyond year 9999 keeps its month count but has no
    ``estimated_date`` either.
    """

    months_to_goal: int
    estimated_date: Optional[date]
    monthly_savings_needed: int
    feasibility: Feasibility
    recommendation: str
    savings_rate: float
    achievable: bool


@dataclass(frozen=True)
class MonthlyProgress:
    """Projected amount saved at the end of a month."""

    month: str
    projected_amount: int
    percentage: float


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimelinePoint:
    """Cumulative balances after a given month (not per-month deltas)."""

    month: str
    original: int
    new: int


@dataclass(frozen=True)
class ScenarioResult:
    """Outcome of a what-if simulation against the unmodified baseline."""

    scenario: WhatIfScenario
    original_balance: int
    new_balance: int
    difference: int
    impact_percentage: float
    recommendation: str
    timeline: tuple[TimelinePoint, ...]
