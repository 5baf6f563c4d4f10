# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
What-if scenario simulator for FinCast.

A WhatIfScenario describes a recurring monthly change to either income or
expense. ``simulate_scenario()`` applies it on top of the current monthly
income/expense and compares the resulting balance with the unmodified
baseline, month by month.

The timeline holds *cumulative* balances: entry k is the total saved
after k + 1 months under each hypothesis. It must not be read as
per-month deltas.

Today's date is only used to label the timeline months.
"""

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional

from .advice import scenario_recommendation
from .models import ScenarioResult, TimelinePoint, WhatIfScenario
from .money import to_minor
from .periods import month_labels

logger = logging.getLogger(__name__)

DEFAULT_SIMULATION_MONTHS = 12

# Built-in scenarios offered next to user-defined ones.
PRESET_SCENARIOS: tuple[WhatIfScenario, ...] = (
    WhatIfScenario(
        name="Salary raise",
        description="Your salary grows by 20%",
        monthly_change=3_000_000,
        affects="income",
    ),
    WhatIfScenario(
        name="No more cafés",
        description="Stop buying coffee and lunches outside",
        monthly_change=-1_000_000,
        affects="expense",
        category="Cafés & restaurants",
    ),
    WhatIfScenario(
        name="Moving to another city",
        description="Rent drops by 30%",
        monthly_change=-1_500_000,
        affects="expense",
        category="Housing",
    ),
    WhatIfScenario(
        name="Buying a car",
        description="New running costs for a car",
        monthly_change=2_000_000,
        affects="expense",
        category="Transport",
    ),
)


def scenario_from_mapping(raw: Mapping[str, Any]) -> WhatIfScenario:
    """
    Build a WhatIfScenario from a plain mapping (e.g. a TOML table).

    ``monthly_change`` is read in major units (e.g. -150.0) and converted
    to minor units.

    Raises:
        ValueError: if a required key is missing or ``affects`` is invalid.
    """
    try:
        name = str(raw["name"])
        change_raw = raw["monthly_change"]
        affects = str(raw["affects"]).strip().lower()
    except KeyError as exc:
        raise ValueError(
            f"Scenario definition is missing required key {exc.args[0]!r}."
        ) from exc

    if affects not in {"income", "expense"}:
        raise ValueError(
            f"Invalid 'affects' value for scenario {name!r}: {affects!r}. "
            "Expected 'income' or 'expense'."
        )

    category = raw.get("category") or None

    return WhatIfScenario(
        name=name,
        description=str(raw.get("description") or ""),
        monthly_change=to_minor(change_raw),
        affects=affects,  # type: ignore[arg-type]
        category=str(category) if category is not None else None,
    )


def simulate_scenario(
    scenario: WhatIfScenario,
    current_monthly_income: int,
    current_monthly_expense: int,
    months: int = DEFAULT_SIMULATION_MONTHS,
    today: Optional[date] = None,
    currency: str = "EUR",
) -> ScenarioResult:
    """
    Simulate a recurring change against the current monthly baseline.

    Args:
        scenario: The hypothetical change.
        current_monthly_income: Baseline monthly income (minor units).
        current_monthly_expense: Baseline monthly expense (minor units).
        months: Number of months in the timeline (>= 1).
        today: First month of the timeline (defaults to the current month).
        currency: Currency code used in the recommendation text.

    Returns:
        A ScenarioResult. ``impact_percentage`` is 0.0 when the baseline
        balance is zero.

    Raises:
        ValueError: if ``months`` is lower than 1.
    """
    if months < 1:
        raise ValueError("A scenario simulation needs at least one month.")

    original_balance = current_monthly_income - current_monthly_expense

    new_income = current_monthly_income
    new_expense = current_monthly_expense
    if scenario.affects == "income":
        new_income += scenario.monthly_change
    else:
        new_expense += scenario.monthly_change

    new_balance = new_income - new_expense
    difference = new_balance - original_balance
    if original_balance != 0:
        impact_percentage = difference / abs(original_balance) * 100
    else:
        impact_percentage = 0.0

    timeline = []
    cumulative_original = 0
    cumulative_new = 0
    for label in month_labels(months, today):
        cumulative_original += original_balance
        cumulative_new += new_balance
        timeline.append(
            TimelinePoint(month=label, original=cumulative_original, new=cumulative_new)
        )

    last = timeline[-1]
    recommendation = scenario_recommendation(
        scenario,
        monthly_difference=difference,
        period_difference=last.new - last.original,
        months=months,
        currency=currency,
    )

    logger.debug(
        "Scenario %r: original=%d new=%d difference=%d",
        scenario.name,
        original_balance,
        new_balance,
        difference,
    )

    return ScenarioResult(
        scenario=scenario,
        original_balance=original_balance,
        new_balance=new_balance,
        difference=difference,
        impact_percentage=impact_percentage,
        recommendation=recommendation,
        timeline=tuple(timeline),
    )
