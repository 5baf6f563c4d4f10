from datetime import date

import pytest

from fincast.models import WhatIfScenario
from fincast.scenarios import PRESET_SCENARIOS, scenario_from_mapping, simulate_scenario

TODAY = date(2024, 1, 10)


def _scenario(change: int, affects: str = "income", category=None) -> WhatIfScenario:
    return WhatIfScenario(
        name="Test",
        description="Test scenario",
        monthly_change=change,
        affects=affects,
        category=category,
    )


def test_income_raise_increases_balance() -> None:
    """Extra income raises the balance by the same amount."""
    result = simulate_scenario(_scenario(50000), 300000, 200000, today=TODAY)

    assert result.original_balance == 100000
    assert result.new_balance == 150000
    assert result.difference == 50000
    assert result.impact_percentage == pytest.approx(50.0)
    assert result.recommendation == (
        "With the extra income you will save an additional 500 EUR/month. "
        "Over 12 months that is 6,000 EUR."
    )


def test_timeline_is_cumulative_and_labelled_from_current_month() -> None:
    """The timeline accumulates monthly balances from the current month."""
    result = simulate_scenario(_scenario(50000), 300000, 200000, today=TODAY)

    assert len(result.timeline) == 12
    assert result.timeline[0].month == "2024-01"
    assert result.timeline[-1].month == "2024-12"
    for k, point in enumerate(result.timeline):
        assert point.original == (k + 1) * 100000
        assert point.new == (k + 1) * 150000


def test_expense_cut_recommendation_names_category() -> None:
    """Cutting a category names it in the recommendation."""
    result = simulate_scenario(
        _scenario(-20000, affects="expense", category="Food"), 300000, 200000, today=TODAY
    )

    assert result.difference == 20000
    assert result.recommendation == (
        "By cutting Food you will save 200 EUR/month. Over 12 months that is 2,400 EUR!"
    )


def test_expense_increase_reduces_savings() -> None:
    """Extra expenses lower the balance and warn about lost savings."""
    result = simulate_scenario(
        _scenario(30000, affects="expense"), 300000, 200000, months=6, today=TODAY
    )

    assert result.difference == -30000
    assert result.impact_percentage == pytest.approx(-30.0)
    assert result.recommendation == (
        "Increasing expenses by 300 EUR/month will reduce your savings by "
        "1,800 EUR over 6 months."
    )


def test_income_cut_uses_signed_fallback_message() -> None:
    """An income cut falls back to the signed balance message."""
    result = simulate_scenario(_scenario(-10000), 300000, 200000, today=TODAY)

    assert result.recommendation == "This scenario changes your balance by -100 EUR/month."


def test_zero_original_balance_has_zero_impact() -> None:
    """Impact is zero when there was no balance to compare with."""
    result = simulate_scenario(_scenario(75000), 200000, 200000, today=TODAY)

    assert result.original_balance == 0
    assert result.difference == 75000
    assert result.impact_percentage == 0.0


def test_negative_original_balance_uses_absolute_value() -> None:
    """Impact is measured against the absolute original balance."""
    result = simulate_scenario(_scenario(100000), 100000, 150000, today=TODAY)

    assert result.original_balance == -50000
    assert result.impact_percentage == pytest.approx(200.0)


@pytest.mark.parametrize("affects", ["income", "expense"])
@pytest.mark.parametrize("change", [12345, -40000, 1])
def test_simulation_is_linear_in_monthly_change(affects, change) -> None:
    """Doubling the change doubles the difference."""
    single = simulate_scenario(_scenario(change, affects), 250000, 180000, today=TODAY)
    double = simulate_scenario(_scenario(2 * change, affects), 250000, 180000, today=TODAY)

    assert double.difference == 2 * single.difference


def test_single_month_simulation() -> None:
    """A one-month simulation has a single timeline point."""
    result = simulate_scenario(_scenario(1000), 5000, 4000, months=1, today=TODAY)

    assert len(result.timeline) == 1
    assert result.timeline[0].new - result.timeline[0].original == 1000


def test_simulation_requires_at_least_one_month() -> None:
    """A zero-month horizon is rejected."""
    with pytest.raises(ValueError):
        simulate_scenario(_scenario(1000), 5000, 4000, months=0, today=TODAY)


def test_preset_scenarios() -> None:
    """The preset scenarios are listed in order and simulate cleanly."""
    names = [s.name for s in PRESET_SCENARIOS]

    assert names == ["Salary raise", "No more cafés", "Moving to another city", "Buying a car"]
    assert all(s.affects in {"income", "expense"} for s in PRESET_SCENARIOS)

    car = PRESET_SCENARIOS[3]
    result = simulate_scenario(car, 10_000_000, 6_000_000, today=TODAY)
    assert result.difference == -2_000_000
    assert "Transport" in result.recommendation


def test_scenario_from_mapping_converts_major_units() -> None:
    """Config amounts in major units become minor units."""
    scenario = scenario_from_mapping(
        {
            "name": "Gym",
            "description": "Join a gym",
            "monthly_change": 45.5,
            "affects": "Expense",
            "category": "Sport",
        }
    )

    assert scenario == WhatIfScenario(
        name="Gym",
        description="Join a gym",
        monthly_change=4550,
        affects="expense",
        category="Sport",
    )


def test_scenario_from_mapping_defaults() -> None:
    """Description and category are optional."""
    scenario = scenario_from_mapping({"name": "Bonus", "monthly_change": "-10", "affects": "income"})

    assert scenario.description == ""
    assert scenario.category is None
    assert scenario.monthly_change == -1000


@pytest.mark.parametrize(
    "raw",
    [
        {"monthly_change": 10, "affects": "income"},
        {"name": "x", "affects": "income"},
        {"name": "x", "monthly_change": 10},
        {"name": "x", "monthly_change": 10, "affects": "savings"},
        {"name": "x", "monthly_change": "ten", "affects": "income"},
    ],
)
def test_scenario_from_mapping_rejects_invalid_definitions(raw) -> None:
    """Missing or malformed fields raise ValueError."""
    with pytest.raises(ValueError):
        scenario_from_mapping(raw)
