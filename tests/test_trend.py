import pytest

from fincast.errors import InsufficientDataError
from fincast.models import CategoryAmount, MonthlyAggregate
from fincast.trend import (
    classify_trend,
    forecast_next_month,
    percent_change,
    split_recent,
    weighted_average,
)


def _history(*expenses: int, start_year: int = 2024) -> list[MonthlyAggregate]:
    return [
        MonthlyAggregate(
            month=f"{start_year + i // 12:04d}-{i % 12 + 1:02d}",
            income=300000,
            expense=expense,
        )
        for i, expense in enumerate(expenses)
    ]


def test_weighted_average_favours_recent_months() -> None:
    """Later months get higher weights; empty input averages to zero."""
    assert weighted_average([100, 110, 120]) == pytest.approx(680 / 6)
    assert weighted_average([50]) == 50
    assert weighted_average([]) == 0.0


def test_split_recent_keeps_at_least_one_older_value() -> None:
    """The recent half never swallows the whole history."""
    assert split_recent([1, 2]) == ([2], [1])
    assert split_recent([1, 2, 3]) == ([2, 3], [1])
    assert split_recent([1, 2, 3, 4, 5]) == ([3, 4, 5], [1, 2])


def test_percent_change_with_zero_older_average() -> None:
    """A zero older average reports 100% growth, or 0% when nothing was spent."""
    assert percent_change([10.0], [0.0]) == 100.0
    assert percent_change([0.0], [0.0]) == 0.0
    assert percent_change([110.0], [100.0]) == pytest.approx(10.0)


@pytest.mark.parametrize(
    ("change", "expected"),
    [
        (0.0, "stable"),
        (4.99, "stable"),
        (-4.99, "stable"),
        (5.0, "increasing"),
        (-5.0, "decreasing"),
        (250.0, "increasing"),
    ],
)
def test_classify_trend_thresholds(change, expected) -> None:
    """Changes within 5% either way are stable."""
    assert classify_trend(change) == expected


def test_forecast_rising_history_end_to_end() -> None:
    """Three rising months forecast the 4th month with an increasing trend."""
    forecast = forecast_next_month(_history(100000, 110000, 120000))

    assert forecast.month == "2024-04"
    assert forecast.trend == "increasing"
    assert 100000 < forecast.predicted_expense < 120000
    assert forecast.predicted_expense == 113333
    assert forecast.confidence < 95
    assert forecast.confidence == 92
    assert forecast.percent_change == pytest.approx(15.0)
    assert forecast.factors == ("Expenses up 15.0%", "Seasonal factors may be involved")


def test_forecast_decreasing_history() -> None:
    """Falling expenses report a decreasing trend and a "down" factor."""
    forecast = forecast_next_month(_history(120000, 110000, 100000))

    assert forecast.trend == "decreasing"
    assert forecast.percent_change == pytest.approx(-12.5)
    assert forecast.factors[0] == "Expenses down 12.5%"


def test_constant_history_is_stable_with_capped_confidence() -> None:
    """Confidence never exceeds 95, even without any variation."""
    forecast = forecast_next_month(_history(50000, 50000, 50000, 50000))

    assert forecast.trend == "stable"
    assert forecast.confidence == 95
    assert forecast.predicted_expense == 50000
    assert forecast.factors == ("Stable spending", "Predictable behaviour")


def test_volatile_history_hits_confidence_floor() -> None:
    """Confidence never drops below 50."""
    forecast = forecast_next_month(_history(10000, 100000))

    assert forecast.predicted_expense == 70000
    assert forecast.confidence == 50
    assert forecast.trend == "increasing"


def test_zero_expenses_are_fully_predictable() -> None:
    """An all-zero history yields a zero forecast with maximum confidence."""
    forecast = forecast_next_month(_history(0, 0, 0))

    assert forecast.predicted_expense == 0
    assert forecast.confidence == 95
    assert forecast.trend == "stable"


@pytest.mark.parametrize(
    "expenses",
    [
        (1, 1000000),
        (500, 0, 500, 0, 500),
        (120000, 80000, 300000, 10000, 95000, 110000),
        (0, 1),
        (99999, 100000),
    ],
)
def test_confidence_and_prediction_bounds(expenses) -> None:
    """Confidence stays in [50, 95] and the prediction is never negative."""
    forecast = forecast_next_month(_history(*expenses))

    assert 50 <= forecast.confidence <= 95
    assert forecast.predicted_expense >= 0


@pytest.mark.parametrize("history", [[], _history(100000)])
def test_forecast_requires_two_months(history) -> None:
    """Fewer than two months of history raise InsufficientDataError."""
    with pytest.raises(InsufficientDataError) as excinfo:
        forecast_next_month(history)

    assert excinfo.value.required == 2
    assert excinfo.value.received == len(history)
    # Callers that only know about ValueError still catch it.
    assert isinstance(excinfo.value, ValueError)


def test_forecast_sorts_history_and_rolls_over_year() -> None:
    """History is ordered by month and December rolls over to January."""
    history = [
        MonthlyAggregate(month="2024-12", income=0, expense=200000),
        MonthlyAggregate(month="2024-11", income=0, expense=100000),
    ]

    forecast = forecast_next_month(history)

    assert forecast.month == "2025-01"
    # Weighted towards December: (100000 * 1 + 200000 * 2) / 3
    assert forecast.predicted_expense == 166667
    # The caller's list is left untouched.
    assert history[0].month == "2024-12"


def test_forecast_category_breakdown() -> None:
    """Categories are averaged over all months and sorted by amount."""
    history = [
        MonthlyAggregate(
            month="2024-01",
            income=300000,
            expense=93000,
            categories={"Food": 30000, "Rent": 60000, "Taxi": 3000},
        ),
        MonthlyAggregate(
            month="2024-02",
            income=300000,
            expense=120000,
            categories={"Food": 60000, "Rent": 60000},
        ),
    ]

    forecast = forecast_next_month(history)

    assert forecast.breakdown == (
        CategoryAmount(category="Rent", amount=60000),
        CategoryAmount(category="Food", amount=50000),
        CategoryAmount(category="Taxi", amount=1000),
    )


def test_forecast_without_categories_has_empty_breakdown() -> None:
    """Without category data the breakdown is empty."""
    assert forecast_next_month(_history(1000, 2000)).breakdown == ()
