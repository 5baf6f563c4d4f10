from datetime import date, datetime
from pathlib import Path

import pandas as pd
import pytest

from fincast.history import (
    UNCATEGORIZED,
    build_monthly_aggregates,
    read_contributions,
    read_plans,
    read_transactions,
)
from fincast.models import MonthlyAggregate, Plan


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture()
def transactions_csv(tmp_path: Path) -> Path:
    return _write(
        tmp_path,
        "transactions.csv",
        "Date,Amount,Direction,Category\n"
        "2024-02-12,60.25,Expense,\n"
        "2024-01-05,2000.00,income,Salary\n"
        "2024-01-10,-45.50,expense,Food\n"
        "2024-01-20,1000,expense,Rent\n"
        "2024-02-05,2000,income,Salary\n",
    )


def test_read_transactions_with_direction_column(transactions_csv: Path) -> None:
    df = read_transactions(transactions_csv)

    assert list(df.columns) == ["date", "amount", "direction", "category"]
    assert pd.api.types.is_datetime64_any_dtype(df["date"])
    # Sorted by date, amounts in minor units and always positive.
    assert df["date"].is_monotonic_increasing
    assert df["amount"].tolist() == [200000, 4550, 100000, 200000, 6025]
    assert df["direction"].tolist() == ["income", "expense", "expense", "income", "expense"]
    assert df["category"].iloc[-1] == UNCATEGORIZED


def test_read_transactions_with_signed_amounts(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "signed.csv",
        "date,amount\n2024-03-01,1500\n2024-03-02,-200.10\n",
    )

    df = read_transactions(path)

    assert df["direction"].tolist() == ["income", "expense"]
    assert df["amount"].tolist() == [150000, 20010]
    assert set(df["category"]) == {UNCATEGORIZED}


@pytest.mark.parametrize(
    "content",
    [
        "when,amount\n2024-01-01,10\n",
        "date,amount,direction\n2024-01-01,10,transfer\n",
        "date,amount\n2024-01-01,ten\n",
        "date,amount\nnot-a-date,10\n",
    ],
)
def test_read_transactions_rejects_invalid_files(tmp_path: Path, content: str) -> None:
    path = _write(tmp_path, "bad.csv", content)

    with pytest.raises(ValueError):
        read_transactions(path)


def test_build_monthly_aggregates(transactions_csv: Path) -> None:
    aggregates = build_monthly_aggregates(read_transactions(transactions_csv))

    assert aggregates == [
        MonthlyAggregate(
            month="2024-01",
            income=200000,
            expense=104550,
            categories={"Food": 4550, "Rent": 100000},
        ),
        MonthlyAggregate(
            month="2024-02",
            income=200000,
            expense=6025,
            categories={UNCATEGORIZED: 6025},
        ),
    ]
    assert aggregates[0].balance == 95450


def test_build_monthly_aggregates_with_lookback(transactions_csv: Path) -> None:
    aggregates = build_monthly_aggregates(
        read_transactions(transactions_csv),
        months=1,
        today=date(2024, 2, 20),
    )

    # The window starts on 2024-01-20: only the rent is kept in January.
    assert [a.month for a in aggregates] == ["2024-01", "2024-02"]
    assert aggregates[0].income == 0
    assert aggregates[0].expense == 100000


def test_build_monthly_aggregates_empty_window(transactions_csv: Path) -> None:
    aggregates = build_monthly_aggregates(
        read_transactions(transactions_csv),
        months=3,
        today=date(2025, 1, 1),
    )

    assert aggregates == []


def test_read_plans(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "plans.csv",
        "id,name,goal_amount,current_amount,monthly_contribution,target_date,plan_type\n"
        "p1,Holidays,3000,1200.50,150,2025-06-30,travel\n"
        "p2,Car,10000,0,,,\n",
    )

    plans = read_plans(path)

    assert plans == [
        Plan(
            id="p1",
            name="Holidays",
            goal_amount=300000,
            current_amount=120050,
            monthly_contribution=15000,
            target_date=date(2025, 6, 30),
            plan_type="travel",
        ),
        Plan(id="p2", name="Car", goal_amount=1000000, current_amount=0),
    ]


def test_read_plans_rejects_bad_target_date(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "plans.csv",
        "id,name,goal_amount,current_amount,target_date\np1,Holidays,3000,0,30/06/2025\n",
    )

    with pytest.raises(ValueError, match="target_date"):
        read_plans(path)


def test_read_plans_requires_columns(tmp_path: Path) -> None:
    path = _write(tmp_path, "plans.csv", "id,name\np1,Holidays\n")

    with pytest.raises(ValueError, match="goal_amount"):
        read_plans(path)


def test_read_contributions_groups_by_plan_newest_first(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "contributions.csv",
        "plan_id,amount,occurred_at\n"
        "p1,100,2024-01-05\n"
        "p2,20,2024-02-01\n"
        "p1,50.5,2024-03-05T10:30:00\n",
    )

    contributions = read_contributions(path)

    assert set(contributions) == {"p1", "p2"}
    assert [c.amount for c in contributions["p1"]] == [5050, 10000]
    assert contributions["p1"][0].occurred_at == datetime(2024, 3, 5, 10, 30)
    assert isinstance(contributions["p2"][0].occurred_at, datetime)


def test_read_contributions_requires_columns(tmp_path: Path) -> None:
    path = _write(tmp_path, "contributions.csv", "plan_id,amount\np1,10\n")

    with pytest.raises(ValueError, match="occurred_at"):
        read_contributions(path)
