# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
History provider for FinCast.

The forecasting engine only consumes plain records (MonthlyAggregate,
Plan, ContributionRecord). This module builds them from CSV files so that
the CLI can run without the application's database.

Expected input formats
----------------------
Column names are case-insensitive and amounts are written in major units
(e.g. ``1234.56``); they are converted to integer minor units.

1) Transactions
   ------------
   Either a direction column:

       date, amount, direction[, category]

   where ``direction`` is ``income`` or ``expense`` and ``amount`` is
   taken as an absolute value, or a signed amount:

       date, amount[, category]

   where positive amounts are income and negative amounts are expenses.

   Output DataFrame columns: ``date`` (datetime64[ns]), ``amount`` (int,
   minor units, >= 0), ``direction`` (str), ``category`` (str).

2) Plans
   -----
       id, name, goal_amount, current_amount
       [, monthly_contribution, target_date, plan_type]

3) Contributions
   -------------
       plan_id, amount, occurred_at

If a CSV structure does not match, a clear ValueError is raised.
"""

import os
from collections import defaultdict
from datetime import date
from typing import Optional, Union

import pandas as pd

from .models import ContributionRecord, MonthlyAggregate, Plan
from .money import to_minor
from .periods import filter_by_period, trailing_window

PathLike = Union[str, "os.PathLike[str]"]

UNCATEGORIZED = "Uncategorized"


def _read_csv(path: PathLike) -> pd.DataFrame:
    """Read a CSV as strings with normalized (lowercase, stripped) column names."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [c.lower().strip() for c in df.columns]
    return df


def _parse_dates(series: pd.Series, column: str) -> pd.Series:
    """Parse ISO 8601 dates or date-times (formats may be mixed within a column)."""
    try:
        return pd.to_datetime(series, format="ISO8601", errors="raise")
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Invalid values in '{column}' column.") from exc


def _parse_amounts(series: pd.Series, column: str) -> pd.Series:
    try:
        return series.map(to_minor).astype("int64")
    except ValueError as exc:
        raise ValueError(f"Invalid numeric values in '{column}' column.") from exc


def read_transactions(path: PathLike) -> pd.DataFrame:
    """
    Read transactions from a CSV file and normalize them.

    Returns
    -------
    pandas.DataFrame
        Columns ``date``, ``amount`` (minor units, >= 0), ``direction``
        ('income' or 'expense') and ``category``.

    Raises
    ------
    ValueError
        If the CSV does not contain a supported column set or if
        date/amount parsing fails.
    """
    df = _read_csv(path)
    cols = set(df.columns)

    if not {"date", "amount"}.issubset(cols):
        raise ValueError(
            "Invalid transactions structure. Expected either:\n"
            "  - date, amount, direction[, category]\n"
            "  - date, amount[, category] (signed amounts)\n"
            "(column names are case-insensitive)."
        )

    d = df.copy()
    d["date"] = _parse_dates(d["date"], "date")
    signed = _parse_amounts(d["amount"], "amount")

    # ----- Case 1: explicit direction ---------------------------------------
    if "direction" in cols:
        direction = d["direction"].str.strip().str.lower()
        invalid = ~direction.isin(["income", "expense"])
        if invalid.any():
            raise ValueError(
                "Invalid values in 'direction' column, expected 'income' or 'expense'."
            )
        d["direction"] = direction
        d["amount"] = signed.abs()

    # ----- Case 2: signed amounts -------------------------------------------
    else:
        d["direction"] = signed.map(lambda v: "income" if v >= 0 else "expense")
        d["amount"] = signed.abs()

    if "category" in cols:
        d["category"] = d["category"].str.strip().replace("", UNCATEGORIZED)
    else:
        d["category"] = UNCATEGORIZED

    out = d[["date", "amount", "direction", "category"]].copy()
    return out.sort_values("date", kind="stable").reset_index(drop=True)


def build_monthly_aggregates(
    transactions: pd.DataFrame,
    months: Optional[int] = None,
    today: Optional[date] = None,
) -> list[MonthlyAggregate]:
    """
    Aggregate transactions into one MonthlyAggregate per calendar month.

    Args:
        transactions: DataFrame as returned by ``read_transactions``.
        months: Optional look-back: keep only transactions of the trailing
            ``months`` months before ``today``.
        today: Reference date for the look-back window.

    Returns:
        Aggregates sorted ascending by month. Months without any
        transaction do not appear.
    """
    if months is not None:
        transactions = filter_by_period(transactions, trailing_window(months, today))

    if transactions.empty:
        return []

    d = transactions.copy()
    d["month"] = d["date"].dt.strftime("%Y-%m")

    totals = d.pivot_table(
        index="month",
        columns="direction",
        values="amount",
        aggfunc="sum",
        fill_value=0,
    )

    expenses = d[d["direction"] == "expense"]
    categories: dict[str, dict[str, int]] = defaultdict(dict)
    for (month, category), amount in expenses.groupby(["month", "category"])["amount"].sum().items():
        categories[month][str(category)] = int(amount)

    aggregates = []
    for month, row in totals.sort_index().iterrows():
        aggregates.append(
            MonthlyAggregate(
                month=str(month),
                income=int(row.get("income", 0)),
                expense=int(row.get("expense", 0)),
                categories=dict(categories.get(month, {})),
            )
        )
    return aggregates


def read_plans(path: PathLike) -> list[Plan]:
    """
    Read savings plans from a CSV file.

    Raises:
        ValueError: if required columns are missing or values are invalid.
    """
    df = _read_csv(path)
    required = {"id", "name", "goal_amount", "current_amount"}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            f"Invalid plans structure, missing columns: {', '.join(sorted(missing))}."
        )

    plans = []
    for row in df.to_dict(orient="records"):
        target_raw = str(row.get("target_date") or "").strip()
        try:
            target_date = date.fromisoformat(target_raw) if target_raw else None
        except ValueError as exc:
            raise ValueError(
                f"Invalid target_date {target_raw!r} for plan {row['id']!r}, "
                "expected YYYY-MM-DD."
            ) from exc

        plans.append(
            Plan(
                id=str(row["id"]).strip(),
                name=str(row["name"]).strip(),
                goal_amount=to_minor(row["goal_amount"] or 0),
                current_amount=to_minor(row["current_amount"] or 0),
                monthly_contribution=to_minor(row.get("monthly_contribution") or 0),
                target_date=target_date,
                plan_type=str(row.get("plan_type") or "savings").strip(),
            )
        )
    return plans


def read_contributions(path: PathLike) -> dict[str, list[ContributionRecord]]:
    """
    Read plan contributions from a CSV file, grouped by plan id.

    Records of each plan are sorted from the newest to the oldest.
    """
    df = _read_csv(path)
    required = {"plan_id", "amount", "occurred_at"}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            f"Invalid contributions structure, missing columns: "
            f"{', '.join(sorted(missing))}."
        )

    d = df.copy()
    d["occurred_at"] = _parse_dates(d["occurred_at"], "occurred_at")
    d["amount"] = _parse_amounts(d["amount"], "amount")

    by_plan: dict[str, list[ContributionRecord]] = defaultdict(list)
    for row in d.itertuples(index=False):
        by_plan[str(row.plan_id).strip()].append(
            ContributionRecord(
                amount=int(row.amount),
                occurred_at=row.occurred_at.to_pydatetime(),
            )
        )

    for records in by_plan.values():
        records.sort(key=lambda c: c.occurred_at, reverse=True)
    return dict(by_plan)
