# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for FinCast.

This module wires together the main building blocks of FinCast:

- configuration (currency, data files, horizons, display options),
- the CSV history provider (transactions, plans, contributions),
- the expense forecast, goal projections and what-if simulator,
- the optional LLM insight,
- view helpers (tabular rendering).

The CLI is intentionally thin: it does not implement any forecasting
logic itself. It loads the inputs, calls the engine and renders the
result records as console tables and/or CSV files.


Commands
--------

- ``forecast``:
    Aggregate transactions per month over the configured look-back and
    forecast next month's expense (trend, confidence, factors). With
    ``--insights``, also ask the configured text model for a short insight.

- ``goals``:
    Project every savings plan from its recent contributions. With
    ``--plan-id``, also print the conservative / current / aggressive
    scenarios of that plan.

- ``goal-check``:
    Quick feasibility check of a goal from a flat monthly income and
    expense, without any stored plan.

- ``progress``:
    Month-by-month projected savings for one plan.

- ``simulate``:
    Simulate a what-if scenario (built-in, from the config, or ad hoc)
    against the current monthly income and expense.

- ``scenarios``:
    List the available what-if scenarios.


Configuration and overrides
---------------------------

By default, the CLI reads ``fincast_config.toml`` in the current
directory when it exists, and falls back to built-in defaults otherwise.
``--config PATH`` selects another file. ``--transactions``, ``--plans``
and ``--contributions`` override the data files of the configuration for
the current run only.

Amounts given on the command line are in major units (e.g. ``1500.50``).
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import DEFAULT_CONFIG_FILE, DISPLAY_MODES, LOG_LEVELS, AppConfig, load_app_config
from .enrichment import GeminiEnricher, NarrativeEnricher, generate_forecast_insights
from .errors import InsufficientDataError
from .goals import (
    calculate_all_goal_forecasts,
    calculate_goal_forecast,
    forecast_goal_achievement,
    generate_monthly_progress,
)
from .history import (
    build_monthly_aggregates,
    read_contributions,
    read_plans,
    read_transactions,
)
from .models import MonthlyAggregate, WhatIfScenario
from .money import to_minor
from .scenarios import PRESET_SCENARIOS, simulate_scenario
from .trend import MIN_HISTORY_MONTHS, forecast_next_month
from .views import (
    forecast_to_dataframe,
    goal_forecasts_to_dataframe,
    goal_projection_to_dataframe,
    goal_scenarios_to_dataframe,
    history_to_dataframe,
    monthly_progress_to_dataframe,
    scenario_summary_to_dataframe,
    scenario_timeline_to_dataframe,
    scenarios_to_dataframe,
)

logger = logging.getLogger(__name__)

Section = tuple[str, str, pd.DataFrame]


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m fincast.cli",
        description=(
            "FinCast - Financial forecasting & scenario simulation. "
            "Forecasts next month's expenses, projects savings goals and "
            "simulates what-if changes to income or expenses."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of fincast and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            f"'{DEFAULT_CONFIG_FILE}' in the current directory is used when present."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override the logging.level setting from the configuration file.",
    )

    # Data file overrides
    ap.add_argument("--transactions", help="Override the transactions CSV path.")
    ap.add_argument("--plans", help="Override the plans CSV path.")
    ap.add_argument("--contributions", help="Override the contributions CSV path.")

    # Display options
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=DISPLAY_MODES,
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help="Output directory for CSV files (default: display.output_dir).",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # forecast
    # ------------------------------------------------------------------
    forecast = subparsers.add_parser(
        "forecast",
        help="Forecast next month's expenses from transaction history.",
    )
    forecast.add_argument(
        "--months",
        type=int,
        help="Look-back in months (default: forecast.lookback_months).",
    )
    forecast.add_argument(
        "--insights",
        action="store_true",
        help="Also generate a short text insight with the configured model.",
    )
    forecast.add_argument(
        "--savings-goal",
        dest="savings_goal",
        help="Optional savings goal (major units) mentioned in the insight.",
    )

    # ------------------------------------------------------------------
    # goals
    # ------------------------------------------------------------------
    goals = subparsers.add_parser(
        "goals",
        help="Project savings plans from their recent contributions.",
    )
    goals.add_argument(
        "--plan-id",
        dest="plan_id",
        help="Only project this plan and show its contribution scenarios.",
    )

    # ------------------------------------------------------------------
    # goal-check
    # ------------------------------------------------------------------
    check = subparsers.add_parser(
        "goal-check",
        help="Check how long a goal takes from a flat monthly balance.",
    )
    check.add_argument("--current", required=True, help="Current savings (major units).")
    check.add_argument("--goal", required=True, help="Goal amount (major units).")
    check.add_argument("--income", required=True, help="Monthly income (major units).")
    check.add_argument("--expense", required=True, help="Monthly expense (major units).")

    # ------------------------------------------------------------------
    # progress
    # ------------------------------------------------------------------
    progress = subparsers.add_parser(
        "progress",
        help="Month-by-month projected savings for one plan.",
    )
    progress.add_argument("--plan-id", dest="plan_id", required=True)
    progress.add_argument("--months", type=int, default=12)

    # ------------------------------------------------------------------
    # simulate
    # ------------------------------------------------------------------
    simulate = subparsers.add_parser(
        "simulate",
        help="Simulate a what-if change to income or expenses.",
    )
    simulate.add_argument(
        "--name",
        help="Name of a built-in or configured scenario (see 'scenarios').",
    )
    simulate.add_argument(
        "--change",
        help="Ad hoc scenario: signed monthly change (major units).",
    )
    simulate.add_argument(
        "--affects",
        choices=["income", "expense"],
        help="Ad hoc scenario: side affected by the change.",
    )
    simulate.add_argument("--category", help="Ad hoc scenario: expense category.")
    simulate.add_argument(
        "--income",
        help="Baseline monthly income (major units). Defaults to the last month of history.",
    )
    simulate.add_argument(
        "--expense",
        help="Baseline monthly expense (major units). Defaults to the last month of history.",
    )
    simulate.add_argument(
        "--months",
        type=int,
        help="Simulation horizon in months (default: simulation.months).",
    )

    # ------------------------------------------------------------------
    # scenarios
    # ------------------------------------------------------------------
    subparsers.add_parser("scenarios", help="List the available what-if scenarios.")

    return ap


def configure_logging(level: str) -> None:
    """Configure the root logger with a timestamped console formatter."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def _load_config(config_path: Optional[str]) -> AppConfig:
    """Load the configuration, falling back to defaults when no file is present."""
    if config_path:
        return load_app_config(config_path)
    if Path(DEFAULT_CONFIG_FILE).is_file():
        return load_app_config()
    return AppConfig()


def _parse_amount(parser: argparse.ArgumentParser, value: str, option: str) -> int:
    try:
        return to_minor(value)
    except ValueError:
        parser.error(f"Invalid amount for {option}: {value!r}")


def _require_path(
    parser: argparse.ArgumentParser,
    override: Optional[str],
    configured: Optional[Path],
    option: str,
    key: str,
) -> Path:
    """Resolve a data file from the CLI override or the configuration."""
    path = Path(override) if override else configured
    if path is None:
        parser.error(f"No {key} file configured. Set data.{key} in the config or use {option}.")
    if not path.is_file():
        parser.error(f"{key.capitalize()} file not found: {path}")
    return path


def _emit(
    sections: list[Section],
    display_mode: str,
    output_dir: Path,
) -> None:
    """Render (title, slug, frame) sections as console tables and/or CSV files."""
    if display_mode in {"table", "both"}:
        for title, _slug, frame in sections:
            print()
            print(f"=== {title} ===")
            if frame.empty:
                print("(nothing to show)")
            else:
                print(frame.to_string(index=False))

    if display_mode in {"csv", "both"}:
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for _title, slug, frame in sections:
            path = output_dir / f"{slug}_{timestamp}.csv"
            frame.to_csv(path, index=False)
            print(f"Wrote {path} ({len(frame)} rows)")


def _build_enricher(config: AppConfig) -> Optional[NarrativeEnricher]:
    """Create the Gemini enricher when an API key is available."""
    api_key = os.getenv(config.enrichment.api_key_env)
    if not api_key:
        logger.warning(
            "No API key in $%s, insights fall back to the default message.",
            config.enrichment.api_key_env,
        )
        return None
    return GeminiEnricher(api_key=api_key, model=config.enrichment.model)


def _load_history(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    config: AppConfig,
    months: Optional[int],
) -> list[MonthlyAggregate]:
    path = _require_path(
        parser, args.transactions, config.data.transactions, "--transactions", "transactions"
    )
    transactions = read_transactions(path)
    history = build_monthly_aggregates(transactions, months=months)
    logger.info("Loaded %d transactions over %d months from %s", len(transactions), len(history), path)
    return history


def _handle_forecast(parser, args, config: AppConfig) -> list[Section]:
    months = args.months or config.lookback_months
    history = _load_history(parser, args, config, months)

    try:
        forecast = forecast_next_month(history)
    except InsufficientDataError as exc:
        raise SystemExit(
            f"Not enough data yet: at least {MIN_HISTORY_MONTHS} months of "
            f"transactions are needed to forecast, found {exc.received}."
        ) from exc

    sections: list[Section] = [
        ("History", "history", history_to_dataframe(history)),
        (f"Expense forecast for {forecast.month}", "forecast", forecast_to_dataframe(forecast)),
    ]

    if args.insights or config.enrichment.enabled:
        savings_goal = (
            _parse_amount(parser, args.savings_goal, "--savings-goal")
            if args.savings_goal
            else None
        )
        insight = asyncio.run(
            generate_forecast_insights(
                _build_enricher(config),
                forecast,
                current_income=history[-1].income,
                savings_goal=savings_goal,
                timeout=config.enrichment.timeout_seconds,
                currency=config.currency,
            )
        )
        sections.append(("Insight", "insight", pd.DataFrame({"insight": [insight]})))

    return sections


def _load_plans_and_contributions(parser, args, config: AppConfig):
    plans_path = _require_path(parser, args.plans, config.data.plans, "--plans", "plans")
    plans = read_plans(plans_path)

    contributions_path = Path(args.contributions) if args.contributions else config.data.contributions
    if contributions_path is not None and contributions_path.is_file():
        contributions = read_contributions(contributions_path)
    else:
        logger.info("No contributions file, projecting plans from planned contributions only.")
        contributions = {}

    return plans, contributions


def _select_plan(parser, plans, plan_id: str):
    for plan in plans:
        if plan.id == plan_id:
            return plan
    parser.error(f"Unknown plan id: {plan_id!r}")


def _handle_goals(parser, args, config: AppConfig) -> list[Section]:
    plans, contributions = _load_plans_and_contributions(parser, args, config)
    decimals = config.display.percent_decimals

    if args.plan_id:
        plan = _select_plan(parser, plans, args.plan_id)
        forecast = calculate_goal_forecast(
            plan, contributions.get(plan.id, ()), currency=config.currency
        )
        return [
            (f"Goal forecast: {plan.name}", "goal_forecast", goal_forecasts_to_dataframe([forecast], decimals)),
            ("Contribution scenarios", "goal_scenarios", goal_scenarios_to_dataframe(forecast)),
        ]

    forecasts = calculate_all_goal_forecasts(plans, contributions, currency=config.currency)
    return [("Goal forecasts", "goal_forecasts", goal_forecasts_to_dataframe(forecasts, decimals))]


def _handle_goal_check(parser, args, config: AppConfig) -> list[Section]:
    projection = forecast_goal_achievement(
        current_savings=_parse_amount(parser, args.current, "--current"),
        goal_amount=_parse_amount(parser, args.goal, "--goal"),
        monthly_income=_parse_amount(parser, args.income, "--income"),
        monthly_expense=_parse_amount(parser, args.expense, "--expense"),
        currency=config.currency,
    )
    frame = goal_projection_to_dataframe(projection, config.display.percent_decimals)
    return [("Goal check", "goal_check", frame)]


def _handle_progress(parser, args, config: AppConfig) -> list[Section]:
    if args.months < 1:
        parser.error("--months must be at least 1.")

    plans, contributions = _load_plans_and_contributions(parser, args, config)
    plan = _select_plan(parser, plans, args.plan_id)
    forecast = calculate_goal_forecast(plan, contributions.get(plan.id, ()), currency=config.currency)

    progress = generate_monthly_progress(
        current_amount=forecast.current_amount,
        goal_amount=forecast.goal_amount,
        monthly_contribution=forecast.average_monthly_contribution,
        months=args.months,
    )
    return [(f"Projected progress: {plan.name}", "progress", monthly_progress_to_dataframe(progress))]


def _available_scenarios(config: AppConfig) -> list[WhatIfScenario]:
    return [*PRESET_SCENARIOS, *config.scenarios]


def _resolve_scenario(parser, args, config: AppConfig) -> WhatIfScenario:
    if args.name:
        wanted = args.name.strip().lower()
        for scenario in _available_scenarios(config):
            if scenario.name.lower() == wanted:
                return scenario
        parser.error(f"Unknown scenario: {args.name!r}. Use 'scenarios' to list them.")

    if args.change is None or args.affects is None:
        parser.error("Provide either --name or both --change and --affects.")

    return WhatIfScenario(
        name="Custom scenario",
        description="Ad hoc scenario from the command line",
        monthly_change=_parse_amount(parser, args.change, "--change"),
        affects=args.affects,
        category=args.category,
    )


def _handle_simulate(parser, args, config: AppConfig) -> list[Section]:
    scenario = _resolve_scenario(parser, args, config)
    months = args.months or config.simulation_months
    if months < 1:
        parser.error("--months must be at least 1.")

    if args.income is not None and args.expense is not None:
        income = _parse_amount(parser, args.income, "--income")
        expense = _parse_amount(parser, args.expense, "--expense")
    else:
        history = _load_history(parser, args, config, config.lookback_months)
        if not history:
            parser.error("No transaction history to derive the baseline from; use --income/--expense.")
        last = history[-1]
        income = (
            _parse_amount(parser, args.income, "--income") if args.income is not None else last.income
        )
        expense = (
            _parse_amount(parser, args.expense, "--expense")
            if args.expense is not None
            else last.expense
        )

    result = simulate_scenario(scenario, income, expense, months=months, currency=config.currency)
    decimals = config.display.percent_decimals
    return [
        (f"Scenario: {scenario.name}", "scenario", scenario_summary_to_dataframe(result, decimals)),
        ("Cumulative balance", "scenario_timeline", scenario_timeline_to_dataframe(result)),
    ]


def _handle_scenarios(parser, args, config: AppConfig) -> list[Section]:
    return [("What-if scenarios", "scenarios", scenarios_to_dataframe(_available_scenarios(config)))]


_HANDLERS = {
    "forecast": _handle_forecast,
    "goals": _handle_goals,
    "goal-check": _handle_goal_check,
    "progress": _handle_progress,
    "simulate": _handle_simulate,
    "scenarios": _handle_scenarios,
}


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the FinCast CLI.

    This function parses command-line arguments, loads the configuration,
    configures logging, dispatches to the requested command and renders
    the resulting tables to the console and/or CSV files.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"fincast version {__version__}")
        return

    config = _load_config(args.config_path)
    configure_logging(args.log_level or config.log_level)

    handler = _HANDLERS.get(args.command)
    if handler is None:
        parser.print_help()
        return

    sections = handler(parser, args, config)

    display_mode = args.display_mode or config.display.mode
    output_dir = Path(args.output_dir) if args.output_dir else config.display.output_dir
    _emit(sections, display_mode, output_dir)


if __name__ == "__main__":
    main()
