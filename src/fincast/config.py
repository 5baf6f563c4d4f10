# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for FinCast.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating each section and applying defaults,
- exposing typed dataclasses used by the CLI and the history provider.

The forecasting policy constants (3-month contribution window, 12-month
planning horizon, confidence bounds, ...) are product decisions and live
next to the code that applies them. They are not configurable here.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

from .enrichment import DEFAULT_MODEL, DEFAULT_TIMEOUT_SECONDS
from .models import WhatIfScenario
from .scenarios import DEFAULT_SIMULATION_MONTHS, scenario_from_mapping

DEFAULT_CONFIG_FILE = "fincast_config.toml"
DEFAULT_LOOKBACK_MONTHS = 6
DISPLAY_MODES = ("table", "csv", "both")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class DataPaths:
    """Location of the CSV files standing in for the persistence layer."""

    transactions: Optional[Path] = None
    plans: Optional[Path] = None
    contributions: Optional[Path] = None


@dataclass(frozen=True)
class EnrichmentConfig:
    """Settings of the optional LLM narrative enrichment."""

    enabled: bool = False
    model: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    api_key_env: str = "GEMINI_API_KEY"


@dataclass(frozen=True)
class DisplayConfig:
    """Display options for tables and CSV exports."""

    mode: str = "table"
    percent_decimals: int = 1
    output_dir: Path = Path("data/output")


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for FinCast.

    This aggregates:
    - the presentation currency,
    - the data files (transactions, plans, contributions),
    - the forecast look-back and simulation horizon,
    - the optional enrichment settings,
    - display and logging options,
    - user-defined what-if scenarios.
    """

    currency: str = "EUR"
    data: DataPaths = field(default_factory=DataPaths)
    lookback_months: int = DEFAULT_LOOKBACK_MONTHS
    simulation_months: int = DEFAULT_SIMULATION_MONTHS
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    log_level: str = "INFO"
    scenarios: tuple[WhatIfScenario, ...] = ()


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a sub-table of the config, or an empty mapping if absent or invalid."""
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        return {}
    return value


def _positive_int(value: Any, key: str) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{key}' in the configuration. Expected an integer."
        ) from exc

    if result < 1:
        raise ValueError(f"Invalid value for '{key}' in the configuration: must be >= 1.")
    return result


def _parse_data_paths(section: Mapping[str, Any], base_dir: Path) -> DataPaths:
    """Resolve the [data] file paths relative to the config file directory."""

    def _resolve_optional(rel: Optional[str]) -> Optional[Path]:
        if not rel:
            return None
        return (base_dir / str(rel)).resolve()

    return DataPaths(
        transactions=_resolve_optional(section.get("transactions")),
        plans=_resolve_optional(section.get("plans")),
        contributions=_resolve_optional(section.get("contributions")),
    )


def _parse_enrichment(section: Mapping[str, Any]) -> EnrichmentConfig:
    try:
        timeout = float(section.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'enrichment.timeout_seconds' in the configuration. "
            "Expected a number."
        ) from exc

    if timeout <= 0:
        raise ValueError("'enrichment.timeout_seconds' must be strictly positive.")

    return EnrichmentConfig(
        enabled=bool(section.get("enabled", False)),
        model=str(section.get("model") or DEFAULT_MODEL),
        timeout_seconds=timeout,
        api_key_env=str(section.get("api_key_env") or "GEMINI_API_KEY"),
    )


def _parse_display(section: Mapping[str, Any], base_dir: Path) -> DisplayConfig:
    mode = str(section.get("mode", "table"))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid display mode {mode!r}. Expected one of: {', '.join(DISPLAY_MODES)}."
        )

    try:
        percent_decimals = int(section.get("percent_decimals", 1))
    except (TypeError, ValueError):
        percent_decimals = 1

    output_dir = (base_dir / str(section.get("output_dir") or "data/output")).resolve()

    return DisplayConfig(
        mode=mode,
        percent_decimals=percent_decimals,
        output_dir=output_dir,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the FinCast application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [currency]
        ``code``: presentation currency code (default "EUR").

    [data]
        ``transactions``, ``plans``, ``contributions``: CSV files used as
        the history provider. Paths are relative to the TOML file.

    [forecast]
        ``lookback_months``: number of past months fed to the expense
        forecast (default 6).

    [simulation]
        ``months``: default what-if horizon (default 12).

    [enrichment]
        ``enabled``, ``model``, ``timeout_seconds``, ``api_key_env``.

    [display]
        ``mode`` (table, csv, both), ``percent_decimals``, ``output_dir``.

    [logging]
        ``level``: root log level (default "INFO").

    [[scenarios]]
        User what-if scenarios: ``name``, ``description``,
        ``monthly_change`` (major units, signed), ``affects``
        ("income" or "expense"), optional ``category``.

    Parameters
    ----------
    config_path :
        Path to the TOML configuration file. Defaults to
        ``fincast_config.toml`` in the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Currency
    currency = str(_section(raw, "currency").get("code") or "EUR")

    # 2) Data files
    data = _parse_data_paths(_section(raw, "data"), base_dir)

    # 3) Forecast and simulation horizons
    lookback_months = _positive_int(
        _section(raw, "forecast").get("lookback_months", DEFAULT_LOOKBACK_MONTHS),
        "forecast.lookback_months",
    )
    simulation_months = _positive_int(
        _section(raw, "simulation").get("months", DEFAULT_SIMULATION_MONTHS),
        "simulation.months",
    )

    # 4) Enrichment, display, logging
    enrichment = _parse_enrichment(_section(raw, "enrichment"))
    display = _parse_display(_section(raw, "display"), base_dir)

    log_level = str(_section(raw, "logging").get("level", "INFO")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid logging level {log_level!r}.")

    # 5) User scenarios
    raw_scenarios = raw.get("scenarios") or []
    if not isinstance(raw_scenarios, list):
        raise ValueError("'scenarios' must be an array of tables ([[scenarios]]).")

    scenarios = tuple(
        scenario_from_mapping(item) for item in raw_scenarios if isinstance(item, Mapping)
    )

    return AppConfig(
        currency=currency,
        data=data,
        lookback_months=lookback_months,
        simulation_months=simulation_months,
        enrichment=enrichment,
        display=display,
        log_level=log_level,
        scenarios=scenarios,
    )
