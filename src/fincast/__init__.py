# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
FinCast
-------

A Python forecasting engine for personal finance. It turns a short history
of monthly income and expenses, savings plans and what-if scenarios into
plain result records that any presentation layer can render.

Main capabilities:
- next-month expense forecast (weighted average, trend, confidence score,
  per-category breakdown),
- savings goal projections from recent contributions, with conservative,
  current and aggressive scenarios and rule-based advice,
- simplified goal feasibility check from a flat monthly balance,
- what-if simulation of income or expense changes with a cumulative
  month-by-month timeline,
- optional short text insight from a Gemini model, with a safe fallback.

FinCast separates computation (engine modules), configuration (TOML),
data loading (CSV via pandas) and presentation (CLI tables / CSV export).


Version: 0.1.0

Usage:
    python -m fincast.cli --help
"""

__all__ = ["trend", "goals", "scenarios", "advice", "enrichment", "views"]

__version__ = "0.1.0"
