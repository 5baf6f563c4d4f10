# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Optional narrative enrichment for FinCast forecasts.

An enricher is any object with an ``async enrich(prompt) -> str`` method
that asks a text-generation service for a short insight (2-3 sentences).
It is injected by the caller, so the numeric engine and its tests never
need network access.

``generate_forecast_insights()`` wraps the call with a timeout. Any failure
(timeout, service error, empty reply) is logged and replaced by
FALLBACK_INSIGHT. It never touches the forecast itself.

``GeminiEnricher`` is the production enricher, backed by the Google GenAI
SDK.
"""

import asyncio
import logging
from typing import Optional, Protocol

from google import genai

from .errors import EnrichmentError
from .models import ExpenseForecast
from .money import format_money

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-lite"
DEFAULT_TIMEOUT_SECONDS = 10.0
FALLBACK_INSIGHT = "Keep tracking your expenses and stick to your budget."

_TREND_WORDS = {
    "increasing": "rising",
    "decreasing": "falling",
    "stable": "stable",
}


class NarrativeEnricher(Protocol):
    """Text-generation capability used to decorate forecasts with prose."""

    async def enrich(self, prompt: str) -> str: ...


class GeminiEnricher:
    """Enricher backed by a Gemini model through the google-genai client."""

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL):
        """
        Initialize the Gemini enricher.

        Args:
            api_key: Google AI API key
            model: Model name
        """
        self.client = genai.Client(api_key=api_key)
        self.model_name = model

    async def enrich(self, prompt: str) -> str:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
            )
        except Exception as exc:  # noqa: BLE001
            raise EnrichmentError(f"Gemini request failed: {exc}") from exc

        if not response.text:
            raise EnrichmentError("Gemini returned an empty response")
        return response.text


def build_forecast_prompt(
    forecast: ExpenseForecast,
    current_income: int,
    savings_goal: Optional[int] = None,
    currency: str = "EUR",
) -> str:
    """Build the short structured prompt sent to the enricher."""
    lines = [
        "Analyse this financial forecast and give a short insight "
        "(2-3 sentences) with one recommendation.",
        "",
        "Forecast for next month:",
        f"- Expected expenses: {format_money(forecast.predicted_expense, currency)}",
        f"- Forecast confidence: {forecast.confidence}%",
        f"- Trend: {_TREND_WORDS.get(forecast.trend, forecast.trend)}",
        f"- Monthly income: {format_money(current_income, currency)}",
    ]
    if savings_goal:
        lines.append(f"- Savings goal: {format_money(savings_goal, currency)}")
    lines.extend(["", "Give practical advice on how to optimise the budget."])
    return "\n".join(lines)


async def generate_forecast_insights(
    enricher: Optional[NarrativeEnricher],
    forecast: ExpenseForecast,
    current_income: int,
    savings_goal: Optional[int] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    currency: str = "EUR",
) -> str:
    """
    Ask the enricher for a short insight about a forecast.

    Returns FALLBACK_INSIGHT when no enricher is configured or when the
    call fails, times out, or returns only whitespace.
    """
    if enricher is None:
        return FALLBACK_INSIGHT

    prompt = build_forecast_prompt(forecast, current_income, savings_goal, currency)

    try:
        text = await asyncio.wait_for(enricher.enrich(prompt), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Forecast insight generation timed out after %.1fs", timeout)
        return FALLBACK_INSIGHT
    except Exception as exc:  # noqa: BLE001
        logger.warning("Forecast insight generation failed: %s", exc)
        return FALLBACK_INSIGHT

    text = (text or "").strip()
    if not text:
        logger.warning("Forecast insight generation returned an empty text")
        return FALLBACK_INSIGHT
    return text
