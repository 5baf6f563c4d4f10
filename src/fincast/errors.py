# FinCast - Financial forecasting & scenario simulation engine
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""Exception classes for FinCast."""


class FincastError(Exception):
    """Base exception for FinCast."""


class InsufficientDataError(FincastError, ValueError):
    """
    Raised when an estimator is called with too little history.

    Callers show a "not enough data yet" message instead of a number.
    """

    def __init__(self, required: int, received: int):
        self.required = required
        self.received = received
        super().__init__(
            f"Not enough history to forecast: at least {required} months "
            f"are required, got {received}."
        )


class EnrichmentError(FincastError):
    """Raised by narrative enrichers when the text service fails or returns nothing."""
