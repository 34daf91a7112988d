"""
analytics/forecasting/errors.py
───────────────────────────────
Exceptions surfaced to forecast callers.

Only caller misuse propagates; insufficient data and training failures are
absorbed into the fallback path.
"""


class ForecastInputError(ValueError):
    """Invalid forecast request (blank symbol or non-positive horizon)."""
