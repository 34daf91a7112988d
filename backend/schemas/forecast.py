"""
Pydantic schemas for forecast inputs and outputs.

``Observation`` is what the history store hands us, ``ForecastRequest``
validates caller input, and ``ForecastResult`` is the immutable value
returned by every forecasting path (full model or fallback) so callers
never need to branch on which one produced it.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Observation(BaseModel):
    """
    One historical data point for a symbol.

    Attributes:
        price:     Closing price, strictly positive.
        volume:    Traded volume, non-negative.
        timestamp: When the observation was recorded, normalised to UTC.
    """

    model_config = ConfigDict(frozen=True)

    price: float = Field(gt=0)
    volume: int = Field(default=0, ge=0)
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        """Naive timestamps are taken as UTC; aware ones are converted to it."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class ForecastRequest(BaseModel):
    """
    Caller input for ``ForecastOrchestrator.forecast``.

    Attributes:
        symbol:       Ticker (e.g. ``AAPL``); stripped and upper-cased.
        horizon_days: Number of future steps to forecast, at least 1.
    """

    symbol: str
    horizon_days: int = Field(gt=0)

    @field_validator("symbol")
    @classmethod
    def normalise_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("symbol must not be empty")
        return v


class ForecastResult(BaseModel):
    """
    Forecast returned to the caller.

    ``predicted_prices``, ``prediction_dates`` and (when present)
    ``lower_bounds`` / ``upper_bounds`` are index-aligned.

    Attributes:
        symbol:           Ticker the forecast was built for.
        predicted_prices: Point forecast per step, each > 0.
        prediction_dates: Calendar date of each step.
        confidence:       Heuristic confidence score in [0, 1].
        model_label:      Which path produced the result (``ridge``,
                          ``lstm``, ``fallback-trend``, ``fallback-empty``).
        lower_bounds:     Lower prediction-interval bound per step.
        upper_bounds:     Upper prediction-interval bound per step.
        mae:              Training mean absolute error (price units).
        mape:             Training mean absolute percentage error.
        rmse:             Training root mean squared error (price units).
        data_points_used: Historical observations the forecast was built on.
        model_info:       Free-form model metadata.
        generated_at:     When the result was produced (UTC).
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    symbol: str
    predicted_prices: List[float]
    prediction_dates: List[date]
    confidence: float = Field(ge=0, le=1)
    model_label: str
    lower_bounds: Optional[List[float]] = None
    upper_bounds: Optional[List[float]] = None
    mae: Optional[float] = None
    mape: Optional[float] = None
    rmse: Optional[float] = None
    data_points_used: int = 0
    model_info: Dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_fallback(self) -> bool:
        """True when the result came from the degraded trend path."""
        return self.model_label.startswith("fallback")

    @model_validator(mode="after")
    def _check_alignment(self) -> "ForecastResult":
        n = len(self.predicted_prices)
        if len(self.prediction_dates) != n:
            raise ValueError(
                f"prediction_dates ({len(self.prediction_dates)}) must match "
                f"predicted_prices ({n})"
            )
        for name in ("lower_bounds", "upper_bounds"):
            bounds = getattr(self, name)
            if bounds is not None and len(bounds) != n:
                raise ValueError(f"{name} ({len(bounds)}) must match predicted_prices ({n})")
        return self
