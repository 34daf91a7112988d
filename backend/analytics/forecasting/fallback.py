"""
analytics/forecasting/fallback.py
─────────────────────────────────
Degraded-mode forecast used when the sequence model is unavailable.

The last price is pushed gradually in the direction of its deviation from
the window mean.  This path never raises for well-formed observations.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence

import numpy as np

from analytics.forecasting.statistics import infer_freq_days, to_price_frame
from schemas.forecast import ForecastResult, Observation

logger = logging.getLogger(__name__)

PRICE_FLOOR = 0.01

EMPTY_LABEL = "fallback-empty"
TREND_LABEL = "fallback-trend"
EMPTY_CONFIDENCE = 0.3
TREND_CONFIDENCE = 0.4

# Fraction of the deviation from the mean applied per forecast step.
TREND_DAMPING = 0.1


def forecast_dates(observations: Sequence[Observation], horizon: int) -> List[date]:
    """
    Calendar dates of the next ``horizon`` steps after the last observation.

    Steps are the median spacing of the observations (at least one day).
    """
    if not observations:
        return []
    frame = to_price_frame(observations)
    step = timedelta(days=infer_freq_days(frame.index))
    last = observations[-1].timestamp.date()
    return [last + step * h for h in range(1, horizon + 1)]


class TrendExtrapolator:
    """
    Naive trend forecaster.

    Args:
        noise_range: Width of the uniform perturbation ``(u − 0.5) · range``
                     added to each step's relative move; 0 disables it.
    """

    def __init__(self, noise_range: float = 0.02) -> None:
        self.noise_range = noise_range

    def forecast(
        self,
        symbol: str,
        horizon_days: int,
        observations: Sequence[Observation],
        rng: Optional[np.random.Generator] = None,
    ) -> ForecastResult:
        """
        Extrapolate the recent deviation from the mean.

        Args:
            symbol:       Ticker.
            horizon_days: Number of steps to forecast.
            observations: Whatever history exists, oldest → newest; may be empty.
            rng:          Random generator for the perturbation.

        Returns:
            ``fallback-empty`` result (no prices, confidence 0.3) when there is
            no history, else a ``fallback-trend`` result with confidence 0.4.
        """
        if not observations:
            logger.info("No history for %s, returning empty fallback forecast", symbol)
            return ForecastResult(
                symbol=symbol,
                predicted_prices=[],
                prediction_dates=[],
                confidence=EMPTY_CONFIDENCE,
                model_label=EMPTY_LABEL,
            )

        rng = rng if rng is not None else np.random.default_rng()
        prices = np.array([o.price for o in observations], dtype=np.float64)
        last_price = float(prices[-1])
        avg_price = float(prices.mean())
        trend = (last_price - avg_price) / avg_price

        predictions: List[float] = []
        for day in range(1, horizon_days + 1):
            noise = (rng.random() - 0.5) * self.noise_range if self.noise_range else 0.0
            predicted = last_price * (1 + trend * day * TREND_DAMPING + noise)
            predictions.append(max(predicted, PRICE_FLOOR))

        logger.info(
            "Trend fallback for %s over %d points (trend=%.4f)",
            symbol,
            len(observations),
            trend,
        )
        return ForecastResult(
            symbol=symbol,
            predicted_prices=predictions,
            prediction_dates=forecast_dates(observations, horizon_days),
            confidence=TREND_CONFIDENCE,
            model_label=TREND_LABEL,
            data_points_used=len(observations),
            model_info={"model_name": self.__class__.__name__, "trend": trend},
        )
