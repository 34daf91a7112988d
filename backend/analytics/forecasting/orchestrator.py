"""
analytics/forecasting/orchestrator.py
─────────────────────────────────────
Top-level entry point: history → statistics → cached model → forecast.

Request flow
------------
    insufficient history          → trend fallback
    cached model (within TTL)     → autoregressive forecast
    no cached model               → train (single-flight per symbol)
        success                   → autoregressive forecast
        failure / timeout         → trend fallback

Only caller misuse (blank symbol, horizon ≤ 0) raises; every other
problem is absorbed into the fallback path and signalled through
``ForecastResult.model_label``.
"""

import logging
import time
from dataclasses import asdict
from datetime import timedelta
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from pydantic import ValidationError
from scipy.stats import norm

from analytics.forecasting.base import SequenceModel
from analytics.forecasting.cache import ModelCache, TrainedModel
from analytics.forecasting.errors import ForecastInputError
from analytics.forecasting.factory import SequenceModelFactory
from analytics.forecasting.fallback import PRICE_FLOOR, TrendExtrapolator, forecast_dates
from analytics.forecasting.features import (
    build_feature_matrix,
    build_feature_vector,
    build_training_windows,
)
from analytics.forecasting.statistics import (
    StockStatistics,
    compute_statistics,
    denormalize_price,
)
from analytics.metrics import residual_metrics, training_accuracy
from core.config import Settings, get_settings
from data_engine.history import HistoryProvider
from schemas.forecast import ForecastRequest, ForecastResult, Observation

logger = logging.getLogger(__name__)

# Residual spreads at or below this are treated as "not measured".
_MIN_RESIDUAL_STD = 1e-9

MIN_CONFIDENCE = 0.3
MAX_CONFIDENCE = 0.95


def compute_confidence(accuracy: float, stats: StockStatistics, data_points: int) -> float:
    """
    Heuristic confidence score in ``[MIN_CONFIDENCE, MAX_CONFIDENCE]``.

    ``accuracy`` is scaled down for short histories, high volatility and
    a weak trend.

    Args:
        accuracy:    Training accuracy of the model.
        stats:       Statistics of the forecast window.
        data_points: Number of observations in the window.

    Returns:
        Clamped confidence.
    """
    data_quality = min(data_points / 100.0, 1.0)
    volatility_factor = max(0.5, 1.0 - stats.volatility)
    trend_factor = 1.0 if abs(stats.trend) > 0.01 else 0.8
    confidence = accuracy * data_quality * volatility_factor * trend_factor
    return float(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, confidence)))


class ForecastOrchestrator:
    """
    Produces per-symbol multi-step price forecasts.

    Args:
        history:       Source of historical observations.
        settings:      Engine settings; defaults to ``get_settings()``.
        cache:         Trained-model cache; built from settings when omitted.
        model_factory: Returns a fresh untrained ``SequenceModel``; defaults
                       to ``SequenceModelFactory`` with ``MODEL_TYPE``.
        fallback:      Degraded-mode forecaster.

    Example:
        >>> engine = ForecastOrchestrator(SupabaseHistoryProvider())
        >>> result = engine.forecast("AAPL", horizon_days=5)
        >>> result.model_label
        'ridge'
    """

    def __init__(
        self,
        history: HistoryProvider,
        settings: Optional[Settings] = None,
        cache: Optional[ModelCache] = None,
        model_factory: Optional[Callable[[], SequenceModel]] = None,
        fallback: Optional[TrendExtrapolator] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.history = history
        self.cache = cache or ModelCache(ttl=timedelta(hours=self.settings.MODEL_TTL_HOURS))
        self.model_factory = model_factory or self._default_model_factory
        self.fallback = fallback or TrendExtrapolator(
            noise_range=self.settings.FALLBACK_NOISE_RANGE
        )
        self._z = float(norm.ppf((1 + self.settings.CONFIDENCE_LEVEL) / 2))

    # ── public API ────────────────────────────────────────────────────────

    def forecast(self, symbol: str, horizon_days: int) -> ForecastResult:
        """
        Forecast ``horizon_days`` future prices for ``symbol``.

        Args:
            symbol:       Ticker; stripped and upper-cased.
            horizon_days: Number of future steps, at least 1.

        Returns:
            ForecastResult from the model path or the fallback path.

        Raises:
            ForecastInputError: On a blank symbol or non-positive horizon.
        """
        try:
            request = ForecastRequest(symbol=symbol, horizon_days=horizon_days)
        except ValidationError as exc:
            raise ForecastInputError(
                f"Invalid forecast request (symbol={symbol!r}, horizon_days={horizon_days!r})"
            ) from exc

        symbol, horizon = request.symbol, request.horizon_days
        rng = np.random.default_rng(self.settings.RANDOM_SEED)
        logger.info("Forecast requested for %s (%d days ahead)", symbol, horizon)

        observations = self._fetch_history(symbol)
        if len(observations) < self.settings.SEQUENCE_LENGTH:
            logger.warning(
                "Insufficient history for %s: %d < %d observations",
                symbol,
                len(observations),
                self.settings.SEQUENCE_LENGTH,
            )
            return self.fallback.forecast(symbol, horizon, observations, rng=rng)

        try:
            return self._model_forecast(symbol, horizon, observations, rng)
        except Exception:
            logger.exception("Model forecast failed for %s, using trend fallback", symbol)
            return self.fallback.forecast(symbol, horizon, observations, rng=rng)

    # ── model path ────────────────────────────────────────────────────────

    def _model_forecast(
        self,
        symbol: str,
        horizon: int,
        observations: Sequence[Observation],
        rng: np.random.Generator,
    ) -> ForecastResult:
        stats = compute_statistics(observations)
        prices = [o.price for o in observations]
        volumes = [o.volume for o in observations]
        features = build_feature_matrix(prices, volumes, stats)

        cache_hit = self.cache.get(symbol) is not None
        if cache_hit:
            logger.info("Using cached model for %s", symbol)
        entry = self.cache.get_or_train(
            symbol,
            lambda: self._train(symbol, features, prices, stats),
            timeout=self.settings.TRAINING_TIMEOUT_SECONDS,
        )

        predicted = self._roll_forward(entry.model, features, prices, volumes, stats, horizon, rng)
        lower, upper = self._prediction_intervals(predicted, entry, stats)
        confidence = compute_confidence(entry.accuracy, stats, len(observations))

        model_info = entry.model.get_model_info()
        model_info.update(
            {
                "cache_hit": cache_hit,
                "trained_at": entry.trained_at.isoformat(),
                "training_accuracy": round(entry.accuracy, 6),
                "residual_std": round(entry.residual_std, 6),
                "statistics": asdict(stats),
                "fit_statistics": asdict(entry.fit_stats),
            }
        )
        logger.info(
            "%s forecast for %s done (confidence=%.3f)", entry.model.label, symbol, confidence
        )
        return ForecastResult(
            symbol=symbol,
            predicted_prices=[round(p, 4) for p in predicted],
            prediction_dates=forecast_dates(observations, horizon),
            confidence=confidence,
            model_label=entry.model.label,
            lower_bounds=[round(p, 4) for p in lower],
            upper_bounds=[round(p, 4) for p in upper],
            mae=entry.mae,
            mape=entry.mape,
            rmse=entry.rmse,
            data_points_used=len(observations),
            model_info=model_info,
        )

    def _train(
        self,
        symbol: str,
        features: np.ndarray,
        prices: Sequence[float],
        stats: StockStatistics,
    ) -> TrainedModel:
        """
        Fit a fresh model and measure it on its own training set.

        Runs on the requesting thread.  Raises ``TimeoutError`` once
        ``TRAINING_TIMEOUT_SECONDS`` is exceeded between epochs.
        """
        epochs = self.settings.TRAINING_EPOCHS
        deadline = time.monotonic() + self.settings.TRAINING_TIMEOUT_SECONDS
        windows, targets = build_training_windows(
            features, prices, stats, self.settings.SEQUENCE_LENGTH
        )
        model = self.model_factory()
        logger.info(
            "Training %s model for %s on %d windows (%d epochs)",
            model.label,
            symbol,
            len(windows),
            epochs,
        )

        for epoch in range(epochs):
            model.train(windows, targets)
            if epoch % 50 == 0:
                logger.debug("Training epoch %d for %s", epoch, symbol)
            if time.monotonic() > deadline:
                raise TimeoutError(
                    f"Training for {symbol} exceeded {self.settings.TRAINING_TIMEOUT_SECONDS}s "
                    f"after {epoch + 1} epochs"
                )

        predicted_norm = model.predict_batch(windows)
        if not np.all(np.isfinite(predicted_norm)):
            raise ValueError(f"Model for {symbol} produced non-finite training predictions")

        accuracy = training_accuracy(predicted_norm, targets)
        metrics = residual_metrics(
            actual=denormalize_price(targets, stats),
            predicted=denormalize_price(predicted_norm, stats),
        )
        entry = TrainedModel(
            model=model,
            fit_stats=stats,
            trained_at=self.cache.now(),
            accuracy=accuracy,
            mae=metrics.mae,
            mape=metrics.mape,
            rmse=metrics.rmse,
            residual_std=metrics.residual_std,
            training_samples=len(windows),
        )
        logger.info(
            "Model training completed for %s with accuracy %.4f (rmse=%s)",
            symbol,
            accuracy,
            metrics.rmse,
        )
        return entry

    def _roll_forward(
        self,
        model: SequenceModel,
        features: np.ndarray,
        prices: Sequence[float],
        volumes: Sequence[int],
        stats: StockStatistics,
        horizon: int,
        rng: np.random.Generator,
    ) -> List[float]:
        """
        Autoregressive multi-step forecast.

        Each predicted price becomes a synthetic feature vector (carrying
        the last observed volume) appended to the window for the next step.
        """
        length = self.settings.SEQUENCE_LENGTH
        noise_scale = self.settings.FORECAST_NOISE_SCALE
        window = features[-length:].copy()
        previous_price = prices[-1]
        volume = volumes[-1]

        predicted: List[float] = []
        for _ in range(horizon):
            price = denormalize_price(model.predict(window), stats)
            if noise_scale:
                price += (rng.random() - 0.5) * stats.volatility * price * noise_scale
            if not np.isfinite(price):
                raise ValueError("Model produced a non-finite price")
            price = max(price, PRICE_FLOOR)
            predicted.append(price)

            next_vector = build_feature_vector(price, volume, stats, previous_price)
            window = np.vstack([window[1:], np.asarray(next_vector, dtype=np.float64)])
            previous_price = price
        return predicted

    def _prediction_intervals(
        self,
        predicted: Sequence[float],
        entry: TrainedModel,
        stats: StockStatistics,
    ) -> Tuple[List[float], List[float]]:
        """
        Symmetric intervals of half-width ``z · residual_std · INTERVAL_SCALE``.

        Falls back to ``volatility · avg_price`` when the model has no
        measured residual spread.
        """
        spread = entry.residual_std
        if spread <= _MIN_RESIDUAL_STD:
            spread = stats.volatility * stats.avg_price
        margin = self._z * spread * self.settings.INTERVAL_SCALE
        lower = [max(p - margin, PRICE_FLOOR) for p in predicted]
        upper = [p + margin for p in predicted]
        return lower, upper

    # ── helpers ───────────────────────────────────────────────────────────

    def _fetch_history(self, symbol: str) -> List[Observation]:
        try:
            return list(self.history.fetch_recent(symbol, self.settings.HISTORY_LIMIT))
        except Exception:
            logger.exception("Could not load history for %s, treating it as empty", symbol)
            return []

    def _default_model_factory(self) -> SequenceModel:
        seed = self.settings.RANDOM_SEED
        return SequenceModelFactory.create_model(
            self.settings.MODEL_TYPE,
            sequence_length=self.settings.SEQUENCE_LENGTH,
            random_state=seed if seed is not None else 42,
        )
