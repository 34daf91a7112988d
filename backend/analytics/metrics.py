"""
analytics/metrics.py
────────────────────
Error metrics of a trained model replayed over its own training set.

- Residual metrics in price units: MAE, RMSE, MAPE and the residual
  standard deviation that drives prediction-interval width.
- Training accuracy: a bounded score derived from the normalised MSE,
  used as the base of the forecast confidence heuristic.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

# Accuracy never exceeds this, however well the model fits its training set.
MAX_TRAINING_ACCURACY = 0.95


@dataclass(frozen=True)
class ResidualMetrics:
    """MAE / RMSE / MAPE and residual spread, all ``None``-able except std."""

    mae: Optional[float]
    rmse: Optional[float]
    mape: Optional[float]
    residual_std: float


def residual_metrics(actual: np.ndarray, predicted: np.ndarray) -> ResidualMetrics:
    """
    Compute residual metrics with residual = predicted − actual.

    MAPE skips zero actuals (avoid div-by-zero) and is expressed in percent.
    The residual std is the population std, 0 for fewer than two residuals.

    Args:
        actual:    Observed prices.
        predicted: Model prices aligned with ``actual``.

    Returns:
        ResidualMetrics; error fields are ``None`` for empty input.
    """
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    if actual.size == 0:
        return ResidualMetrics(mae=None, rmse=None, mape=None, residual_std=0.0)

    residuals = predicted - actual
    abs_res = np.abs(residuals)
    mask = actual != 0
    mape = float(np.mean(abs_res[mask] / actual[mask])) * 100.0 if mask.any() else 0.0
    return ResidualMetrics(
        mae=float(np.mean(abs_res)),
        rmse=float(np.sqrt(np.mean(residuals ** 2))),
        mape=mape,
        residual_std=float(np.std(residuals)) if residuals.size > 1 else 0.0,
    )


def training_accuracy(predicted_norm: np.ndarray, actual_norm: np.ndarray) -> float:
    """``1 − MSE`` on normalised values, clamped to ``[0, MAX_TRAINING_ACCURACY]``."""
    mse = float(np.mean((np.asarray(predicted_norm) - np.asarray(actual_norm)) ** 2))
    return min(max(0.0, 1.0 - mse), MAX_TRAINING_ACCURACY)
