"""
analytics/forecasting/features.py
─────────────────────────────────
Fixed-width feature vectors and sliding training windows.

Each observation becomes a 5-feature vector relative to the statistics of
its enclosing window:

    [normalized_price, normalized_volume, price_change, volatility, trend]

Training pairs use the "next observation" convention: window ``i`` holds
the vectors of observations ``i .. i+L-1`` and its label is the normalised
price of observation ``i+L``.
"""

from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np

from analytics.forecasting.statistics import StockStatistics, normalize_price

N_FEATURES = 5

# Volume at or above this saturates the normalised volume feature.
VOLUME_CAP = 1_000_000


class FeatureVector(NamedTuple):
    normalized_price: float
    normalized_volume: float
    price_change: float
    volatility: float
    trend: float


def normalize_volume(volume: float) -> float:
    return min(volume / VOLUME_CAP, 1.0)


def build_feature_vector(
    price: float,
    volume: float,
    stats: StockStatistics,
    previous_price: Optional[float] = None,
) -> FeatureVector:
    """
    Build the feature vector of one observation.

    Args:
        price:          Observed (or predicted) price.
        volume:         Observed volume.
        stats:          Statistics of the enclosing window.
        previous_price: Price of the preceding observation, if any.

    Returns:
        FeatureVector with ``price_change = 0`` when there is no usable
        predecessor.
    """
    if previous_price:
        price_change = (price - previous_price) / previous_price
    else:
        price_change = 0.0
    return FeatureVector(
        normalized_price=normalize_price(price, stats),
        normalized_volume=normalize_volume(volume),
        price_change=price_change,
        volatility=stats.volatility,
        trend=stats.trend,
    )


def build_feature_matrix(
    prices: Sequence[float],
    volumes: Sequence[float],
    stats: StockStatistics,
) -> np.ndarray:
    """
    Feature vectors for a whole price/volume series.

    Returns:
        Array of shape ``(len(prices), N_FEATURES)``.
    """
    rows = [
        build_feature_vector(
            price, volume, stats, previous_price=prices[i - 1] if i > 0 else None
        )
        for i, (price, volume) in enumerate(zip(prices, volumes))
    ]
    return np.array(rows, dtype=np.float64).reshape(-1, N_FEATURES)


def build_training_windows(
    features: np.ndarray,
    prices: Sequence[float],
    stats: StockStatistics,
    sequence_length: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Slide a length-``sequence_length`` window over ``features`` with step 1.

    Args:
        features:        Output of :func:`build_feature_matrix`.
        prices:          Raw prices aligned with ``features``.
        stats:           Window statistics used for label normalisation.
        sequence_length: Window length L.

    Returns:
        X: shape ``(n_samples, sequence_length, N_FEATURES)``
        y: shape ``(n_samples,)`` normalised next prices

    Raises:
        ValueError: If the series is too short to form one labelled window.
    """
    n = len(features)
    if n <= sequence_length:
        raise ValueError(
            f"Need at least {sequence_length + 1} observations to build a "
            f"training window, got {n}"
        )

    X, y = [], []
    for i in range(n - sequence_length):
        X.append(features[i : i + sequence_length])
        y.append(normalize_price(prices[i + sequence_length], stats))
    return np.array(X, dtype=np.float64), np.array(y, dtype=np.float64)
