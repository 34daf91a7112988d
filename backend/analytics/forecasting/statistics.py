"""
analytics/forecasting/statistics.py
───────────────────────────────────
Descriptive statistics of a historical price window.

Functions
---------
compute_statistics
    Mean / min / max price, return volatility and OLS trend.
normalize_price / denormalize_price
    Min-max scaling of prices against a window's range.
to_price_frame
    Observations → DataFrame indexed by timestamp.
infer_freq_days
    Median spacing between observations, in days.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from schemas.forecast import Observation


@dataclass(frozen=True)
class StockStatistics:
    """
    Summary of one historical window.

    Attributes:
        avg_price:  Arithmetic mean of prices.
        min_price:  Lowest price in the window.
        max_price:  Highest price in the window.
        volatility: Population std of period-over-period returns.
        trend:      OLS slope of price against position index.
    """

    avg_price: float
    min_price: float
    max_price: float
    volatility: float = 0.0
    trend: float = 0.0

    @property
    def price_range(self) -> float:
        return self.max_price - self.min_price

    @property
    def is_flat(self) -> bool:
        return self.max_price == self.min_price


def to_price_frame(observations: Sequence[Observation]) -> pd.DataFrame:
    """
    Convert observations into a ``price`` / ``volume`` DataFrame.

    Args:
        observations: Observations sorted oldest → newest.

    Returns:
        DataFrame indexed by UTC timestamp, row order preserved.
    """
    return pd.DataFrame(
        {
            "price": [o.price for o in observations],
            "volume": [o.volume for o in observations],
        },
        index=pd.DatetimeIndex(
            pd.to_datetime([o.timestamp for o in observations], utc=True), name="timestamp"
        ),
    )


def _ols_slope(prices: np.ndarray) -> float:
    """Least-squares slope of ``prices`` against ``0..n-1``."""
    n = len(prices)
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=np.float64)
    denominator = n * np.sum(x * x) - np.sum(x) ** 2
    if denominator == 0:
        return 0.0
    return float((n * np.sum(x * prices) - np.sum(x) * np.sum(prices)) / denominator)


def compute_statistics(observations: Sequence[Observation]) -> StockStatistics:
    """
    Compute the statistics of a historical window.

    Fewer than two observations yield ``volatility = trend = 0``; this is a
    normal degenerate case, not an error.

    Args:
        observations: At least one observation, sorted oldest → newest.

    Returns:
        StockStatistics for the window.

    Raises:
        ValueError: If ``observations`` is empty.
    """
    if not observations:
        raise ValueError("Need at least 1 observation to compute statistics")

    prices = np.array([o.price for o in observations], dtype=np.float64)

    volatility = 0.0
    if len(prices) > 1:
        returns = pd.Series(prices).pct_change().dropna()
        volatility = float(returns.std(ddof=0))

    return StockStatistics(
        avg_price=float(prices.mean()),
        min_price=float(prices.min()),
        max_price=float(prices.max()),
        volatility=volatility,
        trend=_ols_slope(prices),
    )


def normalize_price(price: float, stats: StockStatistics) -> float:
    """Scale ``price`` into [0, 1] over the window range; flat windows map to 0.5."""
    if stats.is_flat:
        return 0.5
    return (price - stats.min_price) / stats.price_range


def denormalize_price(value: float, stats: StockStatistics) -> float:
    """Inverse of :func:`normalize_price` (flat windows map back to the window price)."""
    return value * stats.price_range + stats.min_price


def infer_freq_days(index: pd.DatetimeIndex) -> int:
    """
    Infer the median step size in calendar days.

    Args:
        index: Timestamps of the observations.

    Returns:
        Median gap between consecutive timestamps, at minimum 1 day.
    """
    if len(index) < 2:
        return 1
    diffs = np.diff(index.values).astype("timedelta64[D]").astype(int)
    return max(int(np.median(diffs)), 1)
