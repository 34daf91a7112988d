"""
tests/test_features.py
───────────────────────
Unit tests for feature vectors and sliding training windows.
"""

import numpy as np
import pytest

from analytics.forecasting.features import (
    N_FEATURES,
    VOLUME_CAP,
    build_feature_matrix,
    build_feature_vector,
    build_training_windows,
    normalize_volume,
)
from analytics.forecasting.statistics import StockStatistics, compute_statistics, normalize_price
from conftest import observations_from_prices

_STATS = StockStatistics(avg_price=105.0, min_price=100.0, max_price=110.0, volatility=0.02, trend=0.5)


class TestFeatureVector:
    """Single-observation feature vectors."""

    def test_fields(self) -> None:
        vec = build_feature_vector(110.0, 500_000, _STATS, previous_price=100.0)
        assert vec.normalized_price == 1.0
        assert vec.normalized_volume == 0.5
        assert vec.price_change == pytest.approx(0.1)
        assert vec.volatility == 0.02
        assert vec.trend == 0.5
        assert len(vec) == N_FEATURES

    def test_no_predecessor_means_no_change(self) -> None:
        assert build_feature_vector(105.0, 0, _STATS).price_change == 0.0

    def test_volume_saturates_at_cap(self) -> None:
        assert normalize_volume(VOLUME_CAP * 3) == 1.0
        assert normalize_volume(0) == 0.0


class TestFeatureMatrix:
    """Whole-series feature construction."""

    def test_shape_and_first_row(self) -> None:
        prices = [100.0, 105.0, 110.0]
        matrix = build_feature_matrix(prices, [1000, 1000, 1000], _STATS)
        assert matrix.shape == (3, N_FEATURES)
        assert matrix[0, 2] == 0.0
        assert matrix[1, 2] == pytest.approx(0.05)

    def test_window_statistics_repeat_on_every_row(self) -> None:
        matrix = build_feature_matrix([100.0, 101.0, 102.0, 103.0], [1, 2, 3, 4], _STATS)
        assert np.all(matrix[:, 3] == _STATS.volatility)
        assert np.all(matrix[:, 4] == _STATS.trend)


class TestTrainingWindows:
    """Sliding windows labelled with the next observation's price."""

    def test_shapes_and_labels(self) -> None:
        prices = [100.0 + i for i in range(40)]
        stats = compute_statistics(observations_from_prices(prices))
        features = build_feature_matrix(prices, [1000] * 40, stats)

        X, y = build_training_windows(features, prices, stats, sequence_length=30)

        assert X.shape == (10, 30, N_FEATURES)
        assert y.shape == (10,)
        assert y[0] == pytest.approx(normalize_price(prices[30], stats))
        assert y[-1] == pytest.approx(1.0)
        np.testing.assert_array_equal(X[1], features[1:31])

    @pytest.mark.parametrize("n", [5, 30])
    def test_too_short_series_raises(self, n: int) -> None:
        prices = [float(p) for p in range(1, n + 1)]
        stats = compute_statistics(observations_from_prices(prices))
        features = build_feature_matrix(prices, [0] * n, stats)
        with pytest.raises(ValueError):
            build_training_windows(features, prices, stats, sequence_length=30)
