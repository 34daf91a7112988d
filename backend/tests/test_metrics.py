"""
tests/test_metrics.py
──────────────────────
Unit tests for residual metrics and the bounded training accuracy.
"""

import numpy as np
import pytest

from analytics.metrics import MAX_TRAINING_ACCURACY, residual_metrics, training_accuracy


class TestResidualMetrics:
    def test_known_values(self) -> None:
        m = residual_metrics(actual=np.array([100.0, 200.0]), predicted=np.array([110.0, 190.0]))
        assert m.mae == pytest.approx(10.0)
        assert m.rmse == pytest.approx(10.0)
        assert m.mape == pytest.approx(7.5)
        assert m.residual_std == pytest.approx(10.0)

    def test_zero_actuals_are_skipped_by_mape(self) -> None:
        m = residual_metrics(actual=np.array([0.0, 100.0]), predicted=np.array([5.0, 90.0]))
        assert m.mape == pytest.approx(10.0)

    def test_single_residual_has_no_spread(self) -> None:
        m = residual_metrics(actual=np.array([10.0]), predicted=np.array([12.0]))
        assert m.residual_std == 0.0
        assert m.mae == pytest.approx(2.0)

    def test_empty_input(self) -> None:
        m = residual_metrics(actual=np.array([]), predicted=np.array([]))
        assert m.mae is None and m.rmse is None and m.mape is None
        assert m.residual_std == 0.0


class TestTrainingAccuracy:
    def test_perfect_fit_is_capped(self) -> None:
        y = np.linspace(0, 1, 10)
        assert training_accuracy(y, y) == MAX_TRAINING_ACCURACY

    def test_one_minus_mse(self) -> None:
        predicted = np.array([0.0, 0.0])
        actual = np.array([0.4, 0.2])
        assert training_accuracy(predicted, actual) == pytest.approx(1 - 0.1)

    def test_floor_at_zero(self) -> None:
        assert training_accuracy(np.array([5.0]), np.array([0.0])) == 0.0
