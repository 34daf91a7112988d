"""
tests/test_schemas.py
──────────────────────
Unit tests for the request / observation / result models.
"""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from conftest import UTC_MINUS_5
from schemas.forecast import ForecastRequest, ForecastResult, Observation


class TestObservation:
    """Timestamps always come out in UTC."""

    def test_naive_timestamp_is_taken_as_utc(self) -> None:
        obs = Observation(price=1.0, volume=0, timestamp=datetime(2024, 1, 1, 12))
        assert obs.timestamp == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def test_offset_timestamp_is_converted(self) -> None:
        obs = Observation(
            price=1.0, volume=0, timestamp=datetime(2024, 1, 1, 22, tzinfo=UTC_MINUS_5)
        )
        assert obs.timestamp.utcoffset().total_seconds() == 0
        assert obs.timestamp == datetime(2024, 1, 2, 3, tzinfo=timezone.utc)


class TestForecastRequest:
    def test_symbol_is_normalised(self) -> None:
        assert ForecastRequest(symbol=" aapl ", horizon_days=3).symbol == "AAPL"

    def test_horizon_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ForecastRequest(symbol="AAPL", horizon_days=0)


class TestForecastResult:
    def test_misaligned_lists_are_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ForecastResult(
                symbol="AAPL",
                predicted_prices=[1.0, 2.0],
                prediction_dates=[date(2024, 1, 2)],
                confidence=0.5,
                model_label="ridge",
                data_points_used=10,
            )
