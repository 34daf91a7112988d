"""
tests/conftest.py
──────────────────
Shared pytest fixtures for the forecasting-engine test suite.

Fixtures
--------
make_observations
    Factory turning a list of prices into evenly spaced Observations.

settings
    Deterministic ``Settings`` (no noise, few epochs, fixed seed).

history
    ``StaticHistoryProvider``: in-memory history keyed by symbol.

orchestrator
    ``ForecastOrchestrator`` wired to ``history`` and ``settings``.

mock_db
    ``MagicMock`` standing in for the Supabase client.
"""

import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence
from unittest.mock import MagicMock

import numpy as np
import pytest

from analytics.forecasting import ForecastOrchestrator, SequenceModel
from analytics.forecasting.linear import RidgeSequenceModel
from core.config import Settings
from schemas.forecast import Observation

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
UTC_MINUS_5 = timezone(timedelta(hours=-5))


# ── Helpers ───────────────────────────────────────────────────────────────────


def observations_from_prices(
    prices: Sequence[float],
    volume: int = 1000,
    start: datetime = START,
    step_days: int = 1,
) -> List[Observation]:
    """Evenly spaced observations, oldest → newest."""
    return [
        Observation(price=p, volume=volume, timestamp=start + timedelta(days=i * step_days))
        for i, p in enumerate(prices)
    ]


def mixed_offset_observations(prices: Sequence[float], volume: int = 1000) -> List[Observation]:
    """Daily observations whose timestamps alternate between UTC and UTC-5."""
    observations = []
    for i, p in enumerate(prices):
        timestamp = START + timedelta(days=i)
        if i % 2:
            timestamp = timestamp.replace(tzinfo=UTC_MINUS_5)
        observations.append(Observation(price=p, volume=volume, timestamp=timestamp))
    return observations


class StaticHistoryProvider:
    """In-memory ``HistoryProvider`` that records every call."""

    def __init__(self, data: Optional[Dict[str, List[Observation]]] = None) -> None:
        self.data: Dict[str, List[Observation]] = dict(data or {})
        self.calls: List[tuple] = []

    def fetch_recent(self, symbol: str, limit: int) -> List[Observation]:
        self.calls.append((symbol, limit))
        return self.data.get(symbol, [])[-limit:]


class FailingModel(SequenceModel):
    """Sequence model whose training always blows up."""

    label = "failing"

    def train(self, windows: np.ndarray, targets: np.ndarray) -> None:
        raise RuntimeError("simulated training failure")

    def predict(self, window: np.ndarray) -> float:
        raise RuntimeError("never trained")


class SlowRidgeModel(RidgeSequenceModel):
    """Ridge model that sleeps on every epoch, to widen race windows."""

    def __init__(self, sequence_length: int, delay: float = 0.05, **kwargs) -> None:
        super().__init__(sequence_length, **kwargs)
        self.delay = delay

    def train(self, windows: np.ndarray, targets: np.ndarray) -> None:
        time.sleep(self.delay)
        super().train(windows, targets)


class CountingFactory:
    """Model factory that counts how many models (= training runs) it built."""

    def __init__(self, build: Callable[[], SequenceModel]) -> None:
        self._build = build
        self._lock = threading.Lock()
        self.count = 0

    def __call__(self) -> SequenceModel:
        with self._lock:
            self.count += 1
        return self._build()


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def make_observations() -> Callable[..., List[Observation]]:
    return observations_from_prices


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings: L=30, 3 epochs, no noise, fixed seed."""
    return Settings(
        SEQUENCE_LENGTH=30,
        HISTORY_LIMIT=100,
        TRAINING_EPOCHS=3,
        TRAINING_TIMEOUT_SECONDS=30,
        MODEL_TYPE="ridge",
        FORECAST_NOISE_SCALE=0.0,
        FALLBACK_NOISE_RANGE=0.0,
        RANDOM_SEED=0,
    )


@pytest.fixture
def history() -> StaticHistoryProvider:
    return StaticHistoryProvider()


@pytest.fixture
def orchestrator(history: StaticHistoryProvider, settings: Settings) -> ForecastOrchestrator:
    return ForecastOrchestrator(history, settings=settings)


@pytest.fixture
def mock_db() -> MagicMock:
    """
    Return a MagicMock that mimics the Supabase client's fluent query builder.

    Both chains used by ``SupabaseHistoryProvider`` default to empty data:

        assets:            table().select().eq().limit().execute()
        historical_prices: table().select().eq().order().limit().execute()
    """
    client = MagicMock()
    select = client.table.return_value.select.return_value
    select.eq.return_value.limit.return_value.execute.return_value = MagicMock(data=[])
    select.eq.return_value.order.return_value.limit.return_value.execute.return_value = MagicMock(
        data=[]
    )
    return client


class FakeClock:
    """Manually advanced UTC clock for TTL tests."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
