"""
analytics/forecasting/cache.py
──────────────────────────────
Per-symbol cache of trained models with TTL and single-flight training.

Concurrency model
-----------------
- ``get`` never takes a lock: entries are immutable and replaced whole.
- ``get_or_train`` takes a per-symbol lock only long enough to decide
  whether a training run must start.  The first caller runs the training
  on its own thread and publishes the outcome through a ``Future`` recorded
  as the symbol's in-flight training; every concurrent caller for that
  symbol waits on the same future, so at most one training run per symbol
  is ever in flight.
- Different symbols use different locks and train on different threads,
  so they never wait on each other.

A successful run stores its entry before the in-flight marker is cleared;
a failed run only clears the marker, leaving any previous entry untouched.
"""

import logging
import threading
from concurrent.futures import Future
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from analytics.forecasting.base import SequenceModel
from analytics.forecasting.statistics import StockStatistics

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TrainedModel:
    """
    One cache entry: a trained model plus the figures measured at fit time.

    Attributes:
        model:        The trained sequence model.
        fit_stats:    Statistics of the window the model was trained on.
        trained_at:   When training finished (UTC).
        accuracy:     Bounded training accuracy in [0, 0.95].
        mae:          Training mean absolute error (price units).
        mape:         Training mean absolute percentage error.
        rmse:         Training root mean squared error (price units).
        residual_std: Std of training residuals (price units).
    """

    model: SequenceModel
    fit_stats: StockStatistics
    trained_at: datetime
    accuracy: float
    mae: Optional[float] = None
    mape: Optional[float] = None
    rmse: Optional[float] = None
    residual_std: float = 0.0
    training_samples: int = field(default=0, compare=False)

    def is_expired(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.trained_at >= ttl


class ModelCache:
    """
    Thread-safe ``symbol → TrainedModel`` store.

    Args:
        ttl:   Validity window of an entry.
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, TrainedModel] = {}
        self._inflight: Dict[str, Future] = {}
        self._locks: Dict[str, threading.Lock] = {}

    # ── public API ────────────────────────────────────────────────────────

    def get(self, symbol: str) -> Optional[TrainedModel]:
        """Return the entry for ``symbol`` if it is still within the TTL."""
        entry = self._entries.get(symbol)
        if entry is None or entry.is_expired(self._clock(), self.ttl):
            return None
        return entry

    def put(self, symbol: str, entry: TrainedModel) -> None:
        """Replace the entry for ``symbol``."""
        self._entries[symbol] = entry

    def get_or_train(
        self,
        symbol: str,
        train_fn: Callable[[], TrainedModel],
        timeout: Optional[float] = None,
    ) -> TrainedModel:
        """
        Return a valid entry, training one if none is cached.

        The caller that finds neither an entry nor an in-flight run trains
        on its own thread; ``train_fn`` is expected to bound its own run
        time.  Callers arriving meanwhile wait for that run's outcome.

        Args:
            symbol:   Cache key.
            train_fn: Builds a fresh entry.
            timeout:  Seconds a joining caller waits for the in-flight run;
                      ``None`` waits indefinitely.

        Returns:
            The cached or freshly trained entry.

        Raises:
            concurrent.futures.TimeoutError: If a joined run outlives
                ``timeout``.  The run keeps going and still populates the
                cache.
            Exception: Whatever ``train_fn`` raised.
        """
        entry = self.get(symbol)
        if entry is not None:
            return entry

        with self._lock_for(symbol):
            entry = self.get(symbol)
            if entry is not None:
                return entry
            future = self._inflight.get(symbol)
            owner = future is None
            if owner:
                future = Future()
                future.set_running_or_notify_cancel()
                self._inflight[symbol] = future

        if not owner:
            logger.info("Joining in-flight training run for %s", symbol)
            return future.result(timeout=timeout)

        logger.info("Starting training run for %s", symbol)
        try:
            entry = train_fn()
        except BaseException as exc:
            logger.warning("Training run for %s did not produce a model", symbol)
            future.set_exception(exc)
            raise
        else:
            self.put(symbol, entry)
            future.set_result(entry)
            return entry
        finally:
            with self._lock_for(symbol):
                self._inflight.pop(symbol, None)

    def now(self) -> datetime:
        """Current time according to the cache's clock."""
        return self._clock()

    def is_training(self, symbol: str) -> bool:
        return symbol in self._inflight

    def describe(self) -> Dict[str, Dict[str, Any]]:
        """
        Return per-symbol cache metadata for diagnostics.

        Returns:
            ``{symbol: {model_label, trained_at, expires_at, expired,
            accuracy, mae, mape, rmse, residual_std, training_samples,
            fit_statistics}}``
        """
        now = self._clock()
        return {
            symbol: {
                "model_label": entry.model.label,
                "trained_at": entry.trained_at.isoformat(),
                "expires_at": (entry.trained_at + self.ttl).isoformat(),
                "expired": entry.is_expired(now, self.ttl),
                "accuracy": entry.accuracy,
                "mae": entry.mae,
                "mape": entry.mape,
                "rmse": entry.rmse,
                "residual_std": entry.residual_std,
                "training_samples": entry.training_samples,
                "fit_statistics": asdict(entry.fit_stats),
            }
            for symbol, entry in list(self._entries.items())
        }

    def __len__(self) -> int:
        return len(self._entries)

    # ── private helpers ───────────────────────────────────────────────────

    def _lock_for(self, symbol: str) -> threading.Lock:
        # dict.setdefault is atomic, so two threads always end up sharing one lock.
        lock = self._locks.get(symbol)
        if lock is None:
            lock = self._locks.setdefault(symbol, threading.Lock())
        return lock
