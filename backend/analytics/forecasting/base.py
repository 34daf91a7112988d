"""
analytics/forecasting/base.py
─────────────────────────────
Abstract interface every sequence regression model must implement.

Classes
-------
SequenceModel
    ``train(windows, targets)`` / ``predict(window)`` contract over
    fixed-length windows of feature vectors.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import numpy as np

from analytics.forecasting.features import N_FEATURES


class SequenceModel(ABC):
    """
    Abstract base class for next-step regressors over feature windows.

    Implementations may be recurrent nets, tree ensembles, linear
    autoregressions or anything else that can map a window of shape
    ``(sequence_length, N_FEATURES)`` to the next normalised price.

    Args:
        sequence_length: Window length L every input must have.
    """

    #: Label reported in forecast results produced with this model.
    label: str = "sequence-model"

    def __init__(self, sequence_length: int) -> None:
        self.sequence_length = sequence_length
        self._train_calls: int = 0

    @abstractmethod
    def train(self, windows: np.ndarray, targets: np.ndarray) -> None:
        """
        Fit (or continue fitting) the model for one epoch.

        Called repeatedly by the orchestrator with the same dataset.

        Args:
            windows: shape ``(n_samples, sequence_length, N_FEATURES)``.
            targets: shape ``(n_samples,)`` normalised next prices.

        Raises:
            ValueError: If shapes do not match the model's window.
        """

    @abstractmethod
    def predict(self, window: np.ndarray) -> float:
        """
        Predict the normalised price following ``window``.

        Args:
            window: shape ``(sequence_length, N_FEATURES)``.

        Returns:
            Normalised next price (may fall outside [0, 1] when
            extrapolating beyond the training range).

        Raises:
            ValueError: If called before ``train`` or on a bad shape.
        """

    def predict_batch(self, windows: np.ndarray) -> np.ndarray:
        """Predict every window in a batch; subclasses may vectorise this."""
        return np.array([self.predict(w) for w in windows], dtype=np.float64)

    @property
    def is_trained(self) -> bool:
        return self._train_calls > 0

    def get_model_info(self) -> Dict[str, Any]:
        """
        Return model metadata for logging / forecast results.

        Returns:
            Dict with at least ``model_name`` and ``version`` keys.
        """
        return {
            "model_name": self.__class__.__name__,
            "version": "1.0",
            "sequence_length": self.sequence_length,
            "epochs_trained": self._train_calls,
        }

    # ── Shared validation helpers ─────────────────────────────────────────

    def _validate_training_set(self, windows: np.ndarray, targets: np.ndarray) -> None:
        if windows.ndim != 3 or windows.shape[1:] != (self.sequence_length, N_FEATURES):
            raise ValueError(
                f"windows must have shape (n, {self.sequence_length}, {N_FEATURES}), "
                f"got {windows.shape}"
            )
        if len(windows) == 0:
            raise ValueError("Cannot train on an empty dataset")
        if len(targets) != len(windows):
            raise ValueError(
                f"targets ({len(targets)}) and windows ({len(windows)}) differ in length"
            )
        if not np.all(np.isfinite(windows)) or not np.all(np.isfinite(targets)):
            raise ValueError("Training data contains NaN or infinite values")

    def _validate_window(self, window: np.ndarray) -> None:
        if not self.is_trained:
            raise ValueError("Call train() before predict()")
        if window.shape != (self.sequence_length, N_FEATURES):
            raise ValueError(
                f"window must have shape ({self.sequence_length}, {N_FEATURES}), "
                f"got {window.shape}"
            )
