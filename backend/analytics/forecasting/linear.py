"""
analytics/forecasting/linear.py
───────────────────────────────
Ridge autoregression over flattened feature windows.

The regression target is the change in normalised price from the last
point of the window to the next observation, so a model trained on a
steady trend keeps extrapolating that trend instead of regressing to the
training mean.  The fit is closed-form: calling ``train`` once per epoch
re-fits to the same coefficients.
"""

import logging
from typing import Any, Dict, Optional

import numpy as np
from sklearn.linear_model import Ridge

from analytics.forecasting.base import SequenceModel

logger = logging.getLogger(__name__)


class RidgeSequenceModel(SequenceModel):
    """
    Deterministic linear sequence model backed by scikit-learn ``Ridge``.

    Args:
        sequence_length: Window length L.
        alpha:           L2 regularisation strength.
    """

    label = "ridge"

    def __init__(self, sequence_length: int, alpha: float = 1e-3, **_: Any) -> None:
        super().__init__(sequence_length)
        self.alpha = alpha
        self._regressor: Optional[Ridge] = None

    @staticmethod
    def _flatten(windows: np.ndarray) -> np.ndarray:
        return windows.reshape(len(windows), -1)

    def train(self, windows: np.ndarray, targets: np.ndarray) -> None:
        self._validate_training_set(windows, targets)
        deltas = targets - windows[:, -1, 0]
        regressor = Ridge(alpha=self.alpha)
        regressor.fit(self._flatten(windows), deltas)
        self._regressor = regressor
        self._train_calls += 1

    def predict(self, window: np.ndarray) -> float:
        self._validate_window(window)
        return float(self.predict_batch(window[np.newaxis, ...])[0])

    def predict_batch(self, windows: np.ndarray) -> np.ndarray:
        if self._regressor is None:
            raise ValueError("Call train() before predict()")
        deltas = self._regressor.predict(self._flatten(windows))
        return windows[:, -1, 0] + deltas

    def get_model_info(self) -> Dict[str, Any]:
        info = super().get_model_info()
        info["alpha"] = self.alpha
        return info
