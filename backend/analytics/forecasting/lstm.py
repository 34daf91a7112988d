"""
analytics/forecasting/lstm.py
─────────────────────────────
LSTM sequence model over windows of feature vectors.

Architecture
------------
Input (sequence_length, 5)
  → LSTM(64, return_sequences=True) → Dropout(0.2)
  → LSTM(32) → Dropout(0.2)
  → Dense(16, relu) → Dense(1)
  → normalised next price

Each ``train`` call runs a single epoch, so the orchestrator's epoch loop
drives training and can log progress between epochs.

Requires
--------
    pip install tensorflow>=2.15.0
"""

import logging
import warnings
from typing import Any, Dict, Optional

import numpy as np

from analytics.forecasting.base import SequenceModel
from analytics.forecasting.features import N_FEATURES

logger = logging.getLogger(__name__)

# Optional import: the LSTM model is unavailable without TensorFlow.
try:
    import tensorflow as tf
    from tensorflow.keras import layers

    _TF_AVAILABLE = True
except ImportError:
    _TF_AVAILABLE = False
    warnings.warn(
        "TensorFlow not installed; LSTMSequenceModel is unavailable. "
        "Install with: pip install tensorflow",
        stacklevel=2,
    )


class LSTMSequenceModel(SequenceModel):
    """
    Two-layer LSTM regressor predicting the next normalised price.

    Args:
        sequence_length: Window length L.
        batch_size:      Mini-batch size during training.
        learning_rate:   Adam learning rate.
        random_state:    Seed for reproducibility.

    Raises:
        ImportError: If TensorFlow is not installed when instantiated.
    """

    label = "lstm"

    def __init__(
        self,
        sequence_length: int,
        batch_size: int = 16,
        learning_rate: float = 0.001,
        random_state: Optional[int] = 42,
        **_: Any,
    ) -> None:
        if not _TF_AVAILABLE:
            raise ImportError(
                "TensorFlow is required for LSTMSequenceModel. "
                "Install with: pip install tensorflow"
            )
        super().__init__(sequence_length)
        self.batch_size = batch_size
        self.learning_rate = learning_rate
        self.random_state = random_state
        self._last_loss: Optional[float] = None

        if random_state is not None:
            tf.random.set_seed(random_state)
        self.model: tf.keras.Model = self._build_model()

    def _build_model(self) -> "tf.keras.Model":
        """Construct and compile the Keras model."""
        model = tf.keras.Sequential(
            [
                layers.Input(shape=(self.sequence_length, N_FEATURES)),
                layers.LSTM(64, return_sequences=True),
                layers.Dropout(0.2),
                layers.LSTM(32),
                layers.Dropout(0.2),
                layers.Dense(16, activation="relu"),
                layers.Dense(1),
            ],
            name="lstm_sequence_model",
        )
        model.compile(
            optimizer=tf.keras.optimizers.Adam(learning_rate=self.learning_rate),
            loss="mse",
        )
        return model

    def train(self, windows: np.ndarray, targets: np.ndarray) -> None:
        self._validate_training_set(windows, targets)
        history = self.model.fit(
            windows,
            targets.reshape(-1, 1),
            epochs=1,
            batch_size=self.batch_size,
            shuffle=False,
            verbose=0,
        )
        self._last_loss = float(history.history["loss"][-1])
        self._train_calls += 1

    def predict(self, window: np.ndarray) -> float:
        self._validate_window(window)
        return float(self.predict_batch(window[np.newaxis, ...])[0])

    def predict_batch(self, windows: np.ndarray) -> np.ndarray:
        if not self.is_trained:
            raise ValueError("Call train() before predict()")
        # Direct call instead of model.predict(): no per-call tf.data pipeline.
        return self.model(windows, training=False).numpy().flatten().astype(np.float64)

    def get_model_info(self) -> Dict[str, Any]:
        """Return LSTM model metadata."""
        info = super().get_model_info()
        info.update(
            {
                "batch_size": self.batch_size,
                "learning_rate": self.learning_rate,
                "last_loss": round(self._last_loss, 6) if self._last_loss is not None else None,
            }
        )
        return info
