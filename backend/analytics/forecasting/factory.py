"""
analytics/forecasting/factory.py
────────────────────────────────
Registry and factory for sequence models.

Usage:
    from analytics.forecasting.factory import SequenceModelFactory

    model = SequenceModelFactory.create_model("ridge", sequence_length=30)

    # Or plug in a custom implementation
    SequenceModelFactory.register_model("custom", CustomSequenceModel)
"""

import logging
from typing import Any, Dict, List, Type

from analytics.forecasting.base import SequenceModel
from analytics.forecasting.linear import RidgeSequenceModel
from analytics.forecasting.lstm import LSTMSequenceModel

logger = logging.getLogger(__name__)


class SequenceModelFactory:
    """
    Factory for creating sequence model instances by name.

    Every model class is constructed with ``sequence_length`` plus any
    extra keyword arguments; classes ignore keywords they do not use.
    """

    # Registry of available models
    _models: Dict[str, Type[SequenceModel]] = {
        "ridge": RidgeSequenceModel,
        "lstm": LSTMSequenceModel,
    }

    @classmethod
    def create_model(
        cls, model_type: str, sequence_length: int, **kwargs: Any
    ) -> SequenceModel:
        """
        Create a sequence model instance.

        Args:
            model_type:      Registered name (``"ridge"``, ``"lstm"``, …).
            sequence_length: Window length L.
            **kwargs:        Extra constructor arguments.

        Returns:
            A fresh, untrained model.

        Raises:
            ValueError:  If ``model_type`` is not registered.
            ImportError: If the model's backend library is missing.
        """
        model_type = model_type.lower()

        if model_type not in cls._models:
            available = ", ".join(cls._models.keys())
            raise ValueError(
                f"Unknown model type: '{model_type}'. "
                f"Available models: {available}"
            )

        model_class = cls._models[model_type]
        logger.debug("Creating %s sequence model (L=%d)", model_type, sequence_length)
        return model_class(sequence_length=sequence_length, **kwargs)

    @classmethod
    def register_model(cls, name: str, model_class: Type[SequenceModel]) -> None:
        """
        Register a new sequence model class.

        Args:
            name:        Name to register the model under.
            model_class: Class that inherits from SequenceModel.

        Raises:
            TypeError:  If model_class does not inherit from SequenceModel.
            ValueError: If name already exists.
        """
        if not issubclass(model_class, SequenceModel):
            raise TypeError(f"{model_class.__name__} must inherit from SequenceModel")

        if name in cls._models:
            raise ValueError(
                f"Model '{name}' is already registered. "
                f"Use a different name or update the existing model."
            )

        cls._models[name] = model_class
        logger.info("Registered new sequence model: %s", name)

    @classmethod
    def list_available_models(cls) -> List[str]:
        return list(cls._models.keys())
