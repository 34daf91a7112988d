"""
analytics/forecasting — Per-symbol sequence-model forecasting.

Public API
----------
    from analytics.forecasting import ForecastOrchestrator, ForecastInputError
    from analytics.forecasting import ModelCache, TrainedModel
    from analytics.forecasting import SequenceModel, SequenceModelFactory
    from analytics.forecasting import RidgeSequenceModel, LSTMSequenceModel
    from analytics.forecasting import TrendExtrapolator
"""

from analytics.forecasting.base import SequenceModel
from analytics.forecasting.cache import ModelCache, TrainedModel
from analytics.forecasting.errors import ForecastInputError
from analytics.forecasting.factory import SequenceModelFactory
from analytics.forecasting.fallback import TrendExtrapolator
from analytics.forecasting.linear import RidgeSequenceModel
from analytics.forecasting.lstm import LSTMSequenceModel
from analytics.forecasting.orchestrator import ForecastOrchestrator, compute_confidence
from analytics.forecasting.statistics import StockStatistics, compute_statistics

__all__ = [
    "ForecastInputError",
    "ForecastOrchestrator",
    "LSTMSequenceModel",
    "ModelCache",
    "RidgeSequenceModel",
    "SequenceModel",
    "SequenceModelFactory",
    "StockStatistics",
    "TrainedModel",
    "TrendExtrapolator",
    "compute_confidence",
    "compute_statistics",
]
