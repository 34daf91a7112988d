"""
Pydantic schemas for forecast inputs and outputs.

Separate from analytics (numerics) and data_engine (storage access).
"""

from schemas.forecast import ForecastRequest, ForecastResult, Observation

__all__ = [
    "ForecastRequest",
    "ForecastResult",
    "Observation",
]
