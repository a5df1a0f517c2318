"""Loan prediction engine module."""

from .prediction_engine import (
    PredictionEngine,
    PredictionResult,
    get_prediction_engine,
)

__all__ = [
    "PredictionEngine",
    "PredictionResult",
    "get_prediction_engine",
]
