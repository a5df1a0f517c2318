"""
Core business logic modules for the loan decision explainer.

Submodules:
- errors: Fault taxonomy (bundle integrity, invalid request, computation)
- scoring: Feature vectorizer and linear scorer
- prediction: Prediction engine composing scoring and explanations
"""

from .errors import (
    BundleIntegrityError,
    ComputationError,
    InvalidRequestError,
    PredictionError,
)

__all__ = [
    "BundleIntegrityError",
    "ComputationError",
    "InvalidRequestError",
    "PredictionError",
]
