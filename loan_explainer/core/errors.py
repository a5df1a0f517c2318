"""
Fault taxonomy for the prediction engine.

Missing or unparsable applicant inputs are never errors; they fall back to
defaults inside the vectorizer. Everything here is fatal for the request.
"""


class PredictionError(Exception):
    """Base class for faults surfaced to the caller."""

    def __init__(self, message: str = "Prediction failed"):
        super().__init__(message)
        self.message = message


class BundleIntegrityError(PredictionError):
    """The model bundle is missing fields or violates its shape invariants."""
    pass


class InvalidRequestError(PredictionError):
    """A call parameter such as the seed is outside its allowed range."""
    pass


class ComputationError(PredictionError):
    """NaN/Inf or floating-point failure while scoring or estimating."""

    def __init__(self, message: str = "Prediction failed"):
        super().__init__(message)
