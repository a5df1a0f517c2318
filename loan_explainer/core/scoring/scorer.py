"""
Linear scoring for standardized feature vectors.

Computes the logit, the approval probability and the binary decision.
"""

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from loan_explainer.core.errors import ComputationError
from loan_explainer.data.bundle import ModelBundle
from loan_explainer.utils.constants import Decision
from loan_explainer.utils.logger import LoggerMixin

# Keeps probabilities strictly inside (0, 1) when exp() saturates or overflows
_PROBABILITY_FLOOR = float(np.nextafter(0.0, 1.0))
_PROBABILITY_CEIL = float(np.nextafter(1.0, 0.0))


def sigmoid(logit: float) -> float:
    """1 / (1 + exp(-logit)), clamped to the open unit interval."""
    try:
        p = 1.0 / (1.0 + math.exp(-logit))
    except OverflowError:
        p = 0.0
    return min(max(p, _PROBABILITY_FLOOR), _PROBABILITY_CEIL)


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of scoring one vector."""

    logit: float
    probability: float
    decision: Decision

    @property
    def confidence(self) -> float:
        """Probability of the chosen outcome, as a percentage."""
        return max(self.probability, 1.0 - self.probability) * 100

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "probability": round(self.probability, 4),
            "prediction": self.decision.value,
            "confidence": round(self.confidence, 1),
        }


class LinearScorer(LoggerMixin):
    """
    Logistic-regression style scorer.

    The logit is accumulated with exactly rounded summation so the same
    vector always produces the same bits, whatever batch it is scored in.
    """

    def logit(self, vector: np.ndarray, bundle: ModelBundle) -> float:
        """bias + sum(weights[i] * vector[i])."""
        bundle.check_vector(vector)
        products = (bundle.weights_array * vector).tolist()
        try:
            logit = math.fsum([bundle.bias, *products])
        except (OverflowError, ValueError) as e:
            self.logger.error(f"Logit summation overflowed: {e}")
            raise ComputationError() from e
        if not math.isfinite(logit):
            self.logger.error(f"Non-finite logit: {logit}")
            raise ComputationError()
        return logit

    def probability(self, vector: np.ndarray, bundle: ModelBundle) -> float:
        return sigmoid(self.logit(vector, bundle))

    def probabilities(self, vectors: np.ndarray, bundle: ModelBundle) -> np.ndarray:
        """Score each row of a (k, N) matrix."""
        return np.array([self.probability(row, bundle) for row in vectors], dtype=float)

    def score(self, vector: np.ndarray, bundle: ModelBundle) -> ScoreResult:
        """
        Score a standardized vector.

        Args:
            vector: Standardized feature vector of length N.
            bundle: Model bundle with weights and bias.

        Returns:
            ScoreResult with logit, probability and decision.
        """
        logit = self.logit(vector, bundle)
        probability = sigmoid(logit)
        return ScoreResult(
            logit=logit,
            probability=probability,
            decision=Decision.from_probability(probability),
        )
