"""
SHAP-style explanations for loan decisions.

Approximates each feature's Shapley value by Monte-Carlo sampling:
the feature is swapped for the value of a randomly drawn background
applicant, and the drop in approval probability is averaged over trials.

This is a one-feature-at-a-time marginal estimate, not the exact
coalition-weighted Shapley value. The "with" prediction is always the
full input; only the "without" side is perturbed. Values therefore do
not sum to the prediction minus the base rate.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from loan_explainer.core.scoring.scorer import LinearScorer
from loan_explainer.data.bundle import ModelBundle
from loan_explainer.utils.constants import Sign
from loan_explainer.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SHAPValue:
    """Estimated SHAP value for a single feature."""

    feature_name: str
    shap_value: float
    feature_value: float
    direction: Sign
    magnitude: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "feature": self.feature_name,
            "shap_value": round(self.shap_value, 4),
            "feature_value": round(self.feature_value, 4),
            "impact": self.direction.value,
            "magnitude": round(self.magnitude, 4),
        }


@dataclass
class SHAPExplanation:
    """SHAP explanation for a prediction."""

    predicted_value: float
    num_samples: int
    shap_values: list[SHAPValue] = field(default_factory=list)

    def to_dict(self) -> list[dict[str, Any]]:
        """Convert to a list of per-feature dictionaries, most influential first."""
        return [sv.to_dict() for sv in self.shap_values]

    def get_positive_contributors(self) -> list[tuple[str, float]]:
        """Get features that push toward approval, strongest first."""
        return [
            (sv.feature_name, sv.shap_value)
            for sv in sorted(self.shap_values, key=lambda x: x.shap_value, reverse=True)
            if sv.shap_value > 0
        ]

    def get_negative_contributors(self) -> list[tuple[str, float]]:
        """Get features that push toward rejection, strongest first."""
        return [
            (sv.feature_name, sv.shap_value)
            for sv in sorted(self.shap_values, key=lambda x: x.shap_value)
            if sv.shap_value < 0
        ]


class SHAPExplainer:
    """
    Monte-Carlo SHAP approximator.

    Uses the bundle's background applicants as the counterfactual
    "absence" of a feature.
    """

    def __init__(
        self,
        num_samples: int = 20,
        top_k: int = 8,
        scorer: Optional[LinearScorer] = None,
    ):
        """
        Initialize the SHAP explainer.

        Args:
            num_samples: Background draws per feature.
            top_k: Number of features kept in the explanation.
            scorer: Scorer used for the with/without predictions.
        """
        self.num_samples = num_samples
        self.top_k = top_k
        self.scorer = scorer or LinearScorer()

    def explain(
        self,
        vector: np.ndarray,
        bundle: ModelBundle,
        num_samples: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> SHAPExplanation:
        """
        Estimate SHAP values for a standardized vector.

        Args:
            vector: Standardized feature vector.
            bundle: Model bundle with weights and background samples.
            num_samples: Override for background draws per feature.
            rng: Random source; seed it for reproducible estimates.

        Returns:
            SHAPExplanation with the ``top_k`` features by |value|.

        Raises:
            ValueError: If num_samples is below 1.
        """
        num_samples = self.num_samples if num_samples is None else num_samples
        if num_samples < 1:
            raise ValueError(f"num_samples must be >= 1, got {num_samples}")
        rng = rng if rng is not None else np.random.default_rng()

        predicted_value = self.scorer.probability(vector, bundle)
        estimates = self.estimate(vector, bundle, num_samples, rng)

        shap_values = [
            SHAPValue(
                feature_name=name,
                shap_value=float(estimates[i]),
                feature_value=float(vector[i]),
                direction=Sign.of(estimates[i]),
                magnitude=float(abs(estimates[i])),
            )
            for i, name in enumerate(bundle.feature_names)
        ]

        # Sort by absolute SHAP value
        shap_values.sort(key=lambda sv: sv.magnitude, reverse=True)
        logger.debug(
            f"SHAP estimated {bundle.n_features} features from {num_samples} background draws each"
        )

        return SHAPExplanation(
            predicted_value=predicted_value,
            num_samples=num_samples,
            shap_values=shap_values[: self.top_k],
        )

    def estimate(
        self,
        vector: np.ndarray,
        bundle: ModelBundle,
        num_samples: int,
        rng: np.random.Generator,
    ) -> np.ndarray:
        """
        Raw per-feature estimates in bundle order.

        Each feature draws from its own child generator, spawned before
        any sampling, so the estimates do not depend on evaluation order.
        """
        bundle.check_vector(vector)
        pred_with = self.scorer.probability(vector, bundle)
        feature_rngs = rng.spawn(bundle.n_features)

        return np.array([
            self._estimate_feature(i, vector, bundle, pred_with, num_samples, feature_rngs[i])
            for i in range(bundle.n_features)
        ])

    def _estimate_feature(
        self,
        index: int,
        vector: np.ndarray,
        bundle: ModelBundle,
        pred_with: float,
        num_samples: int,
        rng: np.random.Generator,
    ) -> float:
        """Average marginal contribution of one feature over background draws."""
        background = bundle.background_array
        draws = rng.integers(0, background.shape[0], size=num_samples)

        # Coalition without the feature: its value comes from a background applicant
        coalitions = np.tile(vector, (num_samples, 1))
        coalitions[:, index] = background[draws, index]

        pred_without = self.scorer.probabilities(coalitions, bundle)
        return float(np.mean(pred_with - pred_without))
