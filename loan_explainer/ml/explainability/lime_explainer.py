"""
LIME-style local sensitivity for loan decisions.

Nudges one standardized feature at a time by a small uniform noise and
measures how fast the approval probability moves, giving a local
finite-difference view of each feature's influence.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from loan_explainer.core.scoring.scorer import LinearScorer
from loan_explainer.data.bundle import ModelBundle
from loan_explainer.utils.constants import INFLUENCE_DECREASES, INFLUENCE_INCREASES
from loan_explainer.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LIMEFeatureSensitivity:
    """Local sensitivity of the approval probability to one feature."""

    feature_name: str
    sensitivity: float
    contribution: float  # weight * standardized value
    influence: str
    importance_rank: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "feature": self.feature_name,
            "sensitivity": round(self.sensitivity, 4),
            "contribution": round(self.contribution, 4),
            "influence": self.influence,
        }


@dataclass
class LIMEExplanation:
    """LIME explanation for a single prediction."""

    predicted_score: float
    num_perturbations: int
    noise_scale: float
    feature_weights: list[LIMEFeatureSensitivity] = field(default_factory=list)

    def to_dict(self) -> list[dict[str, Any]]:
        """Convert to a list of per-feature dictionaries, most sensitive first."""
        return [fw.to_dict() for fw in self.feature_weights]

    def get_top_features(self, n: int = 5) -> list[str]:
        """Get the n most sensitive feature names."""
        return [f.feature_name for f in self.feature_weights[:n]]


class LIMEExplainer:
    """
    Perturbation-based local sensitivity explainer.

    Sensitivity is the mean of |Δprobability| / |noise| over trials
    whose noise was nonzero.
    """

    def __init__(
        self,
        num_perturbations: int = 50,
        noise_scale: float = 0.2,
        top_k: int = 6,
        scorer: Optional[LinearScorer] = None,
    ):
        """
        Initialize the LIME explainer.

        Args:
            num_perturbations: Noise trials per feature.
            noise_scale: Width of the uniform noise interval.
            top_k: Number of features kept in the explanation.
            scorer: Scorer used for the original and perturbed predictions.
        """
        self.num_perturbations = num_perturbations
        self.noise_scale = noise_scale
        self.top_k = top_k
        self.scorer = scorer or LinearScorer()

    def explain(
        self,
        vector: np.ndarray,
        bundle: ModelBundle,
        num_perturbations: Optional[int] = None,
        noise_scale: Optional[float] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> LIMEExplanation:
        """
        Generate a local sensitivity explanation.

        Args:
            vector: Standardized feature vector.
            bundle: Model bundle with weights.
            num_perturbations: Override for noise trials per feature.
            noise_scale: Override for the noise width (0 disables perturbation).
            rng: Random source; seed it for reproducible estimates.

        Returns:
            LIMEExplanation with the ``top_k`` most sensitive features.

        Raises:
            ValueError: If num_perturbations is below 1.
        """
        num_perturbations = (
            self.num_perturbations if num_perturbations is None else num_perturbations
        )
        if num_perturbations < 1:
            raise ValueError(f"num_perturbations must be >= 1, got {num_perturbations}")
        noise_scale = self.noise_scale if noise_scale is None else noise_scale
        rng = rng if rng is not None else np.random.default_rng()

        original_prob = self.scorer.probability(vector, bundle)
        sensitivities = self.estimate(vector, bundle, num_perturbations, noise_scale, rng)
        contributions = bundle.weights_array * vector

        feature_weights = [
            LIMEFeatureSensitivity(
                feature_name=name,
                sensitivity=float(sensitivities[i]),
                contribution=float(contributions[i]),
                influence=INFLUENCE_INCREASES if contributions[i] > 0 else INFLUENCE_DECREASES,
            )
            for i, name in enumerate(bundle.feature_names)
        ]

        feature_weights.sort(key=lambda fw: fw.sensitivity, reverse=True)
        logger.debug(
            f"LIME perturbed {bundle.n_features} features, {num_perturbations} trials each "
            f"(noise scale {noise_scale})"
        )
        feature_weights = feature_weights[: self.top_k]
        for rank, fw in enumerate(feature_weights, 1):
            fw.importance_rank = rank

        return LIMEExplanation(
            predicted_score=original_prob,
            num_perturbations=num_perturbations,
            noise_scale=noise_scale,
            feature_weights=feature_weights,
        )

    def estimate(
        self,
        vector: np.ndarray,
        bundle: ModelBundle,
        num_perturbations: int,
        noise_scale: float,
        rng: np.random.Generator,
    ) -> np.ndarray:
        """Raw per-feature sensitivities in bundle order."""
        bundle.check_vector(vector)
        original_prob = self.scorer.probability(vector, bundle)
        feature_rngs = rng.spawn(bundle.n_features)

        return np.array([
            self._estimate_feature(
                i, vector, bundle, original_prob, num_perturbations, noise_scale, feature_rngs[i]
            )
            for i in range(bundle.n_features)
        ])

    def _estimate_feature(
        self,
        index: int,
        vector: np.ndarray,
        bundle: ModelBundle,
        original_prob: float,
        num_perturbations: int,
        noise_scale: float,
        rng: np.random.Generator,
    ) -> float:
        """Mean |Δp| / |noise| for one feature."""
        half_width = noise_scale / 2
        noise = rng.uniform(-half_width, half_width, size=num_perturbations)

        # Zero-noise trials carry no slope information
        noise = noise[noise != 0]
        if noise.size == 0:
            return 0.0

        perturbed = np.tile(vector, (noise.size, 1))
        perturbed[:, index] += noise

        perturbed_prob = self.scorer.probabilities(perturbed, bundle)
        ratios = np.abs(perturbed_prob - original_prob) / np.abs(noise)
        return float(np.mean(ratios))
