"""
Exact linear feature contributions for loan decisions.

For a linear model each feature's contribution to the logit is simply
weight * standardized value, so the ranking needs no sampling.
"""

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from loan_explainer.data.bundle import ModelBundle
from loan_explainer.utils.constants import Decision, Sign


@dataclass(frozen=True)
class Contribution:
    """Signed contribution of a single feature to the logit."""

    feature_index: int
    feature_name: str
    signed_contribution: float
    feature_value: float

    @property
    def direction(self) -> Sign:
        return Sign.of(self.signed_contribution)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "feature": self.feature_name,
            "contribution": round(self.signed_contribution, 3),
        }


class ContributionRanker:
    """
    Ranks features by their exact linear contribution.

    Rejections surface the most negative contributions, approvals the
    most positive. Ties keep the bundle's feature order.
    """

    def __init__(
        self,
        max_rejection_factors: int = 5,
        max_approval_factors: int = 3,
    ):
        """
        Initialize the contribution ranker.

        Args:
            max_rejection_factors: How many worst factors to report on rejection.
            max_approval_factors: How many best factors to report on approval.
        """
        self.max_rejection_factors = max_rejection_factors
        self.max_approval_factors = max_approval_factors

    def contributions(self, vector: np.ndarray, bundle: ModelBundle) -> list[Contribution]:
        """All N contributions, in feature order."""
        bundle.check_vector(vector)
        signed = bundle.weights_array * vector
        return [
            Contribution(
                feature_index=i,
                feature_name=name,
                signed_contribution=float(signed[i]),
                feature_value=float(vector[i]),
            )
            for i, name in enumerate(bundle.feature_names)
        ]

    def rank(
        self,
        vector: np.ndarray,
        bundle: ModelBundle,
        decision: Decision,
        limit: Optional[int] = None,
    ) -> list[Contribution]:
        """
        Rank contributions in the direction that explains the decision.

        Args:
            vector: Standardized feature vector.
            bundle: Model bundle with weights.
            decision: REJECTED sorts ascending, APPROVED descending.
            limit: Override for the number of entries returned.

        Returns:
            Ordered list of at most ``limit`` contributions.
        """
        items = self.contributions(vector, bundle)

        # sorted() is stable, so equal contributions stay in index order
        if decision == Decision.REJECTED:
            ranked = sorted(items, key=lambda c: c.signed_contribution)
            default_limit = self.max_rejection_factors
        else:
            ranked = sorted(items, key=lambda c: -c.signed_contribution)
            default_limit = self.max_approval_factors

        return ranked[: limit if limit is not None else default_limit]
