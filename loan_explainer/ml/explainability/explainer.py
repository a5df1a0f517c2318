"""
Explanation synthesis for loan decisions.

Merges the exact linear contributions with the SHAP and LIME estimates
into one payload: ranked plain-language reasons and suggestions for a
rejection, positive factors for an approval, and the estimator sections
for both.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from loan_explainer.utils.constants import Decision, Sign
from loan_explainer.utils.logger import get_logger

from .feature_importance import Contribution
from .lime_explainer import LIMEExplanation
from .rules import GENERAL_SUGGESTIONS, RuleTable, Suggestion
from .shap_explainer import SHAPExplanation

logger = get_logger(__name__)


@dataclass
class ExplanationItem:
    """A ranked, human-readable reason behind a rejection."""

    feature_name: str
    contribution: float
    magnitude: float
    sign: Sign
    human_reason: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "feature": self.feature_name,
            "contribution": round(self.contribution, 3),
            "magnitude": round(self.magnitude, 3),
            "impact": self.sign.value,
            "reason": self.human_reason,
        }


@dataclass
class ExplanationPayload:
    """Complete explanation for a loan decision."""

    decision: Decision

    # Rejections
    explanations: list[ExplanationItem] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)

    # Approvals
    positive_factors: list[Contribution] = field(default_factory=list)

    # Supplementary estimator sections
    shap_explanation: Optional[SHAPExplanation] = None
    lime_explanation: Optional[LIMEExplanation] = None
    feature_importance_summary: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {}
        if self.decision == Decision.REJECTED:
            data["explanations"] = [e.to_dict() for e in self.explanations]
            data["suggestions"] = [s.to_dict() for s in self.suggestions]
        else:
            data["positive_factors"] = [c.to_dict() for c in self.positive_factors]

        data["shap_explanations"] = (
            self.shap_explanation.to_dict() if self.shap_explanation else []
        )
        data["lime_explanations"] = (
            self.lime_explanation.to_dict() if self.lime_explanation else []
        )
        data["feature_importance_summary"] = self.feature_importance_summary
        return data


class ExplanationSynthesizer:
    """
    Builds the explanation payload from the three attribution sources.

    The only decision logic is the rule table lookup; everything else
    is aggregation and capping.
    """

    def __init__(
        self,
        rule_table: Optional[RuleTable] = None,
        general_suggestions: Sequence[Suggestion] = GENERAL_SUGGESTIONS,
        max_suggestions: int = 5,
        summary_size: int = 3,
    ):
        """
        Initialize the synthesizer.

        Args:
            rule_table: Keyword -> reason/suggestion lookup.
            general_suggestions: Standing suggestions used to fill up the list.
            max_suggestions: Cap on suggestions per rejection.
            summary_size: Entries per list in the importance summary.
        """
        self.rule_table = rule_table or RuleTable()
        self.general_suggestions = tuple(general_suggestions)
        self.max_suggestions = max_suggestions
        self.summary_size = summary_size

    def synthesize(
        self,
        decision: Decision,
        contributions: Sequence[Contribution],
        shap: Optional[SHAPExplanation] = None,
        lime: Optional[LIMEExplanation] = None,
    ) -> ExplanationPayload:
        """
        Merge ranked contributions and estimator outputs.

        Args:
            decision: Scorer outcome.
            contributions: Ranker output for this decision (worst first on
                rejection, best first on approval).
            shap: Shapley approximation, if computed.
            lime: Local sensitivity approximation, if computed.

        Returns:
            ExplanationPayload ready for serialization.
        """
        payload = ExplanationPayload(
            decision=decision,
            shap_explanation=shap,
            lime_explanation=lime,
            feature_importance_summary=self._summarize(shap, lime),
        )

        if decision == Decision.REJECTED:
            payload.explanations = self._explain_rejection(contributions)
            payload.suggestions = self._generate_suggestions(payload.explanations)
        else:
            payload.positive_factors = list(contributions)

        logger.debug(
            f"Synthesized {decision.value} explanation: {len(payload.explanations)} reasons, "
            f"{len(payload.suggestions)} suggestions"
        )
        return payload

    def _explain_rejection(self, contributions: Sequence[Contribution]) -> list[ExplanationItem]:
        """Attach a plain-language reason to each worst factor."""
        return [
            ExplanationItem(
                feature_name=c.feature_name,
                contribution=c.signed_contribution,
                magnitude=abs(c.signed_contribution),
                sign=c.direction,
                human_reason=self.rule_table.reason_for(c.feature_name),
            )
            for c in contributions
        ]

    def _generate_suggestions(self, explanations: Sequence[ExplanationItem]) -> list[Suggestion]:
        """Rule suggestions first, then general ones; one per category, capped."""
        candidates = [
            suggestion
            for suggestion in (
                self.rule_table.suggestion_for(e.feature_name) for e in explanations
            )
            if suggestion is not None
        ]
        candidates.extend(self.general_suggestions)

        suggestions: list[Suggestion] = []
        seen_categories: set[str] = set()
        for suggestion in candidates:
            if suggestion.category in seen_categories:
                continue
            seen_categories.add(suggestion.category)
            suggestions.append(suggestion)

        return suggestions[: self.max_suggestions]

    def _summarize(
        self,
        shap: Optional[SHAPExplanation],
        lime: Optional[LIMEExplanation],
    ) -> dict[str, list[str]]:
        """Top positive/negative SHAP features and most sensitive LIME features."""
        n = self.summary_size
        return {
            "top_positive_shap": [
                name for name, _ in shap.get_positive_contributors()[:n]
            ] if shap else [],
            "top_negative_shap": [
                name for name, _ in shap.get_negative_contributors()[:n]
            ] if shap else [],
            "most_sensitive_lime": lime.get_top_features(n) if lime else [],
        }
