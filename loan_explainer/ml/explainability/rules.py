"""
Reason and suggestion table for rejected applications.

Each rule pairs a feature-name keyword with a plain-language reason and,
optionally, an improvement suggestion. Rules are evaluated in order and
the first keyword found in the feature name wins. Extend the table to
cover new features; no control flow needs to change.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from loan_explainer.utils.constants import GENERIC_NEGATIVE_REASON, SuggestionPriority


@dataclass(frozen=True)
class Suggestion:
    """An actionable step that could improve a future application."""

    category: str
    action: str
    details: str
    priority: SuggestionPriority
    timeline: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {
            "category": self.category,
            "action": self.action,
            "details": self.details,
            "priority": self.priority.value,
        }
        if self.timeline:
            data["timeline"] = self.timeline
        return data


@dataclass(frozen=True)
class ExplanationRule:
    """Keyword -> (reason, suggestion) entry."""

    keyword: str
    reason: str
    suggestion: Optional[Suggestion] = None

    def matches(self, feature_name: str) -> bool:
        return self.keyword in feature_name


DEFAULT_EXPLANATION_RULES: tuple[ExplanationRule, ...] = (
    ExplanationRule(
        keyword="applicant_income_000s",
        reason="Income level may be insufficient for the requested loan amount",
        suggestion=Suggestion(
            category="Income",
            action="Increase your annual income",
            details="Consider additional income sources or career advancement",
            priority=SuggestionPriority.HIGH,
        ),
    ),
    ExplanationRule(
        keyword="loan_amount_000s",
        reason="Requested loan amount is high relative to qualifications",
        suggestion=Suggestion(
            category="Loan Amount",
            action="Reduce the loan amount requested",
            details="Consider a smaller loan or increase your down payment",
            priority=SuggestionPriority.HIGH,
        ),
    ),
    ExplanationRule(
        keyword="owner_occupancy_name_Not owner-occupied",
        reason="Investment properties have stricter lending requirements",
        suggestion=Suggestion(
            category="Property Usage",
            action="Consider owner-occupied properties",
            details="Owner-occupied properties have better approval rates",
            priority=SuggestionPriority.MEDIUM,
        ),
    ),
    ExplanationRule(
        keyword="preapproval_name_Preapproval was not requested",
        reason="Not requesting preapproval weakens your application",
        suggestion=Suggestion(
            category="Pre-approval",
            action="Get pre-approved before applying",
            details="Pre-approval demonstrates you're a qualified buyer",
            priority=SuggestionPriority.HIGH,
        ),
    ),
    ExplanationRule(
        keyword="property_type_name_Manufactured housing",
        reason="Manufactured housing has lower approval rates than single-family homes",
        suggestion=Suggestion(
            category="Property Type",
            action="Consider single-family homes",
            details="Traditional single-family homes have higher approval rates",
            priority=SuggestionPriority.MEDIUM,
        ),
    ),
    ExplanationRule(
        keyword="applicant_race_name_1",
        reason="Demographic factors may influence lending patterns in historical data",
    ),
    ExplanationRule(
        keyword="purchaser_type_name",
        reason="This purchaser type may have different approval criteria",
        suggestion=Suggestion(
            category="Loan Program",
            action="Consider different loan programs",
            details="Some loan programs may have better approval rates for your profile",
            priority=SuggestionPriority.MEDIUM,
        ),
    ),
)

# Appended after rule-derived suggestions while there is room
GENERAL_SUGGESTIONS: tuple[Suggestion, ...] = (
    Suggestion(
        category="Income",
        action="Increase your annual income",
        details="Consider additional income sources, part-time work, or skill development",
        priority=SuggestionPriority.HIGH,
        timeline="3-6 months",
    ),
    Suggestion(
        category="Credit",
        action="Improve your credit profile",
        details="Pay down existing debts and maintain good payment history",
        priority=SuggestionPriority.HIGH,
        timeline="6-12 months",
    ),
)


class RuleTable:
    """Ordered, first-match-wins lookup over explanation rules."""

    def __init__(
        self,
        rules: Sequence[ExplanationRule] = DEFAULT_EXPLANATION_RULES,
        default_reason: str = GENERIC_NEGATIVE_REASON,
    ):
        self.rules = tuple(rules)
        self.default_reason = default_reason

    def match(self, feature_name: str) -> Optional[ExplanationRule]:
        """First rule whose keyword occurs in the feature name."""
        for rule in self.rules:
            if rule.matches(feature_name):
                return rule
        return None

    def reason_for(self, feature_name: str) -> str:
        rule = self.match(feature_name)
        return rule.reason if rule else self.default_reason

    def suggestion_for(self, feature_name: str) -> Optional[Suggestion]:
        rule = self.match(feature_name)
        return rule.suggestion if rule else None
