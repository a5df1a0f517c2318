"""
Tests for loan_explainer.ml.explainability.rules: reason/suggestion lookup table.
"""

import pytest

from loan_explainer.ml.explainability.rules import (
    DEFAULT_EXPLANATION_RULES,
    GENERAL_SUGGESTIONS,
    ExplanationRule,
    RuleTable,
    Suggestion,
)
from loan_explainer.utils.constants import GENERIC_NEGATIVE_REASON, SuggestionPriority


@pytest.fixture
def table():
    return RuleTable()


class TestRuleTable:
    @pytest.mark.parametrize(
        "feature, category",
        [
            ("applicant_income_000s", "Income"),
            ("loan_amount_000s", "Loan Amount"),
            ("owner_occupancy_name_Not owner-occupied as a principal dwelling", "Property Usage"),
            ("preapproval_name_Preapproval was not requested", "Pre-approval"),
            ("property_type_name_Manufactured housing", "Property Type"),
            ("purchaser_type_name_Fannie Mae (FNMA)", "Loan Program"),
        ],
    )
    def test_known_features(self, table, feature, category):
        assert table.suggestion_for(feature).category == category
        assert table.reason_for(feature) != GENERIC_NEGATIVE_REASON

    def test_unknown_feature_gets_generic_reason(self, table):
        assert table.match("tract_to_msamd_income") is None
        assert table.reason_for("tract_to_msamd_income") == GENERIC_NEGATIVE_REASON
        assert table.suggestion_for("tract_to_msamd_income") is None

    def test_reason_without_suggestion(self, table):
        feature = "applicant_race_name_1_Black or African American"
        assert table.reason_for(feature) != GENERIC_NEGATIVE_REASON
        assert table.suggestion_for(feature) is None

    def test_owner_occupied_does_not_match_not_owner_occupied_rule(self, table):
        assert table.match("owner_occupancy_name_Owner-occupied as a principal dwelling") is None

    def test_first_match_wins(self):
        table = RuleTable(
            rules=[
                ExplanationRule(keyword="income", reason="first"),
                ExplanationRule(keyword="applicant_income", reason="second"),
            ]
        )
        assert table.reason_for("applicant_income_000s") == "first"

    def test_custom_default_reason(self):
        table = RuleTable(rules=[], default_reason="Unfavorable factor")
        assert table.reason_for("anything") == "Unfavorable factor"

    def test_default_rules_are_ordered_table(self):
        keywords = [rule.keyword for rule in DEFAULT_EXPLANATION_RULES]
        assert keywords[:2] == ["applicant_income_000s", "loan_amount_000s"]
        assert len(set(keywords)) == len(keywords)


class TestSuggestion:
    def test_to_dict_without_timeline(self):
        suggestion = Suggestion("Income", "Earn more", "Details", SuggestionPriority.HIGH)
        assert suggestion.to_dict() == {
            "category": "Income",
            "action": "Earn more",
            "details": "Details",
            "priority": "High",
        }

    def test_general_suggestions_have_timelines(self):
        assert [s.category for s in GENERAL_SUGGESTIONS] == ["Income", "Credit"]
        assert all("timeline" in s.to_dict() for s in GENERAL_SUGGESTIONS)
