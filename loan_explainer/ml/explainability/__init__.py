"""
Model explainability for loan decisions.

Components:
- ContributionRanker: Exact linear contributions, ranked per decision
- SHAPExplainer: Monte-Carlo Shapley value approximation
- LIMEExplainer: Perturbation-based local sensitivity
- RuleTable: Keyword -> reason/suggestion lookup
- ExplanationSynthesizer: Merges everything into one payload
"""

from .feature_importance import (
    Contribution,
    ContributionRanker,
)

from .lime_explainer import (
    LIMEExplainer,
    LIMEExplanation,
    LIMEFeatureSensitivity,
)

from .shap_explainer import (
    SHAPExplainer,
    SHAPExplanation,
    SHAPValue,
)

from .rules import (
    DEFAULT_EXPLANATION_RULES,
    GENERAL_SUGGESTIONS,
    ExplanationRule,
    RuleTable,
    Suggestion,
)

from .explainer import (
    ExplanationItem,
    ExplanationPayload,
    ExplanationSynthesizer,
)

__all__ = [
    # Contributions
    "Contribution",
    "ContributionRanker",
    # LIME
    "LIMEExplainer",
    "LIMEExplanation",
    "LIMEFeatureSensitivity",
    # SHAP
    "SHAPExplainer",
    "SHAPExplanation",
    "SHAPValue",
    # Rules
    "DEFAULT_EXPLANATION_RULES",
    "GENERAL_SUGGESTIONS",
    "ExplanationRule",
    "RuleTable",
    "Suggestion",
    # Synthesis
    "ExplanationItem",
    "ExplanationPayload",
    "ExplanationSynthesizer",
]
