"""
Application-wide constants for the loan decision explainer.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "loan-explainer"
APP_DISPLAY_NAME: Final[str] = "Explainable Loan Approval Engine"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Model Bundle
# =============================================================================

# Keys every model artifact must supply
REQUIRED_BUNDLE_FIELDS: Final[tuple[str, ...]] = (
    "feature_names",
    "scaler_mean",
    "scaler_scale",
    "weights",
    "bias",
    "background",
)


# =============================================================================
# Application Record Fields
# =============================================================================

# Numeric inputs, copied straight into the vector (amounts in thousands)
NUMERIC_FEATURES: Final[tuple[str, ...]] = (
    "loan_amount_000s",
    "applicant_income_000s",
    "sequence_number",
    "number_of_owner_occupied_units",
    "number_of_1_to_4_family_units",
    "hud_median_family_income",
    "tract_to_msamd_income",
)

# Categorical inputs, one-hot encoded as "<field>_<value>"
CATEGORICAL_FIELDS: Final[tuple[str, ...]] = (
    "loan_type_name",
    "loan_purpose_name",
    "property_type_name",
    "purchaser_type_name",
    "owner_occupancy_name",
    "applicant_ethnicity_name",
    "preapproval_name",
    "lien_status_name",
    "applicant_race_name_1",
    "applicant_sex_name",
)


# =============================================================================
# Scoring Constants
# =============================================================================

# Fixed decision boundary; probability must be strictly greater to approve
APPROVAL_THRESHOLD: Final[float] = 0.5

INFLUENCE_INCREASES: Final[str] = "increases approval chance"
INFLUENCE_DECREASES: Final[str] = "decreases approval chance"

GENERIC_NEGATIVE_REASON: Final[str] = "This factor negatively impacts your approval chances"


# =============================================================================
# Enums
# =============================================================================


class Decision(str, Enum):
    """Binary outcome of the linear classifier."""

    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @classmethod
    def from_probability(cls, probability: float) -> "Decision":
        """Approve only when strictly above the threshold."""
        if probability > APPROVAL_THRESHOLD:
            return cls.APPROVED
        return cls.REJECTED


class Sign(str, Enum):
    """Direction of a feature's effect on the approval score."""

    POSITIVE = "positive"
    NEGATIVE = "negative"

    @classmethod
    def of(cls, value: float) -> "Sign":
        """Zero counts as negative."""
        return cls.POSITIVE if value > 0 else cls.NEGATIVE


class SuggestionPriority(str, Enum):
    """Urgency of an improvement suggestion."""

    HIGH = "High"
    MEDIUM = "Medium"
