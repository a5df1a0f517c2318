"""
Utility modules for the loan decision explainer.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants
"""

from loan_explainer.utils.config import (
    AppSettings,
    get_settings,
    reload_settings,
    settings,
    ROOT_DIR,
    DATA_DIR,
)
from loan_explainer.utils.constants import (
    APP_NAME,
    APP_DISPLAY_NAME,
    VERSION,
    APPROVAL_THRESHOLD,
    CATEGORICAL_FIELDS,
    NUMERIC_FEATURES,
    Decision,
    Sign,
    SuggestionPriority,
)
from loan_explainer.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
    LoggerMixin,
)

__all__ = [
    # Config
    "AppSettings",
    "get_settings",
    "reload_settings",
    "settings",
    "ROOT_DIR",
    "DATA_DIR",
    # Constants
    "APP_NAME",
    "APP_DISPLAY_NAME",
    "VERSION",
    "APPROVAL_THRESHOLD",
    "CATEGORICAL_FIELDS",
    "NUMERIC_FEATURES",
    "Decision",
    "Sign",
    "SuggestionPriority",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
    "LoggerMixin",
]
