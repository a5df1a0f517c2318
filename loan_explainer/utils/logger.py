"""
Logging for the loan decision explainer.

Loguru sinks: a colored console sink, a rotating application log, and
an audit log that receives only entries bound with an ``audit_type``.
Audit entries record every bundle load and every scored application,
with protected applicant attributes redacted.
"""

import sys
from typing import Any

from loguru import logger

from loan_explainer.utils.config import LoggingSettings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[audit_type]} | {message}"

REDACTED = "***REDACTED***"

# Substrings of keys whose values never reach a log sink
SENSITIVE_KEY_PARTS = frozenset({
    "password", "secret", "token", "api_key", "credential",
    "ssn", "social_security", "race", "ethnicity", "sex",
})


def _is_audit_record(record: dict[str, Any]) -> bool:
    return "audit_type" in record["extra"]


def _add_file_sinks(log_settings: LoggingSettings, diagnose: bool) -> None:
    """Rotating application log plus the audit log beside it."""
    log_file = log_settings.file_path
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        backtrace=True,
        diagnose=diagnose,
        enqueue=True,
    )

    # Adverse-action records are kept for a year
    logger.add(
        log_file.parent / "audit.log",
        format=AUDIT_FORMAT,
        level="INFO",
        filter=_is_audit_record,
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )


def setup_logging() -> None:
    """Replace loguru's default sink with the configured ones."""
    settings = get_settings()
    log_settings = settings.logging

    # Variable values in tracebacks could expose applicant data
    diagnose = settings.debug and settings.environment == "development"

    logger.remove()

    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=log_settings.level,
            colorize=True,
            backtrace=True,
            diagnose=diagnose,
        )

    if log_settings.file_output:
        _add_file_sinks(log_settings, diagnose)
        logger.info(f"Logging to {log_settings.file_path} at {log_settings.level}")


def get_logger(name: str) -> Any:
    """Logger bound to a module or component name."""
    return logger.bind(name=name)


def _sanitize_for_logging(data: Any) -> Any:
    """Redact credentials and protected applicant attributes, recursively."""
    if isinstance(data, dict):
        return {
            key: REDACTED
            if any(part in str(key).lower() for part in SENSITIVE_KEY_PARTS)
            else _sanitize_for_logging(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [_sanitize_for_logging(item) for item in data]
    return data


def audit_log(
    action: str,
    details: dict[str, Any],
    audit_type: str = "DECISION",
) -> None:
    """
    Write an entry to the audit log.

    Args:
        action: What happened, e.g. "loan_scored" or "bundle_loaded".
        details: Facts about the event; sensitive keys are redacted.
        audit_type: DECISION for scored applications, MODEL for bundle events.
    """
    logger.bind(audit_type=audit_type).info(f"{action} | {_sanitize_for_logging(details)}")


class LoggerMixin:
    """Gives a class a ``logger`` bound to its class name."""

    @property
    def logger(self) -> Any:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger


try:
    setup_logging()
except OSError as e:
    # Log directory not writable; console output still works
    logger.warning(f"Logging setup failed, using defaults: {e}")
