"""
Configuration management for the loan decision explainer.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
DATA_DIR = ROOT_DIR / "data"


class ModelSettings(BaseSettings):
    """Location of the pre-trained model bundle."""

    model_config = SettingsConfigDict(env_prefix="MODEL_")

    bundle_path: Path = DATA_DIR / "model_data.json"


class ExplainerSettings(BaseSettings):
    """Tuning knobs for the explanation estimators."""

    model_config = SettingsConfigDict(env_prefix="EXPLAINER_")

    # Shapley approximation
    shap_num_samples: int = 20
    shap_top_k: int = 8

    # Local sensitivity approximation
    lime_num_perturbations: int = 50
    lime_noise_scale: float = 0.2
    lime_top_k: int = 6

    # Synthesized payload sizes
    max_rejection_factors: int = 5
    max_approval_factors: int = 3
    max_suggestions: int = 5

    # Seed for reproducible estimates (None = fresh entropy)
    random_seed: Optional[int] = None

    # Worker threads for running the estimators side by side
    max_workers: int = 1

    # Compute SHAP/LIME sections for approved applications too
    explain_approved: bool = True

    @field_validator(
        "shap_num_samples",
        "shap_top_k",
        "lime_num_perturbations",
        "lime_top_k",
        "max_workers",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Counts must be at least one."""
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("random_seed")
    @classmethod
    def validate_seed(cls, v: Optional[int]) -> Optional[int]:
        """numpy seeds must be non-negative."""
        if v is not None and v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("lime_noise_scale")
    @classmethod
    def validate_noise_scale(cls, v: float) -> float:
        """Noise scale may be zero but never negative."""
        if v < 0:
            raise ValueError("must be >= 0")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "loan_explainer.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True
    file_output: bool = True


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "loan-explainer"
    version: str = "0.1.0"
    description: str = "Explainable loan approval scoring"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    model: ModelSettings = Field(default_factory=ModelSettings)
    explainer: ExplainerSettings = Field(default_factory=ExplainerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings


# Convenience exports
settings = get_settings()
