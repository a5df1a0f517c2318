"""Model artifact handling for the loan decision explainer."""

from .bundle import (
    ModelBundle,
    get_model_bundle,
    load_model_bundle,
    reload_model_bundle,
)

__all__ = [
    "ModelBundle",
    "get_model_bundle",
    "load_model_bundle",
    "reload_model_bundle",
]
