"""
Pre-trained model bundle for the loan classifier.

The bundle carries everything the engine needs to score and explain an
application: feature ordering, standardization statistics, the linear
weights and bias, and a background sample set used as counterfactual
fill-ins. It is validated once on load and never mutated afterwards.
"""

import json
import math
from collections import Counter
from functools import cached_property
from pathlib import Path
from typing import Any, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from loan_explainer.core.errors import BundleIntegrityError
from loan_explainer.utils.config import get_settings
from loan_explainer.utils.constants import REQUIRED_BUNDLE_FIELDS
from loan_explainer.utils.logger import audit_log, get_logger

logger = get_logger(__name__)


def _readonly(values: Any) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


class ModelBundle(BaseModel):
    """Immutable, validated linear model artifact."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    feature_names: list[str]
    scaler_mean: list[float]
    scaler_scale: list[float]
    weights: list[float]
    bias: float
    background: list[list[float]]

    @model_validator(mode="after")
    def check_integrity(self) -> "ModelBundle":
        """Enforce the shared-length, uniqueness and finiteness invariants."""
        n = len(self.feature_names)
        if n == 0:
            raise ValueError("feature_names is empty")

        dupes = sorted(name for name, count in Counter(self.feature_names).items() if count > 1)
        if dupes:
            raise ValueError(f"feature_names contains duplicates: {dupes}")

        for key in ("scaler_mean", "scaler_scale", "weights"):
            values = getattr(self, key)
            if len(values) != n:
                raise ValueError(f"{key} has length {len(values)}, expected {n}")
            if not all(math.isfinite(v) for v in values):
                raise ValueError(f"{key} contains non-finite values")

        zero_scale = [self.feature_names[i] for i, s in enumerate(self.scaler_scale) if s == 0]
        if zero_scale:
            raise ValueError(f"scaler_scale is zero for: {zero_scale}")

        if not math.isfinite(self.bias):
            raise ValueError("bias is not finite")

        if not self.background:
            raise ValueError("background contains no samples")
        for row, sample in enumerate(self.background):
            if len(sample) != n:
                raise ValueError(f"background sample {row} has length {len(sample)}, expected {n}")
            if not all(math.isfinite(v) for v in sample):
                raise ValueError(f"background sample {row} contains non-finite values")

        return self

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelBundle":
        """
        Build a bundle from its serialized form.

        Raises:
            BundleIntegrityError: If a required key is absent or any
                invariant is violated.
        """
        if not isinstance(data, dict):
            raise BundleIntegrityError("Model bundle must be a JSON object")

        missing = [key for key in REQUIRED_BUNDLE_FIELDS if key not in data]
        if missing:
            raise BundleIntegrityError(
                f"Model bundle is missing required fields: {', '.join(missing)}"
            )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise BundleIntegrityError(f"Invalid model bundle: {e}") from e

    @property
    def n_features(self) -> int:
        return len(self.feature_names)

    @cached_property
    def mean_array(self) -> np.ndarray:
        return _readonly(self.scaler_mean)

    @cached_property
    def scale_array(self) -> np.ndarray:
        return _readonly(self.scaler_scale)

    @cached_property
    def weights_array(self) -> np.ndarray:
        return _readonly(self.weights)

    @cached_property
    def background_array(self) -> np.ndarray:
        """Background samples as an (n_samples, n_features) matrix."""
        return _readonly(self.background)

    @cached_property
    def feature_positions(self) -> dict[str, int]:
        return {name: i for i, name in enumerate(self.feature_names)}

    def feature_index(self, name: str) -> Optional[int]:
        """Position of a feature, or None if the bundle does not know it."""
        return self.feature_positions.get(name)

    def check_vector(self, vector: np.ndarray) -> None:
        """Raise if a feature vector does not line up with this bundle."""
        if vector.shape != (self.n_features,):
            raise BundleIntegrityError(
                f"Feature vector has shape {vector.shape}, expected ({self.n_features},)"
            )


def load_model_bundle(path: Path) -> ModelBundle:
    """
    Load and validate a model bundle from a JSON file.

    Args:
        path: Path to the serialized bundle (``model_data.json``).

    Returns:
        Validated ModelBundle.

    Raises:
        BundleIntegrityError: If the file is missing, unreadable or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise BundleIntegrityError(f"Model bundle not found at {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise BundleIntegrityError(f"Failed to read model bundle {path}: {e}") from e

    bundle = ModelBundle.from_dict(data)
    logger.info(
        f"Loaded model bundle from {path}: {bundle.n_features} features, "
        f"{len(bundle.background)} background samples"
    )
    audit_log(
        "bundle_loaded",
        {"path": str(path), "features": bundle.n_features, "background": len(bundle.background)},
        audit_type="MODEL",
    )
    return bundle


# Singleton instance
_bundle: Optional[ModelBundle] = None


def get_model_bundle() -> ModelBundle:
    """Get the process-wide model bundle, loading it on first use."""
    global _bundle
    if _bundle is None:
        _bundle = load_model_bundle(get_settings().model.bundle_path)
    return _bundle


def reload_model_bundle() -> ModelBundle:
    """Force reload of the model bundle from the configured path."""
    global _bundle
    _bundle = load_model_bundle(get_settings().model.bundle_path)
    return _bundle
