"""
Shared test fixtures for the loan explainer test suite.

Sets environment variables before any package imports so settings and
logging come up in testing mode, then provides bundle factories and
ready-made engines.
"""

import os

# === Set environment BEFORE any loan_explainer imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")

import json
from pathlib import Path
from typing import Any, Optional, Sequence

import numpy as np
import pytest

from loan_explainer.core.prediction import PredictionEngine
from loan_explainer.core.scoring import FeatureVectorizer
from loan_explainer.data.bundle import ModelBundle, load_model_bundle

SAMPLE_BUNDLE_PATH = Path(__file__).parent.parent / "data" / "model_data.json"


# ---------------------------------------------------------------------------
# Bundle factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_bundle_data():
    """Factory that returns a callable to build serialized bundle dicts."""

    def _factory(
        feature_names: Sequence[str] = ("x", "y"),
        scaler_mean: Optional[Sequence[float]] = None,
        scaler_scale: Optional[Sequence[float]] = None,
        weights: Optional[Sequence[float]] = None,
        bias: float = 0.0,
        background: Optional[Sequence[Sequence[float]]] = None,
    ) -> dict[str, Any]:
        n = len(feature_names)
        return {
            "feature_names": list(feature_names),
            "scaler_mean": list(scaler_mean) if scaler_mean is not None else [0.0] * n,
            "scaler_scale": list(scaler_scale) if scaler_scale is not None else [1.0] * n,
            "weights": list(weights) if weights is not None else [1.0] * n,
            "bias": bias,
            "background": [list(r) for r in background] if background is not None else [[0.0] * n],
        }

    return _factory


@pytest.fixture
def make_bundle(make_bundle_data):
    """Factory that returns a callable to build validated ModelBundles."""

    def _factory(**kwargs) -> ModelBundle:
        return ModelBundle.from_dict(make_bundle_data(**kwargs))

    return _factory


@pytest.fixture
def xy_bundle(make_bundle):
    """Two features x and y, identity scaler, weights [1, -1], zero bias."""
    return make_bundle(weights=[1.0, -1.0])


@pytest.fixture
def sample_bundle():
    """The mortgage bundle shipped under data/."""
    return load_model_bundle(SAMPLE_BUNDLE_PATH)


@pytest.fixture
def bundle_file(tmp_path, make_bundle_data):
    """Factory that writes a bundle dict to a JSON file and returns its path."""

    def _factory(data: Optional[dict[str, Any]] = None, **kwargs) -> Path:
        path = tmp_path / "model_data.json"
        path.write_text(json.dumps(data if data is not None else make_bundle_data(**kwargs)))
        return path

    return _factory


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------


@pytest.fixture
def xy_vectorizer():
    return FeatureVectorizer(numeric_fields=("x", "y"), categorical_fields=())


@pytest.fixture
def xy_engine(xy_bundle, xy_vectorizer):
    return PredictionEngine(xy_bundle, vectorizer=xy_vectorizer)


@pytest.fixture
def sample_record() -> dict[str, Any]:
    """A realistic mortgage application as submitted by the form."""
    return {
        "loan_amount_000s": "320",
        "applicant_income_000s": "54",
        "sequence_number": "1200",
        "number_of_owner_occupied_units": "1500",
        "number_of_1_to_4_family_units": "2100",
        "hud_median_family_income": "66000",
        "tract_to_msamd_income": "95.5",
        "loan_type_name": "FHA-insured",
        "loan_purpose_name": "Home purchase",
        "property_type_name": "Manufactured housing",
        "owner_occupancy_name": "Not owner-occupied as a principal dwelling",
        "preapproval_name": "Preapproval was not requested",
        "lien_status_name": "Secured by a first lien",
        "applicant_race_name_1": "White",
        "applicant_sex_name": "Female",
    }


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
