"""
Tests for loan_explainer.core.prediction.prediction_engine: end-to-end scoring.
"""

import numpy as np
import pytest

from loan_explainer.core.errors import BundleIntegrityError, ComputationError, InvalidRequestError
from loan_explainer.core.prediction import PredictionEngine, PredictionResult
from loan_explainer.core.scoring import FeatureVectorizer
from loan_explainer.utils.config import ExplainerSettings
from loan_explainer.utils.constants import Decision


class TestScenarios:
    def test_scenario_a_approved(self, xy_engine):
        result = xy_engine.predict({"x": 3, "y": 1}, seed=1)
        assert isinstance(result, PredictionResult)
        assert result.decision == Decision.APPROVED
        assert result.probability == pytest.approx(0.8808, abs=1e-4)

        data = result.to_dict()
        assert data["prediction"] == "APPROVED"
        assert data["probability"] == 0.8808
        assert data["confidence"] == 88.1
        assert data["positive_factors"][0] == {"feature": "x", "contribution": 3.0}
        assert "explanations" not in data

    def test_scenario_b_rejected(self, xy_engine):
        result = xy_engine.predict({"x": "1", "y": "5"}, seed=1)
        assert result.decision == Decision.REJECTED
        assert result.probability == pytest.approx(0.0180, abs=1e-4)

        data = result.to_dict()
        assert data["probability"] == 0.018
        assert data["explanations"][0]["feature"] == "y"
        assert data["explanations"][0]["contribution"] == -5.0
        assert "positive_factors" not in data

    def test_predict_vector(self, xy_engine):
        result = xy_engine.predict_vector(np.array([3.0, 1.0]), seed=1)
        assert result.decision == Decision.APPROVED
        assert result.to_dict() == xy_engine.predict({"x": 3, "y": 1}, seed=1).to_dict()


class TestOutputContract:
    def test_always_has_estimator_sections(self, xy_engine):
        for record in ({"x": 3, "y": 1}, {"x": 1, "y": 5}):
            data = xy_engine.predict(record).to_dict()
            assert data["shap_explanations"]
            assert data["lime_explanations"]
            assert set(data["feature_importance_summary"]) == {
                "top_positive_shap",
                "top_negative_shap",
                "most_sensitive_lime",
            }

    def test_explain_approved_off(self, xy_bundle, xy_vectorizer):
        engine = PredictionEngine(xy_bundle, vectorizer=xy_vectorizer, explain_approved=False)
        approved = engine.predict({"x": 3, "y": 1}).to_dict()
        assert approved["shap_explanations"] == []
        assert approved["lime_explanations"] == []
        rejected = engine.predict({"x": 1, "y": 5}).to_dict()
        assert rejected["shap_explanations"]

    def test_empty_record_never_raises(self, xy_engine):
        result = xy_engine.predict({})
        assert result.probability == 0.5
        assert result.decision == Decision.REJECTED

    def test_malformed_fields_default(self, xy_engine):
        result = xy_engine.predict({"x": "three", "y": None, "z": "ignored"})
        assert result.probability == 0.5

    def test_sample_bundle_end_to_end(self, sample_bundle, sample_record):
        engine = PredictionEngine.from_settings(sample_bundle)
        data = engine.predict(sample_record, seed=3).to_dict()
        assert data["prediction"] == "REJECTED"
        assert len(data["explanations"]) == 5
        assert 1 <= len(data["suggestions"]) <= 5
        assert len(data["shap_explanations"]) == 8
        assert len(data["lime_explanations"]) == 6


class TestDeterminism:
    def test_same_seed_same_output(self, sample_bundle, sample_record):
        engine = PredictionEngine(sample_bundle)
        first = engine.predict(sample_record, seed=42).to_dict()
        second = engine.predict(sample_record, seed=42).to_dict()
        assert first == second

    def test_configured_seed(self, xy_bundle, xy_vectorizer):
        engine = PredictionEngine(xy_bundle, vectorizer=xy_vectorizer, seed=11)
        record = {"x": 0.4, "y": -0.2}
        assert engine.predict(record).to_dict() == engine.predict(record).to_dict()

    def test_unseeded_calls_get_their_own_generator(self, xy_engine):
        assert xy_engine._generator(None) is not xy_engine._generator(None)

    def test_parallel_matches_serial(self, sample_bundle, sample_record):
        serial = PredictionEngine(sample_bundle, max_workers=1)
        parallel = PredictionEngine(sample_bundle, max_workers=3)
        assert (
            serial.predict(sample_record, seed=8).to_dict()
            == parallel.predict(sample_record, seed=8).to_dict()
        )


class TestFaults:
    def test_negative_call_seed(self, xy_engine):
        with pytest.raises(InvalidRequestError):
            xy_engine.predict({"x": 1, "y": 5}, seed=-1)

    def test_negative_configured_seed(self, xy_bundle, xy_vectorizer):
        with pytest.raises(InvalidRequestError):
            PredictionEngine(xy_bundle, vectorizer=xy_vectorizer, seed=-2)

    def test_wrong_vector_length(self, xy_engine):
        with pytest.raises(BundleIntegrityError):
            xy_engine.predict_vector(np.zeros(3))

    def test_overflow_becomes_computation_error(self, make_bundle, xy_vectorizer):
        bundle = make_bundle(weights=[1e308, 1e308])
        engine = PredictionEngine(bundle, vectorizer=xy_vectorizer)
        with pytest.raises(ComputationError) as exc_info:
            engine.predict({"x": 10, "y": 10})
        assert exc_info.value.message == "Prediction failed"

    def test_overflow_with_worker_threads(self, make_bundle, xy_vectorizer):
        bundle = make_bundle(weights=[1e308, 1e308])
        engine = PredictionEngine(bundle, vectorizer=xy_vectorizer, max_workers=3)
        with pytest.raises(ComputationError):
            engine.predict({"x": 10, "y": 10})


class TestFromSettings:
    def test_components_sized_from_settings(self, sample_bundle, sample_record):
        settings = ExplainerSettings(
            shap_num_samples=2,
            shap_top_k=2,
            lime_num_perturbations=3,
            lime_top_k=1,
            max_rejection_factors=2,
            max_suggestions=1,
        )
        engine = PredictionEngine.from_settings(sample_bundle, settings)
        data = engine.predict(sample_record, seed=0).to_dict()
        assert len(data["shap_explanations"]) == 2
        assert len(data["lime_explanations"]) == 1
        assert len(data["explanations"]) == 2
        assert len(data["suggestions"]) == 1

    def test_unmapped_fields_do_not_block(self, xy_bundle):
        engine = PredictionEngine(xy_bundle, vectorizer=FeatureVectorizer())
        assert engine.predict({"loan_amount_000s": "100"}).probability == 0.5
