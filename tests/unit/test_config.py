"""
Tests for loan_explainer.utils.config: settings defaults and validation.
"""

import pytest
from pydantic import ValidationError

from loan_explainer.utils.config import (
    DATA_DIR,
    ExplainerSettings,
    ModelSettings,
    get_settings,
    reload_settings,
)


class TestExplainerSettings:
    def test_defaults(self):
        settings = ExplainerSettings()
        assert settings.shap_num_samples == 20
        assert settings.shap_top_k == 8
        assert settings.lime_num_perturbations == 50
        assert settings.lime_noise_scale == 0.2
        assert settings.lime_top_k == 6
        assert settings.max_suggestions == 5
        assert settings.max_workers == 1

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("EXPLAINER_SHAP_NUM_SAMPLES", "40")
        monkeypatch.setenv("EXPLAINER_RANDOM_SEED", "7")
        settings = ExplainerSettings()
        assert settings.shap_num_samples == 40
        assert settings.random_seed == 7

    @pytest.mark.parametrize("field", ["shap_num_samples", "lime_top_k", "max_workers"])
    def test_counts_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            ExplainerSettings(**{field: 0})

    def test_negative_seed_rejected(self):
        with pytest.raises(ValidationError):
            ExplainerSettings(random_seed=-1)

    def test_zero_seed_allowed(self):
        assert ExplainerSettings(random_seed=0).random_seed == 0

    def test_noise_scale_may_be_zero(self):
        assert ExplainerSettings(lime_noise_scale=0.0).lime_noise_scale == 0.0

    def test_negative_noise_scale_rejected(self):
        with pytest.raises(ValidationError):
            ExplainerSettings(lime_noise_scale=-0.1)


class TestAppSettings:
    def test_testing_environment(self):
        assert get_settings().environment == "testing"

    def test_reload_returns_new_instance(self):
        before = get_settings()
        after = reload_settings()
        assert after is not before
        assert get_settings() is after


class TestPaths:
    def test_default_bundle_lives_in_data_dir(self):
        assert ModelSettings().bundle_path == DATA_DIR / "model_data.json"

    def test_utils_exports_only_used_paths(self):
        import loan_explainer.utils as utils

        assert {"ROOT_DIR", "DATA_DIR"} <= set(utils.__all__)
        assert "PACKAGE_DIR" not in utils.__all__
