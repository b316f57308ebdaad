"""Tests for voiceos/config_models.py and args/voice_planner.yaml"""

import pytest
from pydantic import ValidationError

from tests.conftest import ARGS_DIR
from voiceos.config_models import (
    PlannerConfig,
    ThresholdsConfig,
    load_planner_config,
)
from voiceos.errors import ConfigError


class TestDefaults:
    def test_threshold_defaults(self):
        thresholds = PlannerConfig().thresholds
        assert thresholds.auto_low == 0.80
        assert thresholds.confirm_low == 0.55
        assert thresholds.auto_medium == 0.90
        assert thresholds.confirm_medium == 0.70
        assert thresholds.confirm_high == 0.0
        assert thresholds.ambiguity_gap == 0.15
        assert thresholds.min_stt_confidence_for_auto == 0.6

    def test_other_sections(self):
        config = PlannerConfig()
        assert config.scoring.action_picker_size == 4
        assert config.noise_guard.enabled is True
        assert config.slot_filling.max_suggestions == 4


class TestValidation:
    def test_confirm_above_auto_rejected(self):
        with pytest.raises(ValidationError):
            ThresholdsConfig(confirm_low=0.9, auto_low=0.8)

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            ThresholdsConfig(auto_low=1.5)

    def test_suggestion_limit(self):
        with pytest.raises(ValidationError):
            PlannerConfig.model_validate({"slot_filling": {"max_suggestions": 6}})


class TestLoad:
    def test_shipped_config_matches_defaults(self):
        config = load_planner_config(ARGS_DIR / "voice_planner.yaml", strict=True)
        assert config.thresholds == ThresholdsConfig()

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_planner_config(tmp_path / "nope.yaml") == PlannerConfig()

    def test_partial_file(self, tmp_path):
        path = tmp_path / "planner.yaml"
        path.write_text("thresholds:\n  ambiguity_gap: 0.2\n", encoding="utf-8")
        config = load_planner_config(path)
        assert config.thresholds.ambiguity_gap == 0.2
        assert config.thresholds.auto_low == 0.80

    def test_empty_file(self, tmp_path):
        path = tmp_path / "planner.yaml"
        path.write_text("", encoding="utf-8")
        assert load_planner_config(path) == PlannerConfig()

    def test_invalid_file_falls_back(self, tmp_path):
        path = tmp_path / "planner.yaml"
        path.write_text("thresholds:\n  auto_low: 2.0\n", encoding="utf-8")
        assert load_planner_config(path) == PlannerConfig()

    def test_invalid_file_strict(self, tmp_path):
        path = tmp_path / "planner.yaml"
        path.write_text("thresholds: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_planner_config(path, strict=True)
