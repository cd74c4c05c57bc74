"""Tests for configuration models and JSON loading."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from tether.exceptions import ConfigurationError
from tether.models.config import (
    DEFAULT_CONTEXT_RULES,
    ContextRule,
    MatchingConfig,
    RelevanceWeights,
    ScheduleConfig,
    TetherConfig,
)


class TestMatchingConfig:
    def test_defaults(self):
        config = MatchingConfig()
        assert config.default_confidence_threshold == 0.7
        assert config.max_active_constraints == 5
        assert config.enable_fuzzy_matching
        assert config.max_evaluation_time_ms == 45

    def test_presets(self):
        fast = MatchingConfig.high_performance()
        assert (fast.default_confidence_threshold, fast.max_active_constraints) == (0.8, 3)
        broad = MatchingConfig.high_accuracy()
        assert (broad.default_confidence_threshold, broad.max_active_constraints) == (0.6, 8)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"default_confidence_threshold": 1.5},
            {"max_active_constraints": 0},
            {"max_active_constraints": 21},
            {"max_evaluation_time_ms": 0},
        ],
    )
    def test_out_of_range(self, kwargs):
        with pytest.raises(ValidationError):
            MatchingConfig(**kwargs)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            MatchingConfig().max_active_constraints = 3

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError):
            RelevanceWeights(keyword=0.5, file_pattern=0.5, context_pattern=0.5)


class TestScheduleConfig:
    def test_phase_overrides_are_normalized(self):
        config = ScheduleConfig(phase_overrides={" Red ": 1})
        assert config.phase_overrides == {"red": 1}

    @pytest.mark.parametrize("overrides", [{"red": 0}, {" ": 2}])
    def test_invalid_overrides(self, overrides):
        with pytest.raises(ValidationError):
            ScheduleConfig(phase_overrides=overrides)

    def test_cadence_must_be_positive(self):
        with pytest.raises(ValidationError):
            ScheduleConfig(every_n_interactions=0)


class TestContextRule:
    def test_normalizes_entries(self):
        rule = ContextRule(context_type=" perf ", keywords=["Profile", " "], path_patterns=["*/Bench/*"])
        assert rule.context_type == "perf"
        assert rule.keywords == ["profile"]
        assert rule.path_patterns == ["*/bench/*"]

    def test_blank_type(self):
        with pytest.raises(ValidationError):
            ContextRule(context_type="  ")


class TestTetherConfig:
    def test_defaults(self):
        config = TetherConfig()
        assert [r.context_type for r in config.context_rules] == [r.context_type for r in DEFAULT_CONTEXT_RULES]
        assert config.keywords.stop_words is None

    def test_from_dict(self):
        config = TetherConfig.from_dict({
            "matching": {"default_confidence_threshold": 0.8},
            "schedule": {"every_n_interactions": 4},
            "keywords": {"synonyms": {"db": ["database"]}},
        })
        assert config.matching.default_confidence_threshold == 0.8
        assert config.schedule.every_n_interactions == 4
        assert config.keywords.to_tables().synonyms_for("db") == {"database"}

    def test_from_dict_invalid(self):
        with pytest.raises(ConfigurationError):
            TetherConfig.from_dict({"matching": {"max_active_constraints": 99}})

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "tether.json"
        path.write_text(json.dumps({"schedule": {"every_n_interactions": 2}}), encoding="utf-8")
        assert TetherConfig.from_json_file(path).schedule.every_n_interactions == 2

    @pytest.mark.parametrize("content", ["[1, 2]", "{broken"])
    def test_from_json_file_invalid(self, tmp_path, content):
        path = tmp_path / "tether.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigurationError):
            TetherConfig.from_json_file(path)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            TetherConfig.from_dict({"schedule": {"every_n_interactions": -1}})
