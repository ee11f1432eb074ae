"""Tests for YAML loading of scoring weights and daily agent settings."""

import pytest

from inboxai.config.loader import load_daily_agent_yaml, load_scoring_weights, load_yaml
from inboxai.config.schema import DailyAgentConfig
from inboxai.errors.exceptions import SettingsValidationError


class TestLoadDailyAgentYaml:
    def test_loads_valid_settings(self, settings_yaml):
        config = load_daily_agent_yaml(settings_yaml)
        assert isinstance(config, DailyAgentConfig)
        assert config.features.daily_workflow_enabled is True
        assert config.workflow_settings.daily_workflow_time == "08:15"
        assert config.workflow_settings.timezone == "Europe/Berlin"
        assert config.workflow_settings.max_auto_responses == 25
        assert config.workflow_settings.escalation_threshold == 0.4

    def test_defaults_applied(self, settings_yaml):
        config = load_daily_agent_yaml(settings_yaml)
        assert config.features.categorization_enabled is True
        assert config.workflow_settings.require_approval is True
        assert config.model_preferences.response_generation == "gpt-4-turbo-preview"

    def test_top_level_settings(self, tmp_path):
        path = tmp_path / "flat.yaml"
        path.write_text("workflowSettings:\n  maxAutoResponses: 5\n")
        assert load_daily_agent_yaml(path).workflow_settings.max_auto_responses == 5

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_daily_agent_yaml(tmp_path / "nonexistent.yaml")

    def test_invalid_time(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text('workflowSettings:\n  dailyWorkflowTime: "9:00"\n')
        with pytest.raises(SettingsValidationError, match="Invalid schedule time format"):
            load_daily_agent_yaml(path)

    def test_wrong_type(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("features:\n  categorizationEnabled: [1, 2]\n")
        with pytest.raises(SettingsValidationError) as exc_info:
            load_daily_agent_yaml(path)
        assert exc_info.value.field == "features.categorizationEnabled"

    def test_non_mapping_section(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("dailyAgent: nope\n")
        with pytest.raises(ValueError, match="must be a mapping"):
            load_daily_agent_yaml(path)


class TestLoadScoringWeights:
    def test_under_weights_key(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("weights:\n  urgent: 45\n  vip_relationship: 10\n")
        weights = load_scoring_weights(path)
        assert weights.urgent == 45
        assert weights.vip_relationship == 10
        assert weights.business_opportunity == 50

    def test_top_level(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("crisis_sentiment: 80\n")
        assert load_scoring_weights(path).crisis_sentiment == 80

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "weights.yaml"
        path.write_text("weights:\n  urgnet: 45\n")
        with pytest.raises(ValueError):
            load_scoring_weights(path)


class TestLoadYaml:
    def test_loads_dict(self, tmp_path):
        path = tmp_path / "test.yaml"
        path.write_text("key: value\nnested:\n  a: 1\n")
        assert load_yaml(path) == {"key": "value", "nested": {"a": 1}}

    def test_raises_on_non_dict(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="Expected YAML mapping"):
            load_yaml(path)

    def test_raises_on_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path / "missing.yaml")
