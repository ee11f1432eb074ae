"""Tests for package defaults."""

from inboxai.config.defaults import (
    DEFAULT_AI_ENABLED,
    DEFAULT_DAILY_BUDGET_CENTS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_STORE,
    get_defaults,
)


class TestDefaults:
    def test_ai_enabled_by_default(self):
        assert DEFAULT_AI_ENABLED is True

    def test_default_store(self):
        assert DEFAULT_STORE == "memory"

    def test_default_retries(self):
        assert DEFAULT_MAX_RETRIES == 3

    def test_default_budget(self):
        assert DEFAULT_DAILY_BUDGET_CENTS == 500

    def test_default_log_level(self):
        assert DEFAULT_LOG_LEVEL == "WARNING"

    def test_get_defaults_returns_fresh_dict(self):
        d = get_defaults()
        d["store"] = "sqlite"
        assert get_defaults()["store"] == "memory"

    def test_get_defaults_has_all_keys(self):
        expected_keys = {
            "edge_url", "ai_enabled", "store", "store_path",
            "max_retries", "retry_initial_delay", "retry_max_delay",
            "daily_budget_cents", "log_level", "scoring_weights_path",
            "api_key", "auth_token",
        }
        assert expected_keys == set(get_defaults().keys())
