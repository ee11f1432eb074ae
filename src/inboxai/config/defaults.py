"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Edge function settings
DEFAULT_EDGE_URL = None
DEFAULT_AI_ENABLED = True

# Default store settings
DEFAULT_STORE = "memory"
DEFAULT_STORE_PATH = str(Path.home() / ".inboxai" / "store.db")

# Default retry settings
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_INITIAL_DELAY = 0.5
DEFAULT_RETRY_MAX_DELAY = 5.0

# Default budget
DEFAULT_DAILY_BUDGET_CENTS = 500

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "edge_url": DEFAULT_EDGE_URL,
        "ai_enabled": DEFAULT_AI_ENABLED,
        "store": DEFAULT_STORE,
        "store_path": DEFAULT_STORE_PATH,
        "max_retries": DEFAULT_MAX_RETRIES,
        "retry_initial_delay": DEFAULT_RETRY_INITIAL_DELAY,
        "retry_max_delay": DEFAULT_RETRY_MAX_DELAY,
        "daily_budget_cents": DEFAULT_DAILY_BUDGET_CENTS,
        "log_level": DEFAULT_LOG_LEVEL,
        "scoring_weights_path": None,
        "api_key": None,
        "auth_token": None,
    }
