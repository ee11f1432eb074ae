"""YAML loading for scoring weights and daily agent settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from inboxai.config.schema import DailyAgentConfig, parse_daily_agent_config
from inboxai.scoring.relationship import ScoringWeights


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load any YAML file safely."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Expected YAML mapping, got {type(raw).__name__} in {path}")

    return raw


def load_scoring_weights(path: str | Path) -> ScoringWeights:
    """Load relationship scoring weights. Unknown keys are rejected."""
    raw = load_yaml(path)
    weights = raw.get("weights", raw)
    if not isinstance(weights, dict):
        raise ValueError(f"Invalid weights YAML: 'weights' must be a mapping in {path}")
    return ScoringWeights(**weights)


def load_daily_agent_yaml(path: str | Path) -> DailyAgentConfig:
    """Load a daily agent settings YAML file.

    Accepts the settings at the top level or under a ``dailyAgent`` key.
    """
    raw = load_yaml(path)
    settings = raw.get("dailyAgent", raw)
    if not isinstance(settings, dict):
        raise ValueError(f"Invalid settings YAML: 'dailyAgent' must be a mapping in {path}")
    return parse_daily_agent_config(settings)
