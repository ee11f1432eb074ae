"""Configuration hierarchy: merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.inboxai/config.yaml)
  3. Project config   (./inboxai.yaml, searched upward from cwd)
  4. Environment variables (INBOXAI_*, OPENAI_API_KEY)
  5. Runtime arguments

Keys that the defaults do not define are dropped from YAML files with a
warning, so a typo never silently shadows a real setting.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from inboxai.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".inboxai" / "config.yaml"
_PROJECT_CONFIG_NAME = "inboxai.yaml"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"not a boolean: {value!r}")


# env var -> (config key, parser)
_ENV_VARS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "OPENAI_API_KEY": ("api_key", str),
    "INBOXAI_EDGE_URL": ("edge_url", str),
    "INBOXAI_AUTH_TOKEN": ("auth_token", str),
    "INBOXAI_AI_ENABLED": ("ai_enabled", _parse_bool),
    "INBOXAI_STORE": ("store", str),
    "INBOXAI_STORE_PATH": ("store_path", str),
    "INBOXAI_LOG_LEVEL": ("log_level", str),
    "INBOXAI_MAX_RETRIES": ("max_retries", int),
    "INBOXAI_RETRY_INITIAL_DELAY": ("retry_initial_delay", float),
    "INBOXAI_RETRY_MAX_DELAY": ("retry_max_delay", float),
    "INBOXAI_DAILY_BUDGET_CENTS": ("daily_budget_cents", int),
    "INBOXAI_SCORING_WEIGHTS": ("scoring_weights_path", str),
}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values.
    """
    config = get_defaults()
    known = set(config)

    layers = [("global", _GLOBAL_CONFIG_PATH), ("project", _find_project_config())]
    for label, path in layers:
        if path is None:
            continue
        file_cfg = _load_yaml_config(path)
        if file_cfg:
            logger.debug("Applying %s config from %s", label, path)
            config.update(_known_keys(file_cfg, known, path))

    config.update(_load_env_vars())

    # Only override when explicitly set
    config.update({k: v for k, v in runtime_overrides.items() if v is not None})
    return config


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Load a YAML config file if it exists."""
    if not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring", path)
        return None
    return data


def _known_keys(data: dict[str, Any], known: set[str], path: Path) -> dict[str, Any]:
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in known}


def _find_project_config() -> Path | None:
    """Search for inboxai.yaml from cwd upward."""
    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / _PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def _load_env_vars() -> dict[str, Any]:
    result: dict[str, Any] = {}
    for env_key, (config_key, parse) in _ENV_VARS.items():
        raw = os.environ.get(env_key)
        if raw is None:
            continue
        try:
            result[config_key] = parse(raw)
        except ValueError:
            logger.warning("Ignoring %s: cannot read %r for '%s'", env_key, raw, config_key)
    return result
