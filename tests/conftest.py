from datetime import UTC, datetime, timedelta

import pytest

from inboxai.concurrency.background import BackgroundTasks
from inboxai.store.memory import MemoryDocumentStore


class FakeClock:
    """Settable wall clock for services that take a ``clock`` callable."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def background():
    return BackgroundTasks()


@pytest.fixture
def clock():
    """Fixed at 2025-03-14 10:30 UTC."""
    return FakeClock(datetime(2025, 3, 14, 10, 30, tzinfo=UTC))


@pytest.fixture
def settings_yaml(tmp_path):
    """Write a minimal daily agent settings YAML and return its path."""
    content = """
dailyAgent:
  features:
    dailyWorkflowEnabled: true
  workflowSettings:
    dailyWorkflowTime: "08:15"
    timezone: Europe/Berlin
    maxAutoResponses: 25
    escalationThreshold: 0.4
"""
    path = tmp_path / "settings.yaml"
    path.write_text(content)
    return path


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Hide the user's global config, project config and INBOXAI_* environment."""
    import inboxai.config.hierarchy as hierarchy

    for key in hierarchy._ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "global" / "config.yaml")
    monkeypatch.chdir(tmp_path)
    return tmp_path
