"""Per-user daily agent settings stored in the document store."""

from __future__ import annotations

import logging
from typing import Any

from inboxai.config.schema import (
    DailyAgentConfig,
    check_settings_update,
    parse_daily_agent_config,
)
from inboxai.errors.exceptions import InboxAIError, StoreError
from inboxai.store import paths
from inboxai.store.base import DocumentStore, deep_merge
from inboxai.utils.clock import Clock, local_now

logger = logging.getLogger(__name__)

_PROTECTED_FIELDS = ("id", "userId", "createdAt", "updatedAt")


class DailyAgentConfigService:
    """Reads and writes ``users/{uid}/ai_workflow_config/{uid}``.

    Updates are validated before the store is touched; a rejected update
    raises SettingsValidationError and is never retried.
    """

    def __init__(self, store: DocumentStore, clock: Clock = local_now) -> None:
        self._store = store
        self._clock = clock

    async def get(self, user_id: str) -> DailyAgentConfig:
        """Stored settings, or the defaults when the user has none yet."""
        try:
            doc = await self._store.get(paths.workflow_config(user_id))
        except InboxAIError:
            raise
        except Exception as e:
            logger.error("Error fetching daily agent settings for %s: %s", user_id, e)
            raise StoreError(f"Failed to load daily agent settings: {e}") from e

        if doc is None:
            logger.debug("No daily agent settings for %s, returning defaults", user_id)
            return self._defaults(user_id)
        return DailyAgentConfig.model_validate(doc)

    async def update(self, user_id: str, updates: dict[str, Any]) -> DailyAgentConfig:
        """Deep-merge a partial update into the stored settings."""
        check_settings_update(updates)
        updates = {k: v for k, v in updates.items() if k not in _PROTECTED_FIELDS}

        path = paths.workflow_config(user_id)
        now = self._clock()
        try:
            existing = await self._store.get(path)
            if existing is None:
                base = self._defaults(user_id).to_document()
                base["createdAt"] = now
            else:
                base = existing
            merged = deep_merge(base, updates)
            merged["updatedAt"] = now
            config = parse_daily_agent_config(merged)
            await self._store.set(path, config.to_document())
        except InboxAIError:
            raise
        except Exception as e:
            logger.error("Error updating daily agent settings for %s: %s", user_id, e)
            raise StoreError(f"Failed to save daily agent settings: {e}") from e

        logger.info("Updated daily agent settings for %s", user_id)
        return config

    def _defaults(self, user_id: str) -> DailyAgentConfig:
        now = self._clock()
        config = DailyAgentConfig(id=user_id, user_id=user_id, created_at=now, updated_at=now)
        config.workflow_settings.timezone = now.tzname() or "UTC"
        return config
