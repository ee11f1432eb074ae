"""AI result cache backed by the per-user cache collection."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from inboxai.cache.stats import CacheEntry, CacheStats
from inboxai.cache.ttl import resolve_ttl
from inboxai.concurrency.background import BackgroundTasks
from inboxai.store import paths
from inboxai.store.base import DocumentStore
from inboxai.utils.clock import Clock, local_now

logger = logging.getLogger(__name__)


class AICache:
    """TTL-gated cache of AI results.

    Reads return the stored result or None; nothing on this path raises.
    Hit-count updates and writes go through the background queue.
    """

    def __init__(
        self,
        store: DocumentStore,
        background: BackgroundTasks,
        clock: Clock = local_now,
    ) -> None:
        self._store = store
        self._background = background
        self._clock = clock
        self._stats = CacheStats()

    @property
    def stats(self) -> CacheStats:
        return self._stats.model_copy()

    async def get_cached_result(self, key: str, user_id: str) -> Any | None:
        """Return the cached result for ``key``, or None on miss/expiry/error."""
        path = f"{paths.ai_cache(user_id)}/{key}"
        try:
            doc = await self._store.get(path)
            if doc is None:
                self._stats.misses += 1
                return None
            entry = CacheEntry.model_validate(doc)
        except Exception as e:
            self._stats.errors += 1
            self._stats.misses += 1
            logger.warning("Cache read failed for %s: %s", key, e)
            return None

        now = self._clock()
        if entry.is_expired(now):
            # Stale entries stay in place until overwritten or swept.
            self._stats.misses += 1
            logger.debug("Cache entry %s expired at %s", key, entry.expires_at)
            return None

        self._stats.hits += 1
        self._background.submit(self._record_hit(path), label=f"cache-hit:{key}")
        logger.debug("Cache hit: %s (operation=%s)", key, entry.operation)
        return entry.result

    async def set_cached_result(
        self,
        key: str,
        user_id: str,
        operation: str,
        result: Any,
        ttl: int | None = None,
    ) -> None:
        """Schedule an upsert of ``result``. No write at all when the TTL is 0."""
        ttl_seconds = resolve_ttl(operation, ttl)
        if ttl_seconds <= 0:
            self._stats.skipped_writes += 1
            logger.debug("Caching disabled for %s, skipping write", operation)
            return

        now = self._clock()
        entry = CacheEntry(
            key=key,
            operation=operation,
            result=result,
            cached_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
        )
        path = f"{paths.ai_cache(user_id)}/{key}"
        self._stats.writes += 1
        self._background.submit(
            self._store.set(path, entry.to_document()), label=f"cache-write:{key}"
        )

    async def clear_expired(self, user_id: str) -> int:
        """Delete every expired entry for ``user_id``. Returns the number removed."""
        collection = paths.ai_cache(user_id)
        try:
            stale = await self._store.query(
                collection, filters=[("expiresAt", "<=", self._clock())]
            )
            for doc_id, _ in stale:
                await self._store.delete(f"{collection}/{doc_id}")
        except Exception as e:
            logger.warning("Cache sweep failed for user %s: %s", user_id, e)
            return 0
        if stale:
            logger.info("Removed %d expired cache entries for user %s", len(stale), user_id)
        return len(stale)

    async def _record_hit(self, path: str) -> None:
        await self._store.increment(path, "hitCount")
        await self._store.update(path, {"lastHitAt": self._clock()})
