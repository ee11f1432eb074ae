"""Cache entry and statistics models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """A cached AI result as stored under ``users/{uid}/ai_cache/{key}``."""

    key: str
    operation: str
    result: Any = None
    cached_at: datetime = Field(alias="cachedAt")
    expires_at: datetime = Field(alias="expiresAt")
    hit_count: int = Field(default=0, alias="hitCount")
    last_hit_at: datetime | None = Field(default=None, alias="lastHitAt")

    model_config = {"populate_by_name": True}

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CacheStats(BaseModel):
    """Session cache statistics."""

    hits: int = 0
    misses: int = 0
    writes: int = 0
    skipped_writes: int = 0
    errors: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0
