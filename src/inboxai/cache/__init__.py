"""Cache subsystem: content-keyed AI results with per-operation TTLs."""

from inboxai.cache.keys import generate_cache_key
from inboxai.cache.service import AICache
from inboxai.cache.stats import CacheEntry, CacheStats
from inboxai.cache.ttl import TTL_SECONDS, is_caching_enabled, resolve_ttl

__all__ = [
    "AICache",
    "CacheEntry",
    "CacheStats",
    "TTL_SECONDS",
    "generate_cache_key",
    "is_caching_enabled",
    "resolve_ttl",
]
