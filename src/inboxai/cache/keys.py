"""Cache key generation: deterministic, collision-tolerant, not cryptographic."""

from __future__ import annotations

from inboxai.utils.hashing import rolling_hash, to_base36


def generate_cache_key(content: str, operation: str) -> str:
    """Key for ``content`` under ``operation``, e.g. ``categorization_1x9k2p``."""
    return f"{operation}_{to_base36(abs(rolling_hash(content)))}"
