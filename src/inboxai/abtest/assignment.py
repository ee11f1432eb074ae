"""Deterministic variant assignment."""

from __future__ import annotations

from inboxai.types import Variant
from inboxai.utils.hashing import rolling_hash

_BUCKETS = 10_000
DEFAULT_SPLIT_RATIO = 0.5


def hash_to_unit(test_id: str, user_id: str) -> float:
    """Map a (test, user) pair to a stable value in [0, 1)."""
    return abs(rolling_hash(f"{test_id}:{user_id}")) % _BUCKETS / _BUCKETS


def pick_variant(test_id: str, user_id: str, split_ratio: float | None = None) -> Variant:
    # a stored ratio of 0 counts as unset
    ratio = split_ratio or DEFAULT_SPLIT_RATIO
    return Variant.A if hash_to_unit(test_id, user_id) < ratio else Variant.B
