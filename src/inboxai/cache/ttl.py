"""Per-operation time-to-live table."""

from __future__ import annotations

from inboxai.types import Operation

_HOUR = 60 * 60
_DAY = 24 * _HOUR

DEFAULT_TTL_SECONDS = _HOUR

TTL_SECONDS: dict[str, int] = {
    Operation.CATEGORIZATION: _DAY,
    Operation.SENTIMENT: _DAY,
    Operation.FAQ_DETECTION: 7 * _DAY,
    Operation.VOICE_MATCHING: 30 * 60,
    Operation.OPPORTUNITY_SCORING: _DAY,
    Operation.DAILY_AGENT: 0,  # never cached
}


def resolve_ttl(operation: str, override: int | None = None) -> int:
    if override is not None:
        return override
    return TTL_SECONDS.get(operation, DEFAULT_TTL_SECONDS)


def is_caching_enabled(operation: str) -> bool:
    return resolve_ttl(operation) > 0
