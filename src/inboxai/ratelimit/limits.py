"""Per-operation hourly and daily request limits."""

from __future__ import annotations

from typing import NamedTuple

from inboxai.types import Operation

WARNING_THRESHOLD_PERCENT = 80


class OperationLimits(NamedTuple):
    per_hour: int
    per_day: int


RATE_LIMITS: dict[str, OperationLimits] = {
    Operation.CATEGORIZATION: OperationLimits(200, 2000),
    Operation.SENTIMENT: OperationLimits(200, 2000),
    Operation.FAQ_DETECTION: OperationLimits(200, 2000),
    Operation.VOICE_MATCHING: OperationLimits(50, 500),
    Operation.OPPORTUNITY_SCORING: OperationLimits(100, 1000),
    Operation.DAILY_AGENT: OperationLimits(2, 2),
}


def get_limits(operation: str) -> OperationLimits:
    try:
        return RATE_LIMITS[operation]
    except KeyError:
        raise ValueError(f"No rate limits configured for operation: {operation}") from None
