"""Daily reply capacity helpers."""

from __future__ import annotations

from pydantic import BaseModel

from inboxai.utils.rounding import round_int

MIN_CAPACITY = 5
MAX_CAPACITY = 20
DEFAULT_CAPACITY = 10
_SUGGESTED_SHARE = 0.18
_MINUTES_PER_MESSAGE = 2


class MessageDistribution(BaseModel):
    deep: int
    faq: int
    archived: int


def suggest_capacity(avg_daily_messages: float) -> int:
    suggested = round_int(avg_daily_messages * _SUGGESTED_SHARE)
    return max(MIN_CAPACITY, min(MAX_CAPACITY, suggested))


def calculate_time_commitment(capacity: int) -> int:
    """Minutes per day needed to answer ``capacity`` messages personally."""
    return capacity * _MINUTES_PER_MESSAGE


def preview_distribution(
    capacity: int, avg_daily_messages: int, avg_faq_rate: float = 0.15
) -> MessageDistribution:
    faq = round_int(avg_daily_messages * avg_faq_rate)
    return MessageDistribution(
        deep=capacity,
        faq=faq,
        archived=max(0, avg_daily_messages - capacity - faq),
    )
