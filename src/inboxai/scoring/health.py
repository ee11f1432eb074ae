"""Engagement health score and burnout risk."""

from __future__ import annotations

from pydantic import BaseModel

from inboxai.types import BurnoutRisk
from inboxai.utils.rounding import round_int

_WEIGHTS = {
    "personal_response_rate": 0.35,
    "avg_response_time": 0.25,
    "conversation_depth": 0.20,
    "capacity_usage": 0.20,
}

# (upper bound in hours, exclusive; normalized score)
_RESPONSE_TIME_BUCKETS: list[tuple[float, int]] = [
    (12, 100),
    (24, 80),
    (48, 40),
]

_BURNOUT_TIERS: list[tuple[int, BurnoutRisk]] = [
    (5, BurnoutRisk.HIGH),
    (3, BurnoutRisk.MEDIUM),
]


class HealthScoreComponents(BaseModel):
    """Normalized 0-100 inputs to the health score."""

    personal_response_rate: float
    avg_response_time: float
    conversation_depth: float
    capacity_usage: float


class RawEngagementMetrics(BaseModel):
    personal_response_rate: float
    avg_response_time: float  # hours
    conversation_depth: float
    capacity_usage: float


def calculate_health_score(components: HealthScoreComponents) -> int:
    score = sum(getattr(components, name) * weight for name, weight in _WEIGHTS.items())
    return round_int(score)


def normalize_response_time(hours: float) -> int:
    for upper, value in _RESPONSE_TIME_BUCKETS:
        if hours < upper:
            return value
    return 0


def normalize_capacity_usage(usage: float) -> int:
    """70-80% is ideal; both idling and running flat out score lower."""
    if 70 <= usage <= 80:
        return 100
    if 60 <= usage <= 90:
        return 80
    if usage >= 90:
        return 60
    return 40


def to_components(metrics: RawEngagementMetrics) -> HealthScoreComponents:
    return HealthScoreComponents(
        personal_response_rate=metrics.personal_response_rate,
        avg_response_time=normalize_response_time(metrics.avg_response_time),
        conversation_depth=metrics.conversation_depth,
        capacity_usage=normalize_capacity_usage(metrics.capacity_usage),
    )


def burnout_points(metrics: RawEngagementMetrics, days_at_max_capacity: int = 0) -> int:
    points = 0
    if metrics.capacity_usage == 100 and days_at_max_capacity >= 7:
        points += 3
    if metrics.personal_response_rate < 60:
        points += 2
    if metrics.avg_response_time > 48:
        points += 2
    if metrics.conversation_depth < 25:
        points += 1
    return points


def assess_burnout_risk(
    metrics: RawEngagementMetrics, days_at_max_capacity: int = 0
) -> BurnoutRisk:
    points = burnout_points(metrics, days_at_max_capacity)
    for threshold, tier in _BURNOUT_TIERS:
        if points >= threshold:
            return tier
    return BurnoutRisk.LOW
