"""Tests for engagement metrics computed from stored conversations."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from inboxai.errors.exceptions import MetricsUnavailableError
from inboxai.scoring.engagement import EngagementMetricsService
from inboxai.types import BurnoutRisk


async def _seed(store, clock, daily_limit=4):
    today = clock.now.replace(minute=0)
    await store.set("users/creator", {"settings": {"capacity": {"dailyLimit": daily_limit}}})
    await store.set("conversations/c1", {"participantIds": ["creator", "fan1"]})
    await store.set("conversations/c2", {"participantIds": ["creator", "fan2"]})
    await store.set("conversations/c3", {"participantIds": ["someone", "fan3"]})

    c1 = [
        ("a", "fan1", today.replace(hour=8), {}),
        ("b", "creator", today.replace(hour=9), {"isAIDraft": True, "wasEdited": True}),
        ("c", "fan1", today.replace(hour=9, minute=30), {}),
        ("d", "creator", today.replace(hour=10), {"isAIDraft": True, "wasEdited": False}),
    ]
    for mid, sender, ts, meta in c1:
        await store.set(
            f"conversations/c1/messages/{mid}",
            {"senderId": sender, "timestamp": ts, "metadata": meta},
        )
    await store.set(
        "conversations/c2/messages/e",
        {"senderId": "fan2", "timestamp": today.replace(hour=7), "metadata": {}},
    )


class TestRawMetrics:
    async def test_personal_response_rate(self, store, clock):
        await _seed(store, clock)
        service = EngagementMetricsService(store, clock)
        assert await service.calculate_personal_response_rate("creator") == 50

    async def test_no_drafts_is_100(self, store, clock):
        await store.set("conversations/c1", {"participantIds": ["creator"]})
        service = EngagementMetricsService(store, clock)
        assert await service.calculate_personal_response_rate("creator") == 100

    async def test_avg_response_time(self, store, clock):
        await _seed(store, clock)
        service = EngagementMetricsService(store, clock)
        assert await service.calculate_avg_response_time("creator") == 0.8

    async def test_conversation_depth(self, store, clock):
        await _seed(store, clock)
        service = EngagementMetricsService(store, clock)
        assert await service.calculate_conversation_depth("creator") == 50

    async def test_capacity_usage(self, store, clock):
        await _seed(store, clock)
        service = EngagementMetricsService(store, clock)
        assert await service.calculate_capacity_usage("creator") == 50

    async def test_capacity_usage_capped(self, store, clock):
        await _seed(store, clock, daily_limit=1)
        service = EngagementMetricsService(store, clock)
        assert await service.calculate_capacity_usage("creator") == 100

    async def test_days_at_max_capacity(self, store, clock):
        await _seed(store, clock, daily_limit=2)
        service = EngagementMetricsService(store, clock)
        assert await service.get_days_at_max_capacity("creator") == 1

    async def test_missing_user_raises(self, store, clock):
        service = EngagementMetricsService(store, clock)
        with pytest.raises(MetricsUnavailableError, match="User not found"):
            await service.calculate_capacity_usage("ghost")


class TestEngagementMetrics:
    async def test_full_daily_metrics(self, store, clock):
        await _seed(store, clock)
        service = EngagementMetricsService(store, clock)
        result = await service.calculate_engagement_metrics("creator")

        assert result.id == "daily-2025-03-14-creator"
        assert result.metrics.personal_response_rate == 50
        assert result.metrics.avg_response_time == 0.8
        assert result.metrics.quality_score == 61
        assert result.metrics.burnout_risk == BurnoutRisk.LOW

    async def test_no_conversations(self, store, clock):
        service = EngagementMetricsService(store, clock)
        assert await service.calculate_engagement_metrics("creator") is None

    async def test_store_failure_returns_none(self, clock):
        broken = AsyncMock()
        broken.query.side_effect = RuntimeError("backend down")
        service = EngagementMetricsService(broken, clock)
        assert await service.calculate_engagement_metrics("creator") is None

    async def test_save_then_load_latest(self, store, clock):
        await _seed(store, clock)
        service = EngagementMetricsService(store, clock)
        metrics = await service.calculate_engagement_metrics("creator")
        await service.save_engagement_metrics(metrics)

        # later data does not change the stored snapshot
        await store.set("conversations/c2/messages/f", {
            "senderId": "creator",
            "timestamp": clock.now - timedelta(minutes=1),
            "metadata": {},
        })
        latest = await service.get_latest_engagement_metrics("creator")
        assert latest == metrics
