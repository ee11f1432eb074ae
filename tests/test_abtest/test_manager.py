"""Tests for the A/B test lifecycle."""

from unittest.mock import AsyncMock

import pytest

from inboxai.abtest.manager import ABTestManager
from inboxai.types import Variant
from inboxai.utils.clock import epoch_ms

VARIANT_A = {"model": "gpt-4o-mini", "parameters": {"temperature": 0.3}}
VARIANT_B = {"model": "gpt-4-turbo"}


async def _create(manager, **kwargs):
    return await manager.create_test(
        "Categorization model", "categorization", VARIANT_A, VARIANT_B, **kwargs
    )


class TestLifecycle:
    async def test_create_stores_document(self, store, clock):
        manager = ABTestManager(store, clock)
        test_id = await _create(manager)

        assert test_id == f"test_categorization_{epoch_ms(clock.now)}"
        doc = await store.get(f"ai_ab_tests/{test_id}")
        assert doc["variantA"] == VARIANT_A
        assert doc["variantB"] == {"model": "gpt-4-turbo", "parameters": {}}
        assert doc["splitRatio"] == 0.5
        assert doc["active"] is True
        assert doc["startDate"] == clock.now

    async def test_active_tests_by_operation(self, store, clock):
        manager = ABTestManager(store, clock)
        first = await _create(manager)
        clock.advance(seconds=1)
        await manager.create_test("Sentiment", "sentiment", VARIANT_A, VARIANT_B)
        clock.advance(seconds=1)
        stale = await _create(manager)
        await manager.deactivate_test(stale)

        tests = await manager.get_active_tests("categorization")
        assert [t.id for t in tests] == [first]
        assert len(await manager.get_active_tests()) == 2
        assert (await store.get(f"ai_ab_tests/{stale}"))["endDate"] == clock.now


class TestAssignVariant:
    async def test_stable_for_user(self, store, clock):
        manager = ABTestManager(store, clock)
        test_id = await _create(manager)
        first = await manager.assign_variant(test_id, "u1")
        assert first in (Variant.A, Variant.B)
        assert await manager.assign_variant(test_id, "u1") == first

    async def test_missing_test(self, store, clock):
        assert await ABTestManager(store, clock).assign_variant("nope", "u1") is None

    async def test_inactive_test(self, store, clock):
        manager = ABTestManager(store, clock)
        test_id = await _create(manager, active=False)
        assert await manager.assign_variant(test_id, "u1") is None

    async def test_store_failure_falls_back_to_control(self, clock):
        broken = AsyncMock()
        broken.get.side_effect = RuntimeError("backend down")
        assert await ABTestManager(broken, clock).assign_variant("t", "u1") == Variant.A


class TestTrackPerformance:
    async def test_running_averages(self, store, clock):
        manager = ABTestManager(store, clock)
        test_id = await _create(manager)
        await manager.track_performance(test_id, "A", latency=100, cost_cents=0.2, success=True)
        await manager.track_performance(test_id, "A", latency=300, cost_cents=0.4, success=False)
        await manager.track_performance(test_id, Variant.B, latency=50, cost_cents=1.0, success=True)

        results = (await store.get(f"ai_ab_tests/{test_id}"))["results"]
        assert results["variantA"]["totalOperations"] == 2
        assert results["variantA"]["averageLatency"] == 200
        assert results["variantA"]["averageCost"] == pytest.approx(0.3)
        assert results["variantA"]["successRate"] == 0.5
        assert results["variantB"]["totalOperations"] == 1

    async def test_satisfaction_rating(self, store, clock):
        manager = ABTestManager(store, clock)
        test_id = await _create(manager)
        await manager.track_performance(test_id, "B", 10, 0.1, True, satisfaction=4)
        await manager.track_performance(test_id, "B", 10, 0.1, True, satisfaction=2)

        results = (await store.get(f"ai_ab_tests/{test_id}"))["results"]
        assert results["variantB"]["userSatisfactionRating"] == 3

    async def test_missing_test_is_ignored(self, store, clock):
        await ABTestManager(store, clock).track_performance("nope", "A", 10, 0.1, True)
        assert await store.get("ai_ab_tests/nope") is None


class TestCompareResults:
    async def test_needs_enough_operations(self, store, clock):
        manager = ABTestManager(store, clock)
        test_id = await _create(manager)
        for _ in range(10):
            await manager.track_performance(test_id, "A", 100, 0.2, True)
            await manager.track_performance(test_id, "B", 100, 0.2, True)
        assert await manager.compare_results(test_id) is None

    async def test_no_results_yet(self, store, clock):
        manager = ABTestManager(store, clock)
        assert await manager.compare_results(await _create(manager)) is None

    async def test_winner(self, store, clock):
        manager = ABTestManager(store, clock)
        test_id = await _create(manager)
        for _ in range(30):
            await manager.track_performance(test_id, "A", 200, 0.5, True)
            await manager.track_performance(test_id, "B", 100, 0.25, True)
        comparison = await manager.compare_results(test_id)
        assert comparison.winner == "B"
        assert comparison.sample_size.variant_b == 30
