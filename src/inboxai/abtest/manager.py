"""A/B test lifecycle against the ``ai_ab_tests`` collection."""

from __future__ import annotations

import logging
from typing import Any

from inboxai.abtest.assignment import pick_variant
from inboxai.abtest.comparison import compare_variant_results
from inboxai.abtest.models import ABTestConfig, ABTestResults, ComparisonResult, VariantConfig
from inboxai.store import paths
from inboxai.store.base import DocumentStore
from inboxai.types import Variant
from inboxai.utils.clock import Clock, epoch_ms, local_now

logger = logging.getLogger(__name__)


class ABTestManager:
    def __init__(self, store: DocumentStore, clock: Clock = local_now) -> None:
        self._store = store
        self._clock = clock

    async def assign_variant(self, test_id: str, user_id: str) -> Variant | None:
        """Stable variant for the user; None for a missing or inactive test.

        A failed lookup falls back to the control arm A.
        """
        try:
            doc = await self._store.get(self._path(test_id))
        except Exception as e:
            logger.error("Error assigning variant for test %s: %s", test_id, e)
            return Variant.A
        if doc is None:
            logger.warning("A/B test not found: %s", test_id)
            return None
        if not doc.get("active"):
            logger.warning("A/B test not active: %s", test_id)
            return None
        return pick_variant(test_id, user_id, doc.get("splitRatio"))

    async def track_performance(
        self,
        test_id: str,
        variant: Variant | str,
        latency: float,
        cost_cents: float,
        success: bool,
        satisfaction: float | None = None,
    ) -> None:
        """Fold one observation into the variant's running averages. Never raises."""
        try:
            config = await self._load(test_id)
            if config is None:
                logger.error("A/B test not found: %s", test_id)
                return

            results = config.results or ABTestResults()
            arm = results.variant_a if Variant(variant) == Variant.A else results.variant_b
            n = arm.total_operations
            arm.average_latency = (arm.average_latency * n + latency) / (n + 1)
            arm.average_cost = (arm.average_cost * n + cost_cents) / (n + 1)
            arm.success_rate = (arm.success_rate * n + (1 if success else 0)) / (n + 1)
            if satisfaction is not None and satisfaction > 0:
                # assumes every prior operation carried a rating
                previous = arm.user_satisfaction_rating or 0
                arm.user_satisfaction_rating = (previous * n + satisfaction) / (n + 1)
            arm.total_operations = n + 1

            await self._store.set(
                self._path(test_id),
                {"results": results.to_document(), "updatedAt": self._clock()},
                merge=True,
            )
            logger.debug("Tracked variant %s performance for test %s", variant, test_id)
        except Exception as e:
            logger.error("Error tracking variant performance for %s: %s", test_id, e)

    async def compare_results(self, test_id: str) -> ComparisonResult | None:
        try:
            config = await self._load(test_id)
        except Exception as e:
            logger.error("Error comparing variant results for %s: %s", test_id, e)
            return None
        if config is None:
            logger.error("A/B test not found: %s", test_id)
            return None
        if config.results is None:
            logger.warning("No results yet for test %s", test_id)
            return None
        return compare_variant_results(config.results)

    async def create_test(
        self,
        name: str,
        operation: str,
        variant_a: VariantConfig | dict[str, Any],
        variant_b: VariantConfig | dict[str, Any],
        split_ratio: float = 0.5,
        active: bool = True,
    ) -> str:
        now = self._clock()
        test_id = f"test_{operation}_{epoch_ms(now)}"
        config = ABTestConfig(
            id=test_id,
            name=name,
            operation=operation,
            variant_a=VariantConfig.model_validate(variant_a),
            variant_b=VariantConfig.model_validate(variant_b),
            split_ratio=split_ratio,
            active=active,
            start_date=now,
        )
        await self._store.set(self._path(test_id), config.to_document())
        logger.info("Created A/B test: %s", test_id)
        return test_id

    async def deactivate_test(self, test_id: str) -> None:
        await self._store.set(
            self._path(test_id), {"active": False, "endDate": self._clock()}, merge=True
        )
        logger.info("Deactivated A/B test: %s", test_id)

    async def get_active_tests(self, operation: str | None = None) -> list[ABTestConfig]:
        filters: list[tuple[str, str, Any]] = [("active", "==", True)]
        if operation:
            filters.append(("operation", "==", operation))
        try:
            rows = await self._store.query(paths.AB_TESTS, filters=filters)
        except Exception as e:
            logger.error("Error getting active tests: %s", e)
            return []
        return [ABTestConfig.model_validate(doc) for _, doc in rows]

    async def _load(self, test_id: str) -> ABTestConfig | None:
        doc = await self._store.get(self._path(test_id))
        return ABTestConfig.model_validate(doc) if doc is not None else None

    @staticmethod
    def _path(test_id: str) -> str:
        return f"{paths.AB_TESTS}/{test_id}"
