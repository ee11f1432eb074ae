"""Operation latency, success and cache-hit tracking."""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field

from inboxai.concurrency.background import BackgroundTasks
from inboxai.errors.exceptions import MetricsUnavailableError
from inboxai.metrics.cost import CostTracker
from inboxai.store import paths
from inboxai.store.base import DocumentStore
from inboxai.types import TokenUsage
from inboxai.utils.clock import Clock, local_now

logger = logging.getLogger(__name__)


class OperationOutcome(BaseModel):
    """What the caller knows about a finished operation."""

    user_id: str
    operation: str
    success: bool
    error_type: str | None = None
    model_used: str = ""
    tokens_used: TokenUsage = Field(default_factory=TokenUsage)
    cost_cents: float = 0.0
    cache_hit: bool = False
    cache_key: str | None = None


class PerformanceMetric(BaseModel):
    """One stored record under ``users/{uid}/ai_performance_metrics``."""

    id: str | None = None
    user_id: str = Field(alias="userId")
    operation: str
    latency: float
    success: bool
    error_type: str | None = Field(default=None, alias="errorType")
    model_used: str = Field(default="", alias="modelUsed")
    tokens_used: TokenUsage = Field(default_factory=TokenUsage, alias="tokensUsed")
    cost_cents: float = Field(default=0.0, alias="costCents")
    cache_hit: bool = Field(default=False, alias="cacheHit")
    cache_key: str | None = Field(default=None, alias="cacheKey")
    timestamp: datetime

    model_config = {"populate_by_name": True}


class OperationPerformance(BaseModel):
    operation: str
    average_latency: float
    p50_latency: float
    p95_latency: float
    p99_latency: float
    success_rate: float
    cache_hit_rate: float
    total_operations: int
    period_start: datetime
    period_end: datetime


class PerformanceTracker:
    """Correlates operation start and end, then records the outcome.

    The start-time map belongs to this instance; an id is dropped once its
    end has been tracked.
    """

    def __init__(
        self,
        store: DocumentStore,
        background: BackgroundTasks,
        cost_tracker: CostTracker | None = None,
        clock: Clock = local_now,
    ) -> None:
        self._store = store
        self._background = background
        self._cost_tracker = cost_tracker
        self._clock = clock
        self._start_times: dict[str, float] = {}

    @property
    def in_flight(self) -> int:
        return len(self._start_times)

    def track_start(self, operation_id: str, operation: str) -> str:
        self._start_times[operation_id] = time.monotonic()
        logger.debug("Tracking %s operation %s", operation, operation_id)
        return operation_id

    def track_end(self, operation_id: str, outcome: OperationOutcome) -> None:
        """Queue the metric write (and cost rollups on success). Never raises."""
        started = self._start_times.pop(operation_id, None)
        latency = (time.monotonic() - started) * 1000 if started is not None else 0.0

        now = self._clock()
        doc: dict[str, Any] = {
            "userId": outcome.user_id,
            "operation": outcome.operation,
            "latency": latency,
            "timestamp": now,
            "success": outcome.success,
            "modelUsed": outcome.model_used,
            "tokensUsed": outcome.tokens_used.model_dump(),
            "costCents": outcome.cost_cents,
            "cacheHit": outcome.cache_hit,
            "createdAt": now,
        }
        if outcome.error_type is not None:
            doc["errorType"] = outcome.error_type
        if outcome.cache_key is not None:
            doc["cacheKey"] = outcome.cache_key

        self._background.submit(
            self._store.add(paths.performance_metrics(outcome.user_id), doc),
            label=f"performance-metric:{operation_id}",
        )

        tokens = outcome.tokens_used
        if self._cost_tracker is not None and outcome.success and tokens.total > 0:
            for period in ("daily", "monthly"):
                self._background.submit(
                    self._cost_tracker.track_model_usage(
                        outcome.user_id,
                        outcome.operation,
                        outcome.model_used,
                        tokens.prompt,
                        tokens.completion,
                        period,
                    ),
                    label=f"cost-{period}:{operation_id}",
                )

    async def get_operation_metrics(
        self,
        user_id: str,
        operation: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[PerformanceMetric]:
        """Metrics for one operation, newest first. Defaults to the last 24 hours."""
        end = end or self._clock()
        start = start or end - timedelta(hours=24)
        try:
            rows = await self._store.query(
                paths.performance_metrics(user_id),
                filters=[
                    ("operation", "==", operation),
                    ("timestamp", ">=", start),
                    ("timestamp", "<=", end),
                ],
                order_by="timestamp",
                descending=True,
            )
        except Exception as e:
            logger.error("Failed to load performance metrics for %s: %s", user_id, e)
            raise MetricsUnavailableError(
                "Unable to load performance metrics. Please try again."
            ) from e
        return [PerformanceMetric.model_validate({"id": doc_id, **doc}) for doc_id, doc in rows]


def _percentile(sorted_values: list[float], q: float) -> float:
    return sorted_values[min(math.floor(len(sorted_values) * q), len(sorted_values) - 1)]


def calculate_aggregated_performance(
    metrics: list[PerformanceMetric],
) -> OperationPerformance | None:
    """Summarize metrics ordered newest first. None for an empty list."""
    if not metrics:
        return None

    latencies = sorted(m.latency for m in metrics)
    total = len(metrics)
    return OperationPerformance(
        operation=metrics[0].operation,
        average_latency=sum(latencies) / total,
        p50_latency=_percentile(latencies, 0.5),
        p95_latency=_percentile(latencies, 0.95),
        p99_latency=_percentile(latencies, 0.99),
        success_rate=sum(1 for m in metrics if m.success) / total,
        cache_hit_rate=sum(1 for m in metrics if m.cache_hit) / total,
        total_operations=total,
        period_start=metrics[-1].timestamp,
        period_end=metrics[0].timestamp,
    )


def calculate_average_latency(metrics: list[PerformanceMetric]) -> float:
    if not metrics:
        return 0.0
    return sum(m.latency for m in metrics) / len(metrics)
