"""Metrics: operation performance records and token cost rollups."""

from inboxai.metrics.cost import (
    MODEL_PRICING,
    BudgetStatus,
    CostTracker,
    calculate_operation_cost,
    period_id,
)
from inboxai.metrics.performance import (
    OperationOutcome,
    OperationPerformance,
    PerformanceMetric,
    PerformanceTracker,
    calculate_aggregated_performance,
    calculate_average_latency,
)

__all__ = [
    "MODEL_PRICING",
    "BudgetStatus",
    "CostTracker",
    "OperationOutcome",
    "OperationPerformance",
    "PerformanceMetric",
    "PerformanceTracker",
    "calculate_aggregated_performance",
    "calculate_average_latency",
    "calculate_operation_cost",
    "period_id",
]
