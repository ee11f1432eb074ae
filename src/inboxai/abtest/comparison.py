"""Weighted comparison of two variants' running results."""

from __future__ import annotations

import logging

from inboxai.abtest.models import ABTestResults, ComparisonResult, SampleSize, VariantResults
from inboxai.utils.rounding import round_int

logger = logging.getLogger(__name__)

MIN_OPERATIONS = 30

_SUCCESS_WEIGHT = 0.5
_COST_WEIGHT = 0.3
_LATENCY_WEIGHT = 0.2

# (confidence lower bound, recommendation template)
_RECOMMENDATIONS: list[tuple[int, str]] = [
    (80, "Variant {winner} is clearly superior. Recommended for production use."),
    (
        50,
        "Variant {winner} shows moderate advantage. "
        "Consider adopting if benefits align with priorities.",
    ),
    (
        0,
        "Variant {winner} appears better but confidence is low. "
        "Continue testing for more conclusive results.",
    ),
]
TIE_RECOMMENDATION = (
    "Results are too close to call. Continue testing or choose based on other factors."
)


def _percent_diff(a: float, b: float) -> float:
    """Relative change from A to B in percent; 0 when A is 0."""
    if a == 0:
        return 0.0
    return (b - a) / a * 100


def _relative(value: float, worst: float) -> float:
    return value / worst if worst else 0.0


def _variant_score(results: VariantResults, max_cost: float, max_latency: float) -> float:
    return (
        results.success_rate * 100 * _SUCCESS_WEIGHT
        + (1 - _relative(results.average_cost, max_cost)) * 100 * _COST_WEIGHT
        + (1 - _relative(results.average_latency, max_latency)) * 100 * _LATENCY_WEIGHT
    )


def compare_variant_results(
    results: ABTestResults, min_operations: int = MIN_OPERATIONS
) -> ComparisonResult | None:
    """Declare a winner, or None while either arm has fewer than ``min_operations``."""
    a, b = results.variant_a, results.variant_b
    if a.total_operations < min_operations or b.total_operations < min_operations:
        logger.info(
            "Insufficient data: need %d operations per variant (A=%d, B=%d)",
            min_operations,
            a.total_operations,
            b.total_operations,
        )
        return None

    max_cost = max(a.average_cost, b.average_cost)
    max_latency = max(a.average_latency, b.average_latency)
    score_a = _variant_score(a, max_cost, max_latency)
    score_b = _variant_score(b, max_cost, max_latency)
    winner = "A" if score_a > score_b else "B" if score_b > score_a else "tie"

    total = a.total_operations + b.total_operations
    sample_confidence = min(total / 1000, 1) * 30
    difference_confidence = min(abs(score_a - score_b) / 10, 1) * 70
    confidence = round_int(sample_confidence + difference_confidence)

    if winner == "tie":
        recommendation = TIE_RECOMMENDATION
    else:
        recommendation = next(
            text.format(winner=winner) for bound, text in _RECOMMENDATIONS if confidence >= bound
        )

    return ComparisonResult(
        winner=winner,
        confidence=confidence,
        latency_diff=_percent_diff(a.average_latency, b.average_latency),
        cost_diff=_percent_diff(a.average_cost, b.average_cost),
        success_rate_diff=_percent_diff(a.success_rate, b.success_rate),
        variant_a_score=score_a,
        variant_b_score=score_b,
        recommendation=recommendation,
        sample_size=SampleSize(variant_a=a.total_operations, variant_b=b.total_operations),
    )
