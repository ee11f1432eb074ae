"""A/B testing: stable variant assignment, running results and comparison."""

from inboxai.abtest.assignment import hash_to_unit, pick_variant
from inboxai.abtest.comparison import MIN_OPERATIONS, compare_variant_results
from inboxai.abtest.manager import ABTestManager
from inboxai.abtest.models import (
    ABTestConfig,
    ABTestResults,
    ComparisonResult,
    VariantConfig,
    VariantResults,
)

__all__ = [
    "ABTestConfig",
    "ABTestManager",
    "ABTestResults",
    "ComparisonResult",
    "MIN_OPERATIONS",
    "VariantConfig",
    "VariantResults",
    "compare_variant_results",
    "hash_to_unit",
    "pick_variant",
]
