"""Scoring: message priority, engagement health and opportunity value."""

from inboxai.scoring.engagement import EngagementMetrics, EngagementMetricsService
from inboxai.scoring.health import (
    HealthScoreComponents,
    RawEngagementMetrics,
    assess_burnout_risk,
    calculate_health_score,
    normalize_capacity_usage,
    normalize_response_time,
)
from inboxai.scoring.opportunity import (
    OpportunityScore,
    OpportunityScorer,
    parse_opportunity_response,
    rule_based_opportunity_score,
)
from inboxai.scoring.relationship import (
    DEFAULT_WEIGHTS,
    RelationshipContext,
    RelationshipScore,
    ScoreBreakdown,
    ScoringWeights,
    assign_priority_tier,
    calculate_relationship_context,
    calculate_relationship_score,
    score_messages,
)

__all__ = [
    "DEFAULT_WEIGHTS",
    "EngagementMetrics",
    "EngagementMetricsService",
    "HealthScoreComponents",
    "OpportunityScore",
    "OpportunityScorer",
    "RawEngagementMetrics",
    "RelationshipContext",
    "RelationshipScore",
    "ScoreBreakdown",
    "ScoringWeights",
    "assess_burnout_risk",
    "assign_priority_tier",
    "calculate_health_score",
    "calculate_relationship_context",
    "calculate_relationship_score",
    "normalize_capacity_usage",
    "normalize_response_time",
    "parse_opportunity_response",
    "rule_based_opportunity_score",
    "score_messages",
]
