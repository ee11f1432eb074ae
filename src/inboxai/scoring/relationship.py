"""Relationship-aware message priority scoring."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from inboxai.store import paths
from inboxai.store.base import DocumentStore
from inboxai.types import Message, PriorityTier
from inboxai.utils.clock import local_now

logger = logging.getLogger(__name__)

_MAX_SCORE = 100
_CRISIS_SENTIMENT = -0.7
_HIGH_OPPORTUNITY = 80
_ACTIVE_CONVERSATION_MESSAGES = 10
_VIP_MIN_AGE_DAYS = 30
_RECENT_DAYS = 7

_BUSINESS_CATEGORIES = {"business", "business_opportunity"}
_URGENT_CATEGORIES = {"urgent"}

_THRESHOLDS: list[tuple[float, PriorityTier]] = [
    (70, PriorityTier.HIGH),
    (40, PriorityTier.MEDIUM),
]


class ScoringWeights(BaseModel):
    """Points added per signal. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    business_opportunity: float = 50
    urgent: float = 40
    crisis_sentiment: float = 100
    vip_relationship: float = 30
    message_count_bonus: float = 30
    recent_interaction: float = 15


DEFAULT_WEIGHTS = ScoringWeights()


class ScoreBreakdown(BaseModel):
    category: float = 0
    sentiment: float = 0
    opportunity: float = 0
    relationship: float = 0
    total: float = 0


class RelationshipContext(BaseModel):
    conversation_age_days: float = 0.0
    last_interaction: datetime
    message_count: int = 0
    is_vip: bool = False


class RelationshipScore(BaseModel):
    score: float
    breakdown: ScoreBreakdown = Field(default_factory=ScoreBreakdown)
    priority: PriorityTier


def assign_priority_tier(score: float) -> PriorityTier:
    for threshold, tier in _THRESHOLDS:
        if score >= threshold:
            return tier
    return PriorityTier.LOW


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 86400


def calculate_relationship_score(
    message: Message,
    context: RelationshipContext,
    weights: ScoringWeights | None = None,
    now: datetime | None = None,
) -> RelationshipScore:
    """Additive score over category, sentiment, opportunity and relationship, capped at 100.

    A business category and a high opportunity score both add
    ``business_opportunity``; the same signal can count twice.
    """
    weights = weights or DEFAULT_WEIGHTS
    now = now or local_now()
    meta = message.metadata
    breakdown = ScoreBreakdown()

    category = (meta.category or "").lower()
    if category in _BUSINESS_CATEGORIES:
        breakdown.category += weights.business_opportunity
    if category in _URGENT_CATEGORIES:
        breakdown.category += weights.urgent

    if meta.sentiment_score is not None and meta.sentiment_score < _CRISIS_SENTIMENT:
        breakdown.sentiment += weights.crisis_sentiment

    if meta.opportunity_score is not None and meta.opportunity_score > _HIGH_OPPORTUNITY:
        breakdown.opportunity += weights.business_opportunity

    if context.is_vip:
        breakdown.relationship += weights.vip_relationship
    if context.message_count > _ACTIVE_CONVERSATION_MESSAGES:
        breakdown.relationship += weights.message_count_bonus
    if _days_between(context.last_interaction, now) < _RECENT_DAYS:
        breakdown.relationship += weights.recent_interaction

    breakdown.total = min(
        _MAX_SCORE,
        breakdown.category + breakdown.sentiment + breakdown.opportunity + breakdown.relationship,
    )
    return RelationshipScore(
        score=breakdown.total,
        breakdown=breakdown,
        priority=assign_priority_tier(breakdown.total),
    )


async def calculate_relationship_context(
    store: DocumentStore,
    conversation_id: str,
    now: datetime | None = None,
) -> RelationshipContext:
    """Context for one conversation. Missing data or store errors yield safe defaults."""
    now = now or local_now()
    try:
        conversation = await store.get(paths.conversation(conversation_id))
        if conversation is None:
            raise LookupError(f"Conversation {conversation_id} not found")
    except Exception as e:
        logger.error("Error calculating relationship context for %s: %s", conversation_id, e)
        return RelationshipContext(last_interaction=now)

    created_at = conversation.get("createdAt")
    age_days = _days_between(created_at, now) if created_at else 0.0
    message_count = int(conversation.get("messageCount") or 0)
    return RelationshipContext(
        conversation_age_days=age_days,
        last_interaction=conversation.get("lastMessageTimestamp") or created_at or now,
        message_count=message_count,
        is_vip=message_count > _ACTIVE_CONVERSATION_MESSAGES and age_days > _VIP_MIN_AGE_DAYS,
    )


async def score_messages(
    store: DocumentStore,
    messages: list[Message],
    weights: ScoringWeights | None = None,
    now: datetime | None = None,
) -> dict[str, RelationshipScore]:
    """Score a batch, loading each conversation's context once."""
    now = now or local_now()
    conversation_ids = list(dict.fromkeys(m.conversation_id for m in messages))
    contexts = await asyncio.gather(
        *(calculate_relationship_context(store, cid, now) for cid in conversation_ids)
    )
    by_conversation = dict(zip(conversation_ids, contexts))

    scores = {
        m.id: calculate_relationship_score(m, by_conversation[m.conversation_id], weights, now)
        for m in messages
    }
    logger.info(
        "Relationship scoring completed: %d messages across %d conversations",
        len(messages),
        len(conversation_ids),
    )
    return scores


def rank_messages(
    messages: list[Message], scores: dict[str, RelationshipScore]
) -> list[tuple[Message, RelationshipScore]]:
    """Scored messages ordered by descending score; unscored messages are dropped."""
    ranked = [(m, scores[m.id]) for m in messages if m.id in scores]
    ranked.sort(key=lambda pair: pair[1].score, reverse=True)
    return ranked
