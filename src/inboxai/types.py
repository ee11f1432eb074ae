"""Shared Pydantic models for inboxai."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

# ── Enums ──


class Operation(StrEnum):
    CATEGORIZATION = "categorization"
    SENTIMENT = "sentiment"
    FAQ_DETECTION = "faq_detection"
    VOICE_MATCHING = "voice_matching"
    OPPORTUNITY_SCORING = "opportunity_scoring"
    DAILY_AGENT = "daily_agent"


class MessageCategory(StrEnum):
    FAN_ENGAGEMENT = "fan_engagement"
    BUSINESS_OPPORTUNITY = "business_opportunity"
    SPAM = "spam"
    URGENT = "urgent"
    GENERAL = "general"


class Sentiment(StrEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    MIXED = "mixed"


class OpportunityType(StrEnum):
    SPONSORSHIP = "sponsorship"
    COLLABORATION = "collaboration"
    PARTNERSHIP = "partnership"
    SALE = "sale"


class PriorityTier(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BurnoutRisk(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Variant(StrEnum):
    A = "A"
    B = "B"


# ── Runtime models ──


class TokenUsage(BaseModel):
    prompt: int = 0
    completion: int = 0
    total: int = 0


class MessageMetadata(BaseModel):
    """AI annotations attached to a message document."""

    category: str | None = None
    category_confidence: float | None = Field(default=None, alias="categoryConfidence")
    sentiment: Sentiment | None = None
    sentiment_score: float | None = Field(default=None, alias="sentimentScore")
    opportunity_score: float | None = Field(default=None, alias="opportunityScore")
    is_ai_draft: bool = Field(default=False, alias="isAIDraft")
    was_edited: bool = Field(default=False, alias="wasEdited")
    conversation_is_vip: bool = Field(default=False, alias="conversationIsVIP")

    model_config = {"populate_by_name": True}


class Message(BaseModel):
    id: str
    conversation_id: str = Field(alias="conversationId")
    sender_id: str = Field(alias="senderId")
    text: str = ""
    timestamp: datetime | None = None
    metadata: MessageMetadata = Field(default_factory=MessageMetadata)

    model_config = {"populate_by_name": True}


class CategorizationResult(BaseModel):
    """Response body of the categorization endpoint."""

    success: bool = True
    category: MessageCategory = MessageCategory.GENERAL
    confidence: float = 0.0
    sentiment: Sentiment | None = None
    sentiment_score: float | None = Field(default=None, alias="sentimentScore")
    emotional_tone: list[str] | None = Field(default=None, alias="emotionalTone")
    crisis_detected: bool = Field(default=False, alias="crisisDetected")
    opportunity_score: float | None = Field(default=None, alias="opportunityScore")
    opportunity_type: OpportunityType | None = Field(default=None, alias="opportunityType")
    opportunity_indicators: list[str] | None = Field(
        default=None, alias="opportunityIndicators"
    )
    opportunity_analysis: str | None = Field(default=None, alias="opportunityAnalysis")
    latency: float = 0.0
    model: str = "gpt-4o-mini"
    error: str | None = None
    cached: bool = False

    model_config = {"populate_by_name": True}

    @property
    def has_sentiment(self) -> bool:
        return (
            self.sentiment is not None
            and self.sentiment_score is not None
            and self.emotional_tone is not None
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize with the wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True, exclude={"cached"})


class RetryConfig(BaseModel):
    """Bounded retry policy for outbound AI calls. Delays are in seconds."""

    max_attempts: int = Field(default=3, ge=1)
    initial_delay: float = 0.5
    max_delay: float = 5.0
