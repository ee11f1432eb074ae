"""Applies categorization results to message and conversation documents."""

from __future__ import annotations

import logging
from typing import Any

from inboxai.client.categorization import CategorizationClient
from inboxai.errors.exceptions import StoreError
from inboxai.store import paths
from inboxai.store.base import DocumentStore
from inboxai.types import CategorizationResult, Message, MessageCategory
from inboxai.utils.clock import Clock, local_now

logger = logging.getLogger(__name__)

AI_VERSION = "gpt-4o-mini"
_NEGATIVE_SENTIMENT = -0.3


class MessageAnalysisService:
    def __init__(
        self,
        store: DocumentStore,
        client: CategorizationClient,
        clock: Clock = local_now,
    ) -> None:
        self._store = store
        self._client = client
        self._clock = clock

    async def categorize_new_message(self, message: Message) -> None:
        """Categorize a new message and record the result. Never raises.

        On any failure the message is marked ``general`` with confidence 0.
        """
        if not self._client.is_available():
            logger.info("AI categorization not available, skipping")
            return
        if message.metadata.category:
            logger.debug(
                "Message %s already categorized as %s", message.id, message.metadata.category
            )
            return

        try:
            result = await self._client.categorize_message(
                message.id, message.text, message.conversation_id, message.sender_id
            )
            if result.has_sentiment:
                await self.update_message_metadata(message, result)
                await self.update_conversation_sentiment_stats(message.conversation_id, result)
            else:
                logger.warning(
                    "Sentiment data unavailable for message %s, updating category only", message.id
                )
                await self._update_message_category(message, result.category, result.confidence)
            await self.update_conversation_category_stats(message.conversation_id, result.category)
            logger.info(
                "Analyzed message %s: category=%s, sentiment=%s",
                message.id,
                result.category,
                result.sentiment,
            )
        except Exception as e:
            logger.error("Message analysis failed for %s: %s", message.id, e)
            try:
                await self._update_message_category(message, MessageCategory.GENERAL, 0)
            except Exception as fallback_error:
                logger.error("Failed to set fallback category for %s: %s", message.id, fallback_error)

    async def update_message_metadata(self, message: Message, result: CategorizationResult) -> None:
        updates: dict[str, Any] = {
            "metadata.category": str(result.category),
            "metadata.categoryConfidence": result.confidence,
            "metadata.sentiment": str(result.sentiment),
            "metadata.sentimentScore": result.sentiment_score,
            "metadata.emotionalTone": result.emotional_tone,
            "metadata.aiProcessed": True,
            "metadata.aiProcessedAt": self._clock(),
            "metadata.aiVersion": AI_VERSION,
        }
        optional = {
            "metadata.opportunityScore": result.opportunity_score,
            "metadata.opportunityType": result.opportunity_type and str(result.opportunity_type),
            "metadata.opportunityIndicators": result.opportunity_indicators,
            "metadata.opportunityAnalysis": result.opportunity_analysis,
        }
        updates.update({k: v for k, v in optional.items() if v is not None})
        await self._write(message, updates)

    async def update_conversation_category_stats(self, conversation_id: str, category: str) -> None:
        """Best effort; failures are logged."""
        path = paths.conversation(conversation_id)
        try:
            conversation = await self._store.get(path) or {}
            stats = conversation.get("categoryStats") or {}
            counts = dict(stats.get("categoryCounts") or {})
            counts[category] = counts.get(category, 0) + 1
            await self._store.update(
                path,
                {
                    "categoryStats.lastCategory": str(category),
                    "categoryStats.categoryCounts": counts,
                    "categoryStats.hasUrgent": bool(stats.get("hasUrgent"))
                    or category == MessageCategory.URGENT,
                },
            )
        except Exception as e:
            logger.error("Failed to update category stats for %s: %s", conversation_id, e)

    async def update_conversation_sentiment_stats(
        self, conversation_id: str, result: CategorizationResult
    ) -> None:
        """Best effort; failures are logged."""
        path = paths.conversation(conversation_id)
        try:
            conversation = await self._store.get(path) or {}
            negative = (conversation.get("sentimentStats") or {}).get("negativeCount", 0)
            score = result.sentiment_score or 0.0
            if score < _NEGATIVE_SENTIMENT:
                negative += 1
            updates: dict[str, Any] = {
                "sentimentStats.lastSentiment": str(result.sentiment),
                "sentimentStats.lastSentimentScore": score,
                "sentimentStats.negativeCount": negative,
                "sentimentStats.hasCrisis": result.crisis_detected,
            }
            if result.crisis_detected:
                updates["sentimentStats.lastCrisisAt"] = self._clock()
            await self._store.update(path, updates)
        except Exception as e:
            logger.error("Failed to update sentiment stats for %s: %s", conversation_id, e)

    async def _update_message_category(
        self, message: Message, category: str, confidence: float
    ) -> None:
        await self._write(
            message,
            {
                "metadata.category": str(category),
                "metadata.categoryConfidence": confidence,
                "metadata.aiProcessed": True,
            },
        )

    async def _write(self, message: Message, updates: dict[str, Any]) -> None:
        try:
            await self._store.update(paths.message(message.conversation_id, message.id), updates)
        except Exception as e:
            raise StoreError(f"Failed to update message {message.id}: {e}") from e
