"""Engagement metrics computed from a creator's conversations."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Literal

from pydantic import BaseModel

from inboxai.errors.exceptions import MetricsUnavailableError
from inboxai.scoring.health import (
    RawEngagementMetrics,
    assess_burnout_risk,
    calculate_health_score,
    to_components,
)
from inboxai.store import paths
from inboxai.store.base import Document, DocumentStore
from inboxai.types import BurnoutRisk
from inboxai.utils.clock import Clock, local_now
from inboxai.utils.rounding import round_half_up, round_int

logger = logging.getLogger(__name__)

Period = Literal["daily", "weekly", "monthly"]

_PERIOD_DAYS = {"daily": 1, "weekly": 7, "monthly": 30}
DEFAULT_DAILY_LIMIT = 10
_MAX_CAPACITY_LOOKBACK_DAYS = 14
_MULTI_TURN_MESSAGES = 3


class EngagementSummary(BaseModel):
    quality_score: int
    personal_response_rate: float
    avg_response_time: float
    conversation_depth: float
    capacity_usage: float
    burnout_risk: BurnoutRisk


class EngagementMetrics(BaseModel):
    id: str
    user_id: str
    period: Period
    start_date: datetime
    end_date: datetime
    metrics: EngagementSummary
    created_at: datetime


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


class EngagementMetricsService:
    """Reads conversation and message documents to compute raw engagement metrics.

    Each calculation raises MetricsUnavailableError when the store fails;
    ``calculate_engagement_metrics`` turns any failure into None.
    """

    def __init__(self, store: DocumentStore, clock: Clock = local_now) -> None:
        self._store = store
        self._clock = clock

    async def calculate_personal_response_rate(self, user_id: str, days: int = 30) -> float:
        """Share of AI drafts the creator edited before sending; 100 with no drafts."""
        end = self._clock()
        messages = await self._creator_messages(user_id, end - timedelta(days=days), end)
        drafts = [m for m in messages if (m.get("metadata") or {}).get("isAIDraft") is True]
        if not drafts:
            return 100
        edited = sum(1 for m in drafts if m["metadata"].get("wasEdited") is True)
        return round_int(edited / len(drafts) * 100)

    async def calculate_avg_response_time(self, user_id: str, days: int = 30) -> float:
        """Mean hours from a fan message to the creator's next reply, 1 decimal."""
        end = self._clock()
        start = end - timedelta(days=days)
        gaps: list[float] = []
        for conversation_id in await self._conversation_ids(user_id):
            messages = await self._messages(conversation_id, start, end)
            for current, following in zip(messages, messages[1:]):
                if current.get("senderId") != user_id and following.get("senderId") == user_id:
                    delta = following["timestamp"] - current["timestamp"]
                    gaps.append(delta.total_seconds() / 3600)
        if not gaps:
            return 0
        return round_half_up(sum(gaps) / len(gaps), 1)

    async def calculate_conversation_depth(self, user_id: str, days: int = 30) -> float:
        """Percentage of active conversations with at least three messages."""
        end = self._clock()
        start = end - timedelta(days=days)
        counts = [
            len(await self._messages(cid, start, end))
            for cid in await self._conversation_ids(user_id)
        ]
        active = [c for c in counts if c > 0]
        if not active:
            return 0
        multi_turn = sum(1 for c in active if c >= _MULTI_TURN_MESSAGES)
        return round_int(multi_turn / len(active) * 100)

    async def calculate_capacity_usage(
        self, user_id: str, period: Literal["daily", "weekly"] = "daily"
    ) -> float:
        """Creator messages sent against the configured daily limit, capped at 100."""
        daily_limit = await self._daily_limit(user_id)
        now = self._clock()
        if period == "daily":
            start, end, limit = _start_of_day(now), _end_of_day(now), daily_limit
        else:
            start, end, limit = now - timedelta(days=7), now, daily_limit * 7
        sent = len(await self._creator_messages(user_id, start, end))
        return min(round_int(sent / limit * 100), 100)

    async def get_days_at_max_capacity(self, user_id: str) -> int:
        """Consecutive days, counting back from today, on which the daily limit was met."""
        daily_limit = await self._daily_limit(user_id)
        today = self._clock()
        streak = 0
        for offset in range(_MAX_CAPACITY_LOOKBACK_DAYS):
            day = today - timedelta(days=offset)
            sent = await self._creator_messages(user_id, _start_of_day(day), _end_of_day(day))
            if len(sent) < daily_limit:
                break
            streak += 1
        return streak

    async def calculate_engagement_metrics(
        self, user_id: str, period: Period = "daily"
    ) -> EngagementMetrics | None:
        try:
            if not await self._conversation_ids(user_id):
                logger.warning("No conversations found for user %s", user_id)
                return None

            days = _PERIOD_DAYS[period]
            rate, avg_time, depth, capacity = await asyncio.gather(
                self.calculate_personal_response_rate(user_id, days),
                self.calculate_avg_response_time(user_id, days),
                self.calculate_conversation_depth(user_id, days),
                self.calculate_capacity_usage(user_id, "daily" if period == "daily" else "weekly"),
            )
            raw = RawEngagementMetrics(
                personal_response_rate=rate,
                avg_response_time=avg_time,
                conversation_depth=depth,
                capacity_usage=capacity,
            )
            days_at_max = await self.get_days_at_max_capacity(user_id) if capacity == 100 else 0
            risk = assess_burnout_risk(raw, days_at_max)
        except Exception as e:
            logger.error("Failed to calculate engagement metrics for %s: %s", user_id, e)
            return None

        now = self._clock()
        if period == "daily":
            start, end = _start_of_day(now), _end_of_day(now)
        else:
            start, end = now - timedelta(days=days), now
        return EngagementMetrics(
            id=f"{period}-{end:%Y-%m-%d}-{user_id}",
            user_id=user_id,
            period=period,
            start_date=start,
            end_date=end,
            metrics=EngagementSummary(
                quality_score=calculate_health_score(to_components(raw)),
                personal_response_rate=rate,
                avg_response_time=avg_time,
                conversation_depth=depth,
                capacity_usage=capacity,
                burnout_risk=risk,
            ),
            created_at=now,
        )

    async def save_engagement_metrics(self, metrics: EngagementMetrics) -> None:
        try:
            await self._store.set(
                f"{paths.ENGAGEMENT_METRICS}/{metrics.id}", metrics.model_dump()
            )
        except Exception as e:
            raise MetricsUnavailableError("Failed to save engagement metrics") from e

    async def get_latest_engagement_metrics(
        self, user_id: str, period: Period = "daily"
    ) -> EngagementMetrics | None:
        """Most recent saved metrics, or freshly computed ones when none are stored."""
        try:
            rows = await self._store.query(
                paths.ENGAGEMENT_METRICS,
                filters=[("user_id", "==", user_id), ("period", "==", period)],
                order_by="created_at",
                descending=True,
                limit=1,
            )
        except Exception as e:
            logger.error("Failed to load engagement metrics for %s: %s", user_id, e)
            return None
        if rows:
            return EngagementMetrics.model_validate(rows[0][1])
        return await self.calculate_engagement_metrics(user_id, period)

    async def _conversation_ids(self, user_id: str) -> list[str]:
        try:
            rows = await self._store.query(
                paths.CONVERSATIONS, filters=[("participantIds", "array-contains", user_id)]
            )
        except Exception as e:
            raise MetricsUnavailableError(f"Failed to load conversations for {user_id}") from e
        return [doc_id for doc_id, _ in rows]

    async def _messages(
        self,
        conversation_id: str,
        start: datetime,
        end: datetime,
        sender_id: str | None = None,
    ) -> list[Document]:
        filters: list[tuple[str, str, Any]] = [
            ("timestamp", ">=", start),
            ("timestamp", "<=", end),
        ]
        if sender_id is not None:
            filters.append(("senderId", "==", sender_id))
        try:
            rows = await self._store.query(
                paths.messages(conversation_id), filters=filters, order_by="timestamp"
            )
        except Exception as e:
            raise MetricsUnavailableError(
                f"Failed to load messages for conversation {conversation_id}"
            ) from e
        return [doc for _, doc in rows]

    async def _creator_messages(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[Document]:
        messages: list[Document] = []
        for conversation_id in await self._conversation_ids(user_id):
            messages.extend(await self._messages(conversation_id, start, end, sender_id=user_id))
        return messages

    async def _daily_limit(self, user_id: str) -> int:
        try:
            user = await self._store.get(paths.user(user_id))
        except Exception as e:
            raise MetricsUnavailableError(f"Failed to load user {user_id}") from e
        if user is None:
            raise MetricsUnavailableError(f"User not found: {user_id}")
        capacity = (user.get("settings") or {}).get("capacity") or {}
        return int(capacity.get("dailyLimit") or DEFAULT_DAILY_LIMIT)
