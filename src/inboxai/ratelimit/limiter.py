"""Per-user operation rate limiter over hourly and daily counter documents."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from pydantic import BaseModel

from inboxai.ratelimit.limits import WARNING_THRESHOLD_PERCENT, get_limits
from inboxai.ratelimit.notifications import Notifier, build_rate_limit_warning
from inboxai.ratelimit.windows import (
    daily_window_id,
    hourly_window_id,
    hours_until,
    minutes_until,
    next_hour,
    next_midnight,
    plural,
)
from inboxai.store import paths
from inboxai.store.base import DocumentStore
from inboxai.utils.clock import Clock, local_now
from inboxai.utils.rounding import round_int

logger = logging.getLogger(__name__)

CHECK_FAILED_MESSAGE = "Rate limit check failed - assuming allowed"


class RateLimitStatus(BaseModel):
    hourly_count: int
    hourly_limit: int
    daily_count: int
    daily_limit: int
    hourly_limit_reached: bool
    daily_limit_reached: bool
    hourly_reset_at: datetime
    daily_reset_at: datetime
    message: str | None = None


class RateLimitCheckResult(BaseModel):
    allowed: bool
    reason: str | None = None  # "hourly_limit" | "daily_limit"
    status: RateLimitStatus


class RateLimiter:
    """Fixed calendar-window limiter.

    ``check_limit`` only reads. ``increment`` is called after the guarded
    operation succeeds and fires at most one 80% warning per window.
    Counts only grow within a window; a new hour or day starts a new document.
    """

    def __init__(
        self,
        store: DocumentStore,
        notifier: Notifier | None = None,
        clock: Clock = local_now,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._clock = clock

    async def check_limit(self, user_id: str, operation: str) -> RateLimitCheckResult:
        now = self._clock()
        limits = None
        try:
            limits = get_limits(operation)
            status = await self._build_status(user_id, operation, now)
        except Exception as e:
            logger.error("Rate limit check failed for %s/%s: %s", user_id, operation, e)
            return RateLimitCheckResult(
                allowed=True,
                status=RateLimitStatus(
                    hourly_count=0,
                    hourly_limit=limits.per_hour if limits else 0,
                    daily_count=0,
                    daily_limit=limits.per_day if limits else 0,
                    hourly_limit_reached=False,
                    daily_limit_reached=False,
                    hourly_reset_at=now,
                    daily_reset_at=now,
                    message=CHECK_FAILED_MESSAGE,
                ),
            )

        if status.hourly_limit_reached:
            minutes = minutes_until(status.hourly_reset_at, now)
            status.message = (
                f"You've reached your hourly limit for this operation "
                f"({limits.per_hour} requests/hour). "
                f"Please try again in {plural(minutes, 'minute')}."
            )
            logger.info("Hourly limit reached for %s/%s", user_id, operation)
            return RateLimitCheckResult(allowed=False, reason="hourly_limit", status=status)

        if status.daily_limit_reached:
            hours = hours_until(status.daily_reset_at, now)
            status.message = (
                f"You've reached your daily limit for this operation "
                f"({limits.per_day} requests/day). "
                f"Please try again in {plural(hours, 'hour')}."
            )
            logger.info("Daily limit reached for %s/%s", user_id, operation)
            return RateLimitCheckResult(allowed=False, reason="daily_limit", status=status)

        return RateLimitCheckResult(allowed=True, status=status)

    async def get_status(self, user_id: str, operation: str) -> RateLimitStatus:
        return (await self.check_limit(user_id, operation)).status

    async def increment(self, user_id: str, operation: str) -> None:
        """Count one successful operation in both windows. Never raises."""
        try:
            limits = get_limits(operation)
            now = self._clock()
            hourly_reset = next_hour(now)
            daily_reset = next_midnight(now)
            hourly_path = f"{paths.RATE_LIMITS}/{hourly_window_id(user_id, operation, now)}"
            daily_path = f"{paths.RATE_LIMITS}/{daily_window_id(user_id, operation, now)}"

            hourly_count, daily_count = await asyncio.gather(
                self._increment_window(hourly_path, hourly_reset, now),
                self._increment_window(daily_path, daily_reset, now),
            )

            await self._maybe_warn(
                hourly_path, operation, hourly_count, limits.per_hour, "hourly", hourly_reset, now
            )
            await self._maybe_warn(
                daily_path, operation, daily_count, limits.per_day, "daily", daily_reset, now
            )
        except Exception as e:
            logger.error("Failed to increment rate limit for %s/%s: %s", user_id, operation, e)

    async def cleanup_expired(self) -> int:
        """Delete window documents whose ``expiresAt`` has passed."""
        try:
            expired = await self._store.query(
                paths.RATE_LIMITS, filters=[("expiresAt", "<", self._clock())]
            )
            for doc_id, _ in expired:
                await self._store.delete(f"{paths.RATE_LIMITS}/{doc_id}")
        except Exception as e:
            logger.error("Rate limit cleanup failed: %s", e)
            return 0
        logger.info("Removed %d expired rate limit windows", len(expired))
        return len(expired)

    async def _build_status(self, user_id: str, operation: str, now: datetime) -> RateLimitStatus:
        limits = get_limits(operation)
        hourly_count, daily_count = await asyncio.gather(
            self._window_count(hourly_window_id(user_id, operation, now)),
            self._window_count(daily_window_id(user_id, operation, now)),
        )
        return RateLimitStatus(
            hourly_count=hourly_count,
            hourly_limit=limits.per_hour,
            daily_count=daily_count,
            daily_limit=limits.per_day,
            hourly_limit_reached=hourly_count >= limits.per_hour,
            daily_limit_reached=daily_count >= limits.per_day,
            hourly_reset_at=next_hour(now),
            daily_reset_at=next_midnight(now),
        )

    async def _window_count(self, window_id: str) -> int:
        doc = await self._store.get(f"{paths.RATE_LIMITS}/{window_id}")
        if doc is None:
            return 0
        return int(doc.get("count") or 0)

    async def _increment_window(self, path: str, expires_at: datetime, now: datetime) -> int:
        count = int(await self._store.increment(path, "count"))
        if count == 1:
            await self._store.set(
                path,
                {"expiresAt": expires_at, "createdAt": now, "warningNotificationSent": False},
                merge=True,
            )
        else:
            await self._store.update(path, {"expiresAt": expires_at, "updatedAt": now})
        return count

    async def _maybe_warn(
        self,
        path: str,
        operation: str,
        count: int,
        limit: int,
        limit_type: str,
        reset_at: datetime,
        now: datetime,
    ) -> None:
        percent = round_int(count / limit * 100)
        if not WARNING_THRESHOLD_PERCENT <= percent < 100:
            return
        doc = await self._store.get(path)
        if doc is None or doc.get("warningNotificationSent"):
            return
        if self._notifier is not None:
            try:
                await self._notifier.send(
                    build_rate_limit_warning(operation, percent, limit_type, reset_at, now)
                )
            except Exception as e:
                logger.error("Failed to send rate limit warning: %s", e)
        logger.warning("Sent %s rate limit warning for %s (%d%%)", limit_type, operation, percent)
        await self._store.update(path, {"warningNotificationSent": True})
