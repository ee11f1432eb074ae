"""Tests for the hourly/daily rate limiter."""

from unittest.mock import AsyncMock

from inboxai.ratelimit.limiter import CHECK_FAILED_MESSAGE, RateLimiter
from inboxai.ratelimit.notifications import RecordingNotifier

HOURLY = "rate_limits/u1_categorization_2025-03-14-10"
DAILY = "rate_limits/u1_categorization_2025-03-14"


class TestCheckLimit:
    async def test_fresh_user_allowed(self, store, clock):
        result = await RateLimiter(store, clock=clock).check_limit("u1", "categorization")
        assert result.allowed
        assert result.reason is None
        assert result.status.hourly_count == 0
        assert result.status.hourly_limit == 200
        assert result.status.daily_limit == 2000

    async def test_hourly_limit_blocks_201st(self, store, clock):
        await store.set(HOURLY, {"count": 200})
        await store.set(DAILY, {"count": 200})
        result = await RateLimiter(store, clock=clock).check_limit("u1", "categorization")

        assert not result.allowed
        assert result.reason == "hourly_limit"
        assert result.status.message == (
            "You've reached your hourly limit for this operation (200 requests/hour). "
            "Please try again in 30 minutes."
        )

    async def test_199_is_still_allowed(self, store, clock):
        await store.set(HOURLY, {"count": 199})
        result = await RateLimiter(store, clock=clock).check_limit("u1", "categorization")
        assert result.allowed

    async def test_daily_limit(self, store, clock):
        await store.set(DAILY, {"count": 2000})
        result = await RateLimiter(store, clock=clock).check_limit("u1", "categorization")

        assert not result.allowed
        assert result.reason == "daily_limit"
        assert result.status.message.endswith("Please try again in 14 hours.")

    async def test_hourly_checked_before_daily(self, store, clock):
        limiter = RateLimiter(store, clock=clock)
        await limiter.increment("u1", "daily_agent")
        await limiter.increment("u1", "daily_agent")
        result = await limiter.check_limit("u1", "daily_agent")
        assert result.reason == "hourly_limit"
        assert result.status.message.endswith("Please try again in 30 minutes.")

    async def test_new_hour_opens_new_window(self, store, clock):
        await store.set(HOURLY, {"count": 200})
        clock.advance(hours=1)
        result = await RateLimiter(store, clock=clock).check_limit("u1", "categorization")
        assert result.allowed

    async def test_store_failure_allows(self, clock):
        broken = AsyncMock()
        broken.get.side_effect = RuntimeError("backend down")
        result = await RateLimiter(broken, clock=clock).check_limit("u1", "categorization")

        assert result.allowed
        assert result.status.message == CHECK_FAILED_MESSAGE

    async def test_unknown_operation_allows(self, store, clock):
        result = await RateLimiter(store, clock=clock).check_limit("u1", "summarization")

        assert result.allowed
        assert result.status.message == CHECK_FAILED_MESSAGE
        assert result.status.hourly_limit == 0
        assert result.status.daily_limit == 0

    async def test_get_status(self, store, clock):
        await store.set(HOURLY, {"count": 12})
        status = await RateLimiter(store, clock=clock).get_status("u1", "categorization")
        assert status.hourly_count == 12
        assert status.hourly_reset_at == clock.now.replace(hour=11, minute=0)


class TestIncrement:
    async def test_creates_both_windows(self, store, clock):
        await RateLimiter(store, clock=clock).increment("u1", "categorization")

        hourly = await store.get(HOURLY)
        daily = await store.get(DAILY)
        assert hourly["count"] == 1
        assert hourly["warningNotificationSent"] is False
        assert hourly["expiresAt"] == clock.now.replace(hour=11, minute=0)
        assert daily["count"] == 1
        assert daily["expiresAt"] == clock.now.replace(day=15, hour=0, minute=0)

    async def test_counts_grow(self, store, clock):
        limiter = RateLimiter(store, clock=clock)
        for _ in range(3):
            await limiter.increment("u1", "categorization")
        assert (await store.get(HOURLY))["count"] == 3
        assert (await store.get(DAILY))["count"] == 3

    async def test_never_raises(self, clock):
        broken = AsyncMock()
        broken.increment.side_effect = RuntimeError("backend down")
        await RateLimiter(broken, clock=clock).increment("u1", "categorization")

    async def test_cleanup_expired(self, store, clock):
        limiter = RateLimiter(store, clock=clock)
        await limiter.increment("u1", "categorization")
        clock.advance(hours=2)

        assert await limiter.cleanup_expired() == 1
        assert await store.get(HOURLY) is None
        assert await store.get(DAILY) is not None


class TestWarnings:
    async def test_warns_once_at_80_percent(self, store, clock):
        notifier = RecordingNotifier()
        limiter = RateLimiter(store, notifier, clock)
        await store.set(HOURLY, {"count": 159, "warningNotificationSent": False})

        await limiter.increment("u1", "categorization")
        await limiter.increment("u1", "categorization")

        assert len(notifier.sent) == 1
        warning = notifier.sent[0]
        assert warning.title == "AI Usage Warning"
        assert warning.body == (
            "You've used 80% of your hourly categorization limit. Limit resets in 30 minutes."
        )
        assert warning.data["percentUsed"] == 80
        assert warning.data["limitType"] == "hourly"
        assert (await store.get(HOURLY))["warningNotificationSent"] is True

    async def test_no_warning_below_threshold(self, store, clock):
        notifier = RecordingNotifier()
        await store.set(HOURLY, {"count": 100, "warningNotificationSent": False})
        await RateLimiter(store, notifier, clock).increment("u1", "categorization")
        assert notifier.sent == []

    async def test_no_warning_at_limit(self, store, clock):
        notifier = RecordingNotifier()
        limiter = RateLimiter(store, notifier, clock)
        await limiter.increment("u1", "daily_agent")
        await limiter.increment("u1", "daily_agent")
        assert notifier.sent == []

    async def test_failed_notifier_still_marks_window(self, store, clock):
        notifier = AsyncMock()
        notifier.send.side_effect = RuntimeError("push failed")
        await store.set(HOURLY, {"count": 159, "warningNotificationSent": False})

        await RateLimiter(store, notifier, clock).increment("u1", "categorization")
        assert (await store.get(HOURLY))["warningNotificationSent"] is True
