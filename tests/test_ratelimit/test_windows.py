"""Tests for window ids, reset times and the warning text."""

from datetime import UTC, datetime, timedelta, timezone

from inboxai.ratelimit.notifications import build_rate_limit_warning
from inboxai.ratelimit.windows import (
    daily_window_id,
    hourly_window_id,
    hours_until,
    minutes_until,
    next_hour,
    next_midnight,
)

NOW = datetime(2025, 3, 14, 10, 30, 15, tzinfo=UTC)


class TestWindowIds:
    def test_hourly(self):
        assert hourly_window_id("u1", "sentiment", NOW) == "u1_sentiment_2025-03-14-10"

    def test_daily(self):
        assert daily_window_id("u1", "sentiment", NOW) == "u1_sentiment_2025-03-14"

    def test_uses_local_wall_clock(self):
        tokyo = NOW.astimezone(timezone(timedelta(hours=9)))
        assert hourly_window_id("u1", "sentiment", tokyo) == "u1_sentiment_2025-03-14-19"


class TestResets:
    def test_next_hour(self):
        assert next_hour(NOW) == datetime(2025, 3, 14, 11, tzinfo=UTC)

    def test_next_midnight(self):
        assert next_midnight(NOW) == datetime(2025, 3, 15, tzinfo=UTC)

    def test_minutes_round_up(self):
        assert minutes_until(next_hour(NOW), NOW) == 30

    def test_hours_round_up(self):
        assert hours_until(next_midnight(NOW), NOW) == 14


class TestWarningText:
    def test_minutes_label(self):
        note = build_rate_limit_warning(
            "faq_detection", 85, "hourly", datetime(2025, 3, 14, 11, tzinfo=UTC), NOW
        )
        assert note.body == (
            "You've used 85% of your hourly faq detection limit. Limit resets in 30 minutes."
        )

    def test_hours_label(self):
        note = build_rate_limit_warning(
            "voice_matching", 90, "daily", datetime(2025, 3, 15, tzinfo=UTC), NOW
        )
        assert note.body.endswith("Limit resets in 14 hours.")
        assert note.data["resetTime"] == "2025-03-15T00:00:00+00:00"

    def test_single_minute(self):
        note = build_rate_limit_warning(
            "sentiment", 80, "hourly", NOW + timedelta(seconds=20), NOW
        )
        assert note.body.endswith("Limit resets in 1 minute.")
