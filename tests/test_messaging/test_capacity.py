"""Tests for daily reply capacity helpers."""

import pytest

from inboxai.messaging.capacity import (
    calculate_time_commitment,
    preview_distribution,
    suggest_capacity,
)


class TestSuggestCapacity:
    @pytest.mark.parametrize(
        ("avg_daily", "expected"),
        [(0, 5), (10, 5), (50, 9), (75, 14), (100, 18), (500, 20)],
    )
    def test_clamped_share(self, avg_daily, expected):
        assert suggest_capacity(avg_daily) == expected

    def test_half_rounds_up(self):
        # 25 * 0.18 = 4.5
        assert suggest_capacity(25) == 5
        # 75 * 0.18 = 13.5
        assert suggest_capacity(75) == 14


class TestTimeCommitment:
    def test_two_minutes_per_message(self):
        assert calculate_time_commitment(10) == 20
        assert calculate_time_commitment(0) == 0


class TestPreviewDistribution:
    def test_default_faq_rate(self):
        dist = preview_distribution(10, 100)
        assert (dist.deep, dist.faq, dist.archived) == (10, 15, 75)

    def test_archived_never_negative(self):
        dist = preview_distribution(20, 10, avg_faq_rate=0.5)
        assert dist.archived == 0
        assert dist.faq == 5
