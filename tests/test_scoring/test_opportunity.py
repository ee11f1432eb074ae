"""Tests for opportunity scoring and its rule-based fallback."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from tenacity import wait_none

from inboxai.errors.exceptions import OpportunityParseError
from inboxai.scoring.opportunity import (
    RULE_BASED_ANALYSIS,
    OpportunityScorer,
    build_opportunity_prompt,
    parse_opportunity_response,
    rule_based_opportunity_score,
)
from inboxai.types import OpportunityType

SPONSOR_TEXT = "Hi! Our brand would love to sponsor your next video. What is your rate?"


def _completion(content, prompt=120, completion=30):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(
            prompt_tokens=prompt, completion_tokens=completion, total_tokens=prompt + completion
        ),
    )


def _mock_client(*responses):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=list(responses))
    client.close = AsyncMock()
    return client


def _rate_limited():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return openai.RateLimitError(
        message="rate limit", response=httpx.Response(429, request=request), body=None
    )


@pytest.fixture(autouse=True)
def _no_retry_wait(monkeypatch):
    monkeypatch.setattr(OpportunityScorer._score_with_model.retry, "wait", wait_none())


class TestRuleBased:
    def test_sponsorship_with_budget(self):
        result = rule_based_opportunity_score(SPONSOR_TEXT)
        assert result.type == OpportunityType.SPONSORSHIP
        assert result.score == 70
        assert result.rule_based
        assert result.analysis == RULE_BASED_ANALYSIS
        assert result.indicators == ["sponsorship keywords", "budget discussion"]

    def test_collaboration(self):
        result = rule_based_opportunity_score("Want to team up on a cooking video?")
        assert result.type == OpportunityType.COLLABORATION
        assert result.score == 20

    def test_long_professional_message(self):
        text = "Hello, " + "we run a small studio and would like to work together on a series. " * 2
        result = rule_based_opportunity_score(text)
        assert "professional tone" in result.indicators
        assert result.score == 30

    def test_nothing_detected_defaults_to_50(self):
        result = rule_based_opportunity_score("Do you sell merch?")
        assert result.score == 50
        assert result.type == OpportunityType.SALE
        assert result.indicators == ["business inquiry"]

    def test_capped_at_100(self):
        text = (
            "We'd like to sponsor you and partner on a long campaign; the budget is flexible "
            "and we can discuss payment terms, timelines and deliverables in detail."
        )
        assert rule_based_opportunity_score(text).score == 100


class TestParseResponse:
    def test_valid(self):
        result = parse_opportunity_response(
            '{"score": 85, "type": "sponsorship", "indicators": ["budget"], "analysis": "Deal."}'
        )
        assert result.score == 85
        assert result.type == OpportunityType.SPONSORSHIP
        assert not result.rule_based

    def test_code_fence_stripped(self):
        raw = '```json\n{"score": 40, "type": "sale", "indicators": [], "analysis": "x"}\n```'
        assert parse_opportunity_response(raw).score == 40

    @pytest.mark.parametrize(
        ("raw", "message"),
        [
            ("not json", "Failed to parse"),
            ('{"type": "sale", "indicators": [], "analysis": ""}', "missing or invalid score"),
            ('{"score": 120, "type": "sale", "indicators": [], "analysis": ""}', "between 0 and 100"),
            ('{"score": 10, "type": "merch", "indicators": [], "analysis": ""}', "Invalid opportunity type"),
            ('{"score": 10, "type": "sale", "indicators": "x", "analysis": ""}', "indicators"),
            ('{"score": 10, "type": "sale", "indicators": [], "analysis": 3}', "analysis"),
        ],
    )
    def test_invalid(self, raw, message):
        with pytest.raises(OpportunityParseError, match=message):
            parse_opportunity_response(raw)


class TestPrompt:
    def test_includes_message(self):
        prompt = build_opportunity_prompt("Let's team up!")
        assert 'Message: "Let\'s team up!"' in prompt
        assert "Respond ONLY with valid JSON" in prompt


class TestOpportunityScorer:
    async def test_model_score(self):
        client = _mock_client(
            _completion('{"score": 90, "type": "sponsorship", "indicators": [], "analysis": "ok"}')
        )
        result = await OpportunityScorer(client=client).score(SPONSOR_TEXT)
        assert result.score == 90
        assert result.token_usage.total == 150
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4-turbo"
        assert kwargs["temperature"] == 0.5

    async def test_retries_bad_json_then_succeeds(self):
        client = _mock_client(
            _completion("oops"),
            _completion('{"score": 60, "type": "collaboration", "indicators": [], "analysis": ""}'),
        )
        result = await OpportunityScorer(client=client).score("collab?")
        assert result.score == 60
        assert client.chat.completions.create.await_count == 2

    async def test_falls_back_after_three_failures(self):
        client = _mock_client(_rate_limited(), _rate_limited(), _rate_limited())
        result = await OpportunityScorer(client=client).score(SPONSOR_TEXT)
        assert result.rule_based
        assert result.score == 70
        assert client.chat.completions.create.await_count == 3

    async def test_close(self):
        client = _mock_client()
        await OpportunityScorer(client=client).close()
        client.close.assert_awaited_once()
