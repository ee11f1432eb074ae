"""Business opportunity scoring: model call with a keyword-rule fallback."""

from __future__ import annotations

import json
import logging
from typing import Any

import openai
from jinja2.sandbox import SandboxedEnvironment
from pydantic import BaseModel, Field
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from inboxai.errors.exceptions import OpportunityParseError
from inboxai.types import OpportunityType, TokenUsage

logger = logging.getLogger(__name__)

DEFAULT_OPPORTUNITY_MODEL = "gpt-4-turbo"
DEFAULT_OPPORTUNITY_TEMPERATURE = 0.5
RULE_BASED_ANALYSIS = "Business opportunity detected (rule-based fallback scoring)"

_SPONSORSHIP_KEYWORDS = ("sponsor", "brand deal", "sponsored", "brand partnership", "endorsement")
_BUDGET_KEYWORDS = ("$", "budget", "payment", "compensation", "fee", "paid", "rate", "price")
_COLLAB_KEYWORDS = (
    "collaborate",
    "collaboration",
    "partner",
    "partnership",
    "work together",
    "team up",
)

_RETRYABLE = (
    openai.RateLimitError,
    openai.InternalServerError,
    openai.APIConnectionError,
    openai.APITimeoutError,
    OpportunityParseError,
)

_jinja_env = SandboxedEnvironment(autoescape=False, keep_trailing_newline=True)

_PROMPT = _jinja_env.from_string(
    """You are a business opportunity detection system for a creator messaging platform.

Analyze this business opportunity message and score its value from 0-100.

Message: "{{ message_text }}"

Scoring:
- Brand/sponsorship mentions: +40 points (e.g., "sponsor", "brand deal", "sponsored content")
- Budget/compensation mentions: +30 points (e.g., "$", "budget", "payment", "compensation", "fee")
- Partnership/collaboration keywords: +20 points (e.g., "collaborate", "partner", "work together")
- Professionalism and seriousness: +10 points (formal tone, specific details, clear intent)

Opportunity types:
- sponsorship: brand sponsorship deals, sponsored content opportunities
- collaboration: content collaborations, joint projects, creative partnerships
- partnership: business partnerships, long-term agreements
- sale: product purchases, service inquiries, one-time transactions

Respond ONLY with valid JSON in this exact format:
{"score": 85, "type": "sponsorship", "indicators": ["brand collaboration", "budget discussion"], "analysis": "Brief 1-sentence summary of the opportunity"}
"""
)


class OpportunityScore(BaseModel):
    score: float = Field(ge=0, le=100)
    type: OpportunityType
    indicators: list[str] = Field(default_factory=list)
    analysis: str = ""
    rule_based: bool = False
    token_usage: TokenUsage = Field(default_factory=TokenUsage)


def build_opportunity_prompt(message_text: str) -> str:
    return _PROMPT.render(message_text=message_text)


def rule_based_opportunity_score(message_text: str) -> OpportunityScore:
    """Keyword scoring used when the model is unavailable or keeps failing."""
    text = message_text.lower()
    score = 0
    indicators: list[str] = []

    has_sponsorship = any(kw in text for kw in _SPONSORSHIP_KEYWORDS)
    has_collab = any(kw in text for kw in _COLLAB_KEYWORDS)

    if has_sponsorship:
        score += 40
        indicators.append("sponsorship keywords")
    if any(kw in text for kw in _BUDGET_KEYWORDS):
        score += 30
        indicators.append("budget discussion")
    if has_collab:
        score += 20
        indicators.append("collaboration proposal")
    if len(text) > 100 and "!!!" not in text:
        score += 10
        indicators.append("professional tone")

    if has_sponsorship:
        kind = OpportunityType.SPONSORSHIP
    elif has_collab:
        kind = OpportunityType.COLLABORATION
    elif "partner" in text:
        # unreachable while "partner" is a collaboration keyword
        kind = OpportunityType.PARTNERSHIP
    else:
        kind = OpportunityType.SALE

    if score == 0:
        score = 50
        indicators.append("business inquiry")

    return OpportunityScore(
        score=min(score, 100),
        type=kind,
        indicators=indicators,
        analysis=RULE_BASED_ANALYSIS,
        rule_based=True,
    )


def parse_opportunity_response(raw: str) -> OpportunityScore:
    """Validate the model's JSON reply. Raises OpportunityParseError."""
    try:
        parsed: Any = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError as e:
        raise OpportunityParseError(f"Failed to parse opportunity score response: {e}") from e
    if not isinstance(parsed, dict):
        raise OpportunityParseError("Failed to parse opportunity score response: not an object")

    score = parsed.get("score")
    if not isinstance(score, (int, float)) or isinstance(score, bool):
        raise OpportunityParseError("Invalid response format: missing or invalid score")
    if not 0 <= score <= 100:
        raise OpportunityParseError("Score must be between 0 and 100")
    try:
        kind = OpportunityType(parsed.get("type"))
    except ValueError:
        raise OpportunityParseError(f"Invalid opportunity type: {parsed.get('type')}") from None
    indicators = parsed.get("indicators")
    if not isinstance(indicators, list):
        raise OpportunityParseError("indicators must be an array")
    analysis = parsed.get("analysis")
    if not isinstance(analysis, str):
        raise OpportunityParseError("analysis must be a string")

    return OpportunityScore(
        score=score,
        type=kind,
        indicators=[str(i) for i in indicators],
        analysis=analysis,
    )


def _strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]
    return text.strip()


class OpportunityScorer:
    """Scores opportunity messages with an OpenAI chat model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_OPPORTUNITY_MODEL,
        temperature: float = DEFAULT_OPPORTUNITY_TEMPERATURE,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or openai.AsyncOpenAI(api_key=api_key)
        self._model = model
        self._temperature = temperature

    async def score(self, message_text: str) -> OpportunityScore:
        """Model score, or the rule-based score once retries are exhausted."""
        try:
            return await self._score_with_model(message_text)
        except (openai.OpenAIError, OpportunityParseError) as e:
            logger.warning("Opportunity scoring failed (%s), falling back to rule-based scoring", e)
            return rule_based_opportunity_score(message_text)

    @retry(
        retry=retry_if_exception_type(_RETRYABLE),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    async def _score_with_model(self, message_text: str) -> OpportunityScore:
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[{"role": "user", "content": build_opportunity_prompt(message_text)}],
            temperature=self._temperature,
        )
        content = response.choices[0].message.content or ""
        result = parse_opportunity_response(content)
        usage = response.usage
        result.token_usage = TokenUsage(
            prompt=usage.prompt_tokens if usage else 0,
            completion=usage.completion_tokens if usage else 0,
            total=usage.total_tokens if usage else 0,
        )
        return result

    async def close(self) -> None:
        await self._client.close()
