"""Boundary auto-replies, quiet hours and the archive safety check."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel

from inboxai.types import Message

DEFAULT_BOUNDARY_TEMPLATE = """Hi! I get hundreds of messages daily and can't personally respond to everyone.

For quick questions, check out my FAQ: {{faqUrl}}
For deeper connection, join my community: {{communityUrl}}

I read every message, but I focus on responding to those I can give thoughtful attention to. If this is time-sensitive, feel free to follow up and I'll prioritize it.

Thank you for understanding! \U0001f499

[This message was sent automatically]"""

_PLACEHOLDER_DEFAULTS = {
    "creatorName": "[Creator]",
    "faqUrl": "[FAQ not configured]",
    "communityUrl": "[Community not configured]",
}

_CRISIS_SENTIMENT = -0.7
_PROTECTED_CATEGORIES = {"business", "business_opportunity", "urgent"}

_PLACEHOLDER = re.compile(r"\{\{\s*(creatorName|faqUrl|communityUrl)\s*\}\}")


class QuietHours(BaseModel):
    enabled: bool = False
    start: str = "22:00"
    end: str = "08:00"


def render_boundary_template(
    template: str,
    creator_name: str | None = None,
    faq_url: str | None = None,
    community_url: str | None = None,
) -> str:
    """Fill ``{{creatorName}}``, ``{{faqUrl}}`` and ``{{communityUrl}}``.

    Missing or empty values render as bracketed placeholders such as
    ``[Creator]``. Any other text, braces included, is kept as written.
    """
    supplied = {"creatorName": creator_name, "faqUrl": faq_url, "communityUrl": community_url}
    context = {key: supplied[key] or default for key, default in _PLACEHOLDER_DEFAULTS.items()}
    return _PLACEHOLDER.sub(lambda m: context[m.group(1)], template)


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def is_quiet_hours(quiet_hours: QuietHours | None, now: datetime) -> bool:
    """Whether ``now`` falls in the [start, end) window; windows may wrap midnight."""
    if quiet_hours is None or not quiet_hours.enabled:
        return False
    current = now.hour * 60 + now.minute
    start, end = _minutes(quiet_hours.start), _minutes(quiet_hours.end)
    if start > end:
        return current >= start or current < end
    return start <= current < end


def should_not_archive(message: Message) -> bool:
    """Messages that must always reach the creator: business, urgent, VIP or crisis."""
    meta = message.metadata
    if (meta.category or "").lower() in _PROTECTED_CATEGORIES:
        return True
    if meta.conversation_is_vip:
        return True
    return meta.sentiment_score is not None and meta.sentiment_score < _CRISIS_SENTIMENT
