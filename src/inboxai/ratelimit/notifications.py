"""Usage-warning notifications."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Protocol

from pydantic import BaseModel

from inboxai.ratelimit.windows import minutes_until, plural

logger = logging.getLogger(__name__)

WARNING_TITLE = "AI Usage Warning"


class Notification(BaseModel):
    title: str
    body: str
    data: dict[str, Any]


class Notifier(Protocol):
    async def send(self, notification: Notification) -> None: ...


class RecordingNotifier:
    """Keeps sent notifications in memory."""

    def __init__(self) -> None:
        self.sent: list[Notification] = []

    async def send(self, notification: Notification) -> None:
        logger.info("Notification: %s: %s", notification.title, notification.body)
        self.sent.append(notification)


def build_rate_limit_warning(
    operation: str,
    percent_used: int,
    limit_type: str,
    reset_at: datetime,
    now: datetime,
) -> Notification:
    minutes = minutes_until(reset_at, now)
    if minutes > 60:
        time_label = plural(-(-minutes // 60), "hour")
    else:
        time_label = plural(minutes, "minute")
    label = operation.replace("_", " ")
    return Notification(
        title=WARNING_TITLE,
        body=(
            f"You've used {percent_used}% of your {limit_type} {label} limit. "
            f"Limit resets in {time_label}."
        ),
        data={
            "type": "rate_limit_warning",
            "operation": operation,
            "percentUsed": percent_used,
            "limitType": limit_type,
            "resetTime": reset_at.isoformat(),
        },
    )
