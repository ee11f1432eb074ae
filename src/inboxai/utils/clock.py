"""Injectable wall clock."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Timezone-aware current time in the host's local zone."""
    return datetime.now().astimezone()


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)
