"""Background queue for auxiliary writes that must not block the caller."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Owns tasks scheduled off the caller's success path.

    Failures are logged with the task label and dropped; nothing submitted
    here can fail the operation that submitted it.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self._failed = 0

    @property
    def pending(self) -> int:
        return len(self._tasks)

    @property
    def failed(self) -> int:
        return self._failed

    def submit(self, coro: Coroutine[Any, Any, Any], label: str = "background") -> asyncio.Task[Any]:
        """Schedule ``coro`` on the running loop and return its task."""
        task = asyncio.create_task(self._run(coro, label), name=label)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait for every pending task, including ones submitted while draining."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, coro: Coroutine[Any, Any, Any], label: str) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except Exception:
            self._failed += 1
            logger.error("Background task %s failed", label, exc_info=True)
