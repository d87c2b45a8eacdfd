"""Fire-and-forget dispatch of outbound sends."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Set

from .errors import SendFailed

logger = logging.getLogger(__name__)


class FireAndForget:
    """
    Runs send coroutines as background tasks on the current loop.

    Failures are logged as SendFailed at the given level and never propagated.
    Pending tasks are cancelled by cancel_all() during teardown.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, coro: Awaitable[None], what: str, level: int = logging.DEBUG) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._tasks.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                logger.log(level, "%s", SendFailed(f"{what} failed: {exc}"))

        task.add_done_callback(_done)
        return task

    def cancel_all(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
