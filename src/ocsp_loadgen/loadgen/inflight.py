from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

logger = logging.getLogger(__name__)


class InFlight:
    """Counts spawned-but-unfinished send tasks and lets a caller wait for zero.

    The counter is released from the task's done callback, so it drops on
    every exit path: normal return, exception, or cancellation before the
    coroutine ever ran.
    """

    def __init__(self) -> None:
        self._outstanding = 0
        self._spawned = 0
        self._completed = 0
        self._tasks: set[asyncio.Task[Any]] = set()
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def outstanding(self) -> int:
        return self._outstanding

    @property
    def spawned(self) -> int:
        return self._spawned

    @property
    def completed(self) -> int:
        return self._completed

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        self._outstanding += 1
        self._spawned += 1
        self._idle.clear()
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._release)
        return task

    def _release(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        self._outstanding -= 1
        self._completed += 1
        if not task.cancelled() and task.exception() is not None:
            logger.error("send task failed", exc_info=task.exception())
        if self._outstanding == 0:
            self._idle.set()

    async def wait(self) -> None:
        await self._idle.wait()
