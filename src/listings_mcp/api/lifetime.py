"""Liveness scope for requests owned by a screen."""

import asyncio
import logging
from typing import Any, Coroutine

logger = logging.getLogger(__name__)


class Lifetime:
    """Tracks whether the owner of a request is still around.

    Tasks spawned through a Lifetime are cancelled when it closes, and
    endpoints bound to a closed Lifetime stop publishing results.
    """

    def __init__(self) -> None:
        self._alive = True
        self._tasks: set[asyncio.Task] = set()

    @property
    def alive(self) -> bool:
        return self._alive

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        if not self._alive:
            coro.close()
            raise RuntimeError("Cannot start work on a closed lifetime")
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def close(self) -> None:
        if not self._alive:
            return
        self._alive = False
        for task in list(self._tasks):
            task.cancel()
        logger.debug("Lifetime closed, cancelled %d pending task(s)", len(self._tasks))
