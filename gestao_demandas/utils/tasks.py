"""Fire-and-forget asyncio task tracking."""

import asyncio
from collections.abc import Coroutine
from typing import Any

from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)


class BackgroundTaskSet:
    """Keeps references to fire-and-forget tasks until they finish.

    The event loop only holds weak references to tasks, so a task nobody
    references can be garbage collected mid-flight. Coroutines spawned here
    are expected to handle their own errors; `drain()` waits for whatever is
    still pending (used at shutdown and in tests).
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._tasks: set[asyncio.Task[Any]] = set()

    def spawn(
        self, coro: Coroutine[Any, Any, Any], *, name: str | None = None
    ) -> asyncio.Task[Any]:
        """Schedule a coroutine on the running loop and track it."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """Wait until every tracked task has completed."""
        while self._tasks:
            pending = list(self._tasks)
            logger.debug("draining_background_tasks", group=self._name, pending=len(pending))
            await asyncio.gather(*pending, return_exceptions=True)

    def __len__(self) -> int:
        return len(self._tasks)
