"""Periodic snapshot and purge jobs.

Two independent loops run on the event loop: one takes an automatic
snapshot every ``auto_interval_hours``, the other purges expired index
entries every ``purge_interval_hours``. Both wait a full interval before
their first run.
"""

import asyncio
from collections.abc import Awaitable, Callable

from gestao_demandas.backup.manager import SnapshotManager
from gestao_demandas.backup.models import SnapshotKind
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)


class SnapshotScheduler:
    """Runs the automatic snapshot and purge loops."""

    def __init__(
        self,
        manager: SnapshotManager,
        snapshot_interval_seconds: float = 6 * 3600,
        purge_interval_seconds: float = 24 * 3600,
    ):
        """Initialize scheduler.

        Args:
            manager: Snapshot manager the jobs call into
            snapshot_interval_seconds: Delay between automatic snapshots
            purge_interval_seconds: Delay between purges of expired entries
        """
        self._manager = manager
        self._snapshot_interval_seconds = snapshot_interval_seconds
        self._purge_interval_seconds = purge_interval_seconds
        self._running = False
        self._loops: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start both loops."""
        if self._running:
            logger.warning("snapshot_scheduler_already_running")
            return

        self._running = True
        self._loops = [
            asyncio.create_task(
                self._run_every(self._snapshot_interval_seconds, "auto_snapshot", self._auto_snapshot)
            ),
            asyncio.create_task(
                self._run_every(self._purge_interval_seconds, "purge_expired", self._purge)
            ),
        ]

        logger.info(
            "snapshot_scheduler_started",
            snapshot_interval_seconds=self._snapshot_interval_seconds,
            purge_interval_seconds=self._purge_interval_seconds,
        )

    async def stop(self) -> None:
        """Stop both loops."""
        if not self._running:
            return

        self._running = False

        for loop_task in self._loops:
            loop_task.cancel()
        for loop_task in self._loops:
            try:
                await loop_task
            except asyncio.CancelledError:
                pass
        self._loops = []

        logger.info("snapshot_scheduler_stopped")

    async def _run_every(
        self,
        interval_seconds: float,
        job_name: str,
        job: Callable[[], Awaitable[object]],
    ) -> None:
        while self._running:
            await asyncio.sleep(interval_seconds)
            try:
                await job()
            except Exception as e:
                logger.error("scheduled_job_failed", job=job_name, error=str(e))

    async def _auto_snapshot(self) -> None:
        await self._manager.snapshot_safely(SnapshotKind.AUTO)

    async def _purge(self) -> None:
        await self._manager.purge_expired()
