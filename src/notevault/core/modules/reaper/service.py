import asyncio
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from notevault.core.core import Service
from notevault.core.modules.reaper.models import ReaperState, SweepResult

logger = structlog.get_logger(__name__)


class ReaperService(Service):
    """Periodically deletes expired share grants.

    The resolver checks expiry on every read, so the reaper only keeps the registry
    small; a missed or failed sweep never makes an expired grant usable.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._state = ReaperState.IDLE
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.last_result: SweepResult | None = None

    @property
    def state(self) -> ReaperState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def on_start(self) -> None:
        if not self.core.config.reaper_enabled:
            logger.info("reaper_disabled")
            return
        self.start()

    async def on_stop(self) -> None:
        await self.stop()

    def start(self) -> None:
        """Start the sweep timer in the running event loop."""
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self.core.config.reaper_interval_seconds))
        logger.info("reaper_started", interval_seconds=self.core.config.reaper_interval_seconds)

    async def stop(self) -> None:
        """Stop the timer. A sweep already in flight is allowed to finish."""
        if self._task is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        logger.info("reaper_stopped")

    async def _run(self, interval: float) -> None:
        while True:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except TimeoutError:
                try:
                    await self.sweep()
                except Exception:
                    logger.exception("reaper_sweep_crashed")
            else:
                return

    async def sweep(self) -> SweepResult:
        """Delete every grant with expires_at <= now. Storage errors are logged, never raised."""
        started_at = self.core.clock()
        self._state = ReaperState.SWEEPING
        try:
            deleted = await self.core.services.share.delete_expired(started_at)
        except PyMongoError:
            logger.exception("reaper_sweep_failed")
            result = SweepResult(started_at=started_at, deleted=0, succeeded=False)
        else:
            logger.info("reaper_sweep_completed", deleted=deleted)
            result = SweepResult(started_at=started_at, deleted=deleted, succeeded=True)
        finally:
            self._state = ReaperState.IDLE

        self.last_result = result
        return result
