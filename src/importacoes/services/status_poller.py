"""
Status poller - self-managing background timer that keeps the job list fresh
while at least one listed job is still being processed.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional

from loguru import logger

from importacoes.config import config
from importacoes.models import ImportJob, ImportJobPage
from importacoes.observability import record_poller_tick, set_poller_active


class PollerState(Enum):
    IDLE = "IDLE"
    POLLING = "POLLING"


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class StatusPoller:
    """
    Owns at most one asyncio timer task.

    The tick callback is awaited before the next sleep starts, so ticks never
    overlap. A tick returning False (or raising) counts as a failed tick and
    leaves the state unchanged; the next tick retries.
    """

    def __init__(
        self,
        tick: Callable[[], Awaitable[Optional[bool]]],
        interval_seconds: Optional[float] = None,
    ):
        """
        Initialize the poller.

        Args:
            tick: Coroutine function run on every timer fire
            interval_seconds: Seconds between ticks (default from POLL_INTERVAL_SECONDS)
        """
        self._tick = tick
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else config.polling.interval_seconds
        )
        self._task: Optional[asyncio.Task] = None
        # Last task started; it may still be finishing a tick after stop()
        self._last_task: Optional[asyncio.Task] = None

    @property
    def state(self) -> PollerState:
        if self._task is not None and not self._task.done():
            return PollerState.POLLING
        return PollerState.IDLE

    @property
    def is_polling(self) -> bool:
        return self.state is PollerState.POLLING

    def evaluate(
        self,
        page: Optional[ImportJobPage],
        open_job: Optional[ImportJob] = None,
    ) -> PollerState:
        """
        Apply the transition rule after a successful fetch.

        Polls while a listed job or the job open in the detail view is
        unfinished; otherwise the timer is released.
        """
        active = page is not None and page.has_active_jobs
        if open_job is not None and not open_job.is_terminal:
            active = True

        if active:
            self.start()
        else:
            self.stop()
        return self.state

    def start(self) -> bool:
        """Start the timer unless one is already running. Returns True if started."""
        if self.is_polling:
            return False

        self._task = asyncio.create_task(self._run())
        self._last_task = self._task
        set_poller_active(True)
        logger.info(f"Status poller started (interval={self.interval_seconds}s)")
        return True

    def stop(self) -> bool:
        """Release the timer. Returns True if one was running."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return False

        # A tick that stops its own timer finishes normally; the loop exits
        # because it no longer owns the handle.
        if task is not _current_task():
            task.cancel()
        set_poller_active(False)
        logger.info("Status poller stopped")
        return True

    async def close(self) -> None:
        """Stop the timer and wait for its last task to finish."""
        task = self._last_task
        self.stop()
        if task is not None and task is not _current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.debug("Status poller task cancelled")

    async def _run(self):
        me = asyncio.current_task()
        while self._task is me:
            try:
                await asyncio.sleep(self.interval_seconds)
                if self._task is not me:
                    break
                succeeded = await self._tick()

            except asyncio.CancelledError:
                logger.debug("Status poller cancelled")
                break
            except Exception as e:
                logger.error(f"Error in status poller tick: {e}")
                record_poller_tick("failed")
                # Keep polling; the next tick retries
            else:
                record_poller_tick("failed" if succeeded is False else "success")
