"""Scheduler — periodic flush task.

Runs as an asyncio background task alongside the host application.
Every tick runs the full flush cycle. A failing tick is logged to the
``logrelay.scheduler`` logger (never routed back into the relay) and the
next tick runs as usual.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger("logrelay.scheduler")

# Seconds between ticks
DEFAULT_INTERVAL = 1.5

# Seconds stop() waits for an in-flight tick
DEFAULT_STOP_TIMEOUT = 5.0


class FlushScheduler:
    """Background flush scheduler.

    Usage:
        scheduler = FlushScheduler(on_tick=relay.flush)
        await scheduler.start()
        # ... later ...
        await scheduler.stop()
    """

    def __init__(
        self,
        on_tick: Callable[[], Awaitable[None]],
        interval: float = DEFAULT_INTERVAL,
    ):
        """Initialize scheduler.

        Args:
            on_tick: Async callback run once per tick.
            interval: Seconds between the end of one tick and the next.
        """
        if interval <= 0:
            raise ValueError(f"Flush interval must be positive, got {interval}")
        self._on_tick = on_tick
        self.interval = interval
        self._running = False
        self._wakeup: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the scheduler background task."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._running = True
        self._wakeup = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop())
        logger.debug(f"Scheduler started (every {self.interval}s)")

    async def stop(self, timeout: float = DEFAULT_STOP_TIMEOUT):
        """Stop the scheduler.

        The pending sleep is cut short; a tick already in flight gets up to
        ``timeout`` seconds to finish before it is cancelled.
        """
        if not self._task:
            return

        self._running = False
        self._wakeup.set()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Flush still running after {timeout}s, cancelling it")
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.debug("Scheduler stopped")

    async def _sleep(self):
        try:
            await asyncio.wait_for(self._wakeup.wait(), self.interval)
        except asyncio.TimeoutError:
            pass

    async def _run_loop(self):
        """Main scheduler loop."""
        while self._running:
            await self._sleep()
            if not self._running:
                break
            try:
                await self._on_tick()
            except Exception as e:
                logger.error(f"Scheduled flush failed: {e}", exc_info=True)
