"""Scheduler — runs a validation job periodically on the event loop."""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger()

Job = Callable[[], Awaitable[None]]
ErrorHandler = Callable[[Exception], Awaitable[None]]


class ValidationScheduler:
    """Fixed-interval runner backed by a single asyncio task.

    Runs are never overlapped: the next interval starts after the previous run
    finishes. A failing run is logged and reported to ``on_error``; the
    schedule continues.
    """

    def __init__(
        self,
        job: Job,
        interval_seconds: float,
        immediate: bool = True,
        on_error: Optional[ErrorHandler] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("Schedule interval must be positive")
        self.job = job
        self.interval_seconds = interval_seconds
        self.immediate = immediate
        self.on_error = on_error
        self.runs = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the schedule. Must be called from a running event loop."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.info("schedule_started", interval_seconds=self.interval_seconds, immediate=self.immediate)

    def stop(self) -> None:
        """Cancel the schedule without waiting for it to unwind."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.info("schedule_stopped", runs=self.runs)

    async def aclose(self) -> None:
        """Cancel the schedule and wait until it has stopped."""
        task = self._task
        self.stop()
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        if self.immediate:
            await self._run_once()
        while True:
            await asyncio.sleep(self.interval_seconds)
            await self._run_once()

    async def _run_once(self) -> None:
        self.runs += 1
        try:
            await self.job()
        except Exception as e:
            logger.error("scheduled_validation_failed", run=self.runs, error=str(e))
            if self.on_error is not None:
                await self.on_error(e)
