"""Recurring batch scheduler.

State machine::

    IDLE --run_once()--> RUNNING --> IDLE
    IDLE --run_forever()--> RUNNING --> WAITING --> RUNNING --> ...

A scheduled pass that raises is logged and treated like a finished pass;
the scheduler then waits the full interval before the next one.  The wait
is split into one-minute ticks so the remaining time can be logged and a
:meth:`Scheduler.stop` request is noticed within a minute.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Optional

from core.batch import BatchRunner
from core.config import BotSettings
from core.dashboard import RunDashboard
from core.reporter import TaskReporter
from core.results import BatchSummary

logger = logging.getLogger(__name__)

WAIT_TICK_SECONDS = 60


class SchedulerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    WAITING = "waiting"


def format_time_remaining(seconds: float) -> str:
    """Format a duration as ``HH:MM:SS`` (hours may exceed 24)."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class Scheduler:
    """Run the batch once, or every ``scheduler.interval_hours``."""

    def __init__(
        self,
        settings: BotSettings,
        runner: BatchRunner,
        reporter: Optional[TaskReporter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        dashboard: Optional[RunDashboard] = None,
    ):
        self.settings = settings
        self.runner = runner
        self.reporter = reporter or TaskReporter()
        self.sleep = sleep
        self.dashboard = dashboard or RunDashboard()
        self.state = SchedulerState.IDLE
        self.run_count = 0
        self._stop_event = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Ask the loop to exit at its next wait tick."""
        self.reporter.info("Scheduler stop requested")
        self._stop_event.set()

    async def run_once(self) -> BatchSummary:
        """Run a single batch; errors propagate to the caller."""
        self.state = SchedulerState.RUNNING
        try:
            return await self.runner.run()
        finally:
            self.state = SchedulerState.IDLE

    async def run_forever(self, max_runs: Optional[int] = None) -> None:
        """Run the batch repeatedly until stopped or *max_runs* passes are done."""
        interval = self.settings.scheduler.interval_seconds
        self.reporter.info(
            f"Scheduler enabled: running every "
            f"{self.settings.scheduler.interval_hours:g} hours"
        )

        while not self._stop_event.is_set():
            self.run_count += 1
            self.state = SchedulerState.RUNNING
            self.dashboard.show_run_banner(self.run_count)
            try:
                await self.runner.run()
            except Exception as e:
                logger.debug("Scheduled run %d failed", self.run_count, exc_info=True)
                self.reporter.error(f"Error in scheduled run: {e}")

            if max_runs is not None and self.run_count >= max_runs:
                break

            self.state = SchedulerState.WAITING
            await self._wait(interval)

        self.state = SchedulerState.IDLE
        self.reporter.info(f"Scheduler stopped after {self.run_count} run(s)")

    async def _wait(self, seconds: float) -> None:
        next_run = datetime.now() + timedelta(seconds=seconds)
        self.reporter.info(
            f"Next run scheduled at {next_run.strftime('%Y-%m-%d %H:%M:%S')}"
        )
        remaining = seconds
        while remaining > 0 and not self._stop_event.is_set():
            self.reporter.info(f"Time until next run: {format_time_remaining(remaining)}")
            tick = min(WAIT_TICK_SECONDS, remaining)
            await self.sleep(tick)
            remaining -= tick

    async def start(self, max_runs: Optional[int] = None) -> Optional[BatchSummary]:
        """Dispatch on ``scheduler.enabled``: loop forever or run once."""
        if self.settings.scheduler.enabled:
            await self.run_forever(max_runs=max_runs)
            return None
        return await self.run_once()
