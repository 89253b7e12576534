"""Exponential back-off with jitter around a fallible async operation.

Delay schedule (milliseconds, before jitter)::

    initial_delay, initial_delay * factor, initial_delay * factor ** 2, ...

each capped at ``max_delay``.  A random jitter of up to 20 % of the delay
is added on top, so a single sleep never exceeds ``1.2 * max_delay``.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, List, Optional, TypeVar

from core.config import RetryConfig
from core.reporter import TaskReporter

logger = logging.getLogger(__name__)

T = TypeVar("T")

JITTER_RATIO = 0.2

SleepFn = Callable[[float], Awaitable[None]]


class RetryPolicy:
    """Run an operation up to ``config.max_retries`` times.

    Args:
        config: Back-off parameters.
        sleep: Coroutine used for every wait (seconds); injectable for tests.
        reporter: Where retry warnings go.
        rand: Source of ``[0, 1)`` floats for jitter.
    """

    def __init__(
        self,
        config: RetryConfig,
        sleep: SleepFn = asyncio.sleep,
        reporter: Optional[TaskReporter] = None,
        rand: Callable[[], float] = random.random,
    ):
        self.config = config
        self.sleep = sleep
        self.reporter = reporter or TaskReporter(logger)
        self.rand = rand

    def backoff_delays(self) -> List[float]:
        """Jitter-free delays (ms) slept between consecutive attempts."""
        delays: List[float] = []
        delay = self.config.initial_delay
        for _ in range(self.config.max_retries - 1):
            delays.append(delay)
            delay = min(delay * self.config.backoff_factor, self.config.max_delay)
        return delays

    def _with_jitter(self, delay: float) -> float:
        return delay + delay * JITTER_RATIO * self.rand()

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        label: Optional[str] = None,
    ) -> T:
        """Await ``operation()`` until it succeeds or attempts run out.

        Raises:
            Exception: The exception of the last attempt, unchanged.
        """
        attempts = self.config.max_retries
        delays = self.backoff_delays()
        prefix = f"{label}: " if label else ""

        for attempt in range(1, attempts + 1):
            try:
                return await operation()
            except Exception as e:
                if attempt >= attempts:
                    self.reporter.error(
                        f"{prefix}All {attempts} retry attempts failed: {e}"
                    )
                    raise
                wait_ms = self._with_jitter(delays[attempt - 1])
                self.reporter.warn(
                    f"{prefix}Attempt {attempt} failed, retrying in "
                    f"{wait_ms / 1000:.1f}s... ({e})"
                )
                await self.sleep(wait_ms / 1000)

        # max_retries >= 1 guarantees the loop returns or raises
        raise RuntimeError("unreachable")
