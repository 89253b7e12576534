"""Task progress reporting.

:class:`TaskReporter` is the single logging surface used by the retry
engine, the account pipeline, the batch runner and the scheduler.  It is
injected everywhere so tests can swap in a ``MagicMock`` and inspect the
calls instead of parsing log output.
"""

import logging
from enum import Enum
from typing import Optional, Union

from core.logging_setup import SUCCESS

PROGRESS_BAR_SIZE = 20


class TaskStatus(str, Enum):
    """Lifecycle markers reported for each pipeline operation."""

    START = "start"
    SKIP = "skip"
    COMPLETE = "complete"
    FAIL = "fail"


def generate_progress_bar(current: int, total: int, size: int = PROGRESS_BAR_SIZE) -> str:
    """Render an ASCII progress bar such as ``█████░░░░░ 50%``."""
    if total <= 0:
        return "░" * size + " 0%"
    progress = round((current / total) * size)
    progress = max(0, min(progress, size))
    percentage = round((current / total) * 100)
    return f"{'█' * progress}{'░' * (size - progress)} {percentage}%"


class TaskReporter:
    """Logger capability: info / warn / error / success / task / progress."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("helix")

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def success(self, message: str) -> None:
        self.logger.log(SUCCESS, message)

    def task(self, name: str, status: Union[TaskStatus, str]) -> None:
        """Report a task lifecycle transition.

        Raises:
            ValueError: *status* is not one of start / skip / complete / fail.
        """
        status = TaskStatus(status)
        if status is TaskStatus.START:
            self.logger.info(f"▶ Starting: {name}")
        elif status is TaskStatus.SKIP:
            self.logger.info(f"↷ Skipping: {name} (disabled in config)")
        elif status is TaskStatus.COMPLETE:
            self.logger.log(SUCCESS, f"✓ Completed: {name}")
        else:
            self.logger.error(f"✗ Failed: {name}")

    def account_progress(self, index: int, total: int, address: str) -> None:
        """Announce the account at zero-based *index* out of *total*."""
        bar = generate_progress_bar(index + 1, total)
        self.logger.info(f"ACCOUNT [{index + 1}/{total}] {bar} {address}")
