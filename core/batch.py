"""Batch runner: one sequential pass of the pipeline over every account."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from core.config import BotSettings
from core.dashboard import RunDashboard
from core.errors import NoAccountsError
from core.pipeline import AccountPipeline
from core.reporter import TaskReporter
from core.results import BatchSummary
from core.sources import load_private_keys, load_proxies

logger = logging.getLogger(__name__)


def assign_proxies(
    key_count: int, proxies: Sequence[str],
) -> List[Optional[str]]:
    """Index-aligned proxy for each account; ``None`` past the proxy list."""
    return [proxies[i] if i < len(proxies) else None for i in range(key_count)]


class BatchRunner:
    """Process all accounts strictly one after another.

    Args:
        settings: Immutable bot settings.
        pipeline: Per-account pipeline.
        reporter: Progress / logging surface.
        sleep: Coroutine used for the inter-account delay.
        dashboard: Renders the configuration and task summaries.
        key_loader: Returns the private keys for a file path.
        proxy_loader: Returns the proxy URLs for a file path.
    """

    def __init__(
        self,
        settings: BotSettings,
        pipeline: AccountPipeline,
        reporter: Optional[TaskReporter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        dashboard: Optional[RunDashboard] = None,
        key_loader: Callable[[str], List[str]] = load_private_keys,
        proxy_loader: Callable[[str], List[str]] = load_proxies,
    ):
        self.settings = settings
        self.pipeline = pipeline
        self.reporter = reporter or TaskReporter()
        self.sleep = sleep
        self.dashboard = dashboard or RunDashboard()
        self.key_loader = key_loader
        self.proxy_loader = proxy_loader

    @classmethod
    def from_settings(
        cls,
        settings: BotSettings,
        reporter: Optional[TaskReporter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> "BatchRunner":
        reporter = reporter or TaskReporter()
        pipeline = AccountPipeline(settings, reporter=reporter, sleep=sleep)
        return cls(settings, pipeline, reporter=reporter, sleep=sleep)

    async def run_batch(
        self, private_keys: Sequence[str], proxies: Sequence[str],
    ) -> BatchSummary:
        """Run the pipeline for every key, pairing ``key[i]`` with ``proxy[i]``."""
        total = len(private_keys)
        if proxies and len(proxies) != total:
            self.reporter.warn(
                f"Number of proxies ({len(proxies)}) does not match number of "
                f"private keys ({total}); accounts without a proxy connect directly"
            )

        assigned = assign_proxies(total, proxies)
        summary = BatchSummary(proxies_assigned=assigned)

        for index, private_key in enumerate(private_keys):
            outcome = await self.pipeline.process(
                private_key, assigned[index], index, total,
            )
            summary.outcomes.append(outcome)

            if index < total - 1:
                delay = self.settings.delay_between_accounts / 1000
                self.reporter.info(f"Waiting {delay:g}s before processing next account...")
                await self.sleep(delay)

        self.reporter.success(
            f"Batch finished: {summary.succeeded}/{summary.total} accounts completed all tasks"
        )
        return summary

    async def run(self) -> BatchSummary:
        """Load keys and proxies, then run one full batch.

        Raises:
            NoAccountsError: The key file is missing or empty.
        """
        private_keys = self.key_loader(self.settings.private_keys_file)
        if not private_keys:
            raise NoAccountsError(
                f"No private keys found in {self.settings.private_keys_file}"
            )
        proxies = self.proxy_loader(self.settings.proxies_file)
        if not proxies:
            self.reporter.warn("No proxies found, using direct connections")

        self.reporter.info(f"Loaded {len(private_keys)} accounts and {len(proxies)} proxies")
        self.dashboard.show_config_summary(self.settings, len(private_keys), len(proxies))

        summary = await self.run_batch(private_keys, proxies)
        self.dashboard.show_task_summary(summary)
        return summary
