"""Per-account operation pipeline.

Runs the enabled operations for one account in the fixed order
``fund -> claim -> stake -> compound -> unstake``, each wrapped in the
shared :class:`~core.retry.RetryPolicy`.  The first operation that still
fails after its retries stops the account; the remaining operations stay
``NOT_RUN`` and the failure is returned, never raised, so the batch can
move on to the next account.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from core.account import Account
from core.chain_client import AccountClients
from core.config import OPERATION_ORDER, BotSettings, TaskConfig
from core.registry import build_operations
from core.reporter import TaskReporter, TaskStatus
from core.results import AccountRunRecord, OperationResult, RunOutcome
from core.retry import RetryPolicy
from operations.base import OperationContext, RemoteOperation

logger = logging.getLogger(__name__)

ClientFactory = Callable[[BotSettings, Optional[str]], AccountClients]


def mask_proxy(proxy: str) -> str:
    """Drop credentials from a proxy URL for logging."""
    if "@" not in proxy:
        return proxy
    scheme, _, rest = proxy.rpartition("://")
    endpoint = rest.rsplit("@", 1)[1]
    return f"{scheme}://{endpoint}" if scheme else endpoint


class AccountPipeline:
    """Execute the operation sequence for one account at a time.

    Args:
        settings: Immutable bot settings.
        operations: Operation instances; defaults to the full registry.
            They are always run in ``OPERATION_ORDER``.
        retry_policy: Shared retry policy; built from ``settings.retry``
            when omitted.
        reporter: Progress / logging surface.
        client_factory: Builds the node and faucet clients for an account.
        sleep: Coroutine used for the inter-task delay.
    """

    def __init__(
        self,
        settings: BotSettings,
        operations: Optional[Iterable[RemoteOperation]] = None,
        retry_policy: Optional[RetryPolicy] = None,
        reporter: Optional[TaskReporter] = None,
        client_factory: ClientFactory = AccountClients.create,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings
        self.reporter = reporter or TaskReporter()
        self.sleep = sleep
        self.retry_policy = retry_policy or RetryPolicy(
            settings.retry, sleep=sleep, reporter=self.reporter,
        )
        self.client_factory = client_factory
        ops = list(operations) if operations is not None else build_operations()
        self.operations: List[RemoteOperation] = sorted(
            ops, key=lambda op: OPERATION_ORDER.index(op.name),
        )

    async def run(
        self,
        account: Account,
        task_config: Optional[TaskConfig] = None,
    ) -> RunOutcome:
        """Run every enabled operation for *account*.

        Returns:
            ``RunOutcome(completed_all=True)`` when all enabled operations
            succeeded, otherwise an outcome carrying the failing error.
        """
        tasks = task_config or self.settings.tasks
        record = AccountRunRecord()
        enabled = [op for op in self.operations if tasks.is_enabled(op.name)]

        clients = self.client_factory(self.settings, account.proxy)
        ctx = OperationContext(
            account=account,
            chain=clients.chain,
            faucet=clients.faucet,
            settings=self.settings,
            sleep=self.sleep,
            reporter=self.reporter,
        )
        try:
            for op in self.operations:
                if op not in enabled:
                    self.reporter.task(op.label, TaskStatus.SKIP)
                    continue

                self.reporter.task(op.label, TaskStatus.START)
                try:
                    payload = await self.retry_policy.execute(
                        lambda op=op: op.attempt(ctx), label=op.label,
                    )
                except Exception as e:
                    record.record(op.name, OperationResult.failure(e))
                    self.reporter.task(op.label, TaskStatus.FAIL)
                    self._report_partial(account, record, e)
                    return RunOutcome(
                        completed_all=False,
                        record=record,
                        address=account.address,
                        error=e,
                    )

                record.record(op.name, OperationResult.success(payload))
                self.reporter.task(op.label, TaskStatus.COMPLETE)

                if op is not enabled[-1]:
                    delay = self.settings.delay_between_tasks / 1000
                    self.reporter.info(f"Waiting {delay:g}s before next task...")
                    await self.sleep(delay)
        finally:
            await clients.close()

        self.reporter.success(f"All tasks completed for account {account.address}")
        return RunOutcome(completed_all=True, record=record, address=account.address)

    def _report_partial(
        self, account: Account, record: AccountRunRecord, error: BaseException,
    ) -> None:
        self.reporter.error(f"Error processing account {account.address}: {error}")
        completed = record.completed()
        if completed:
            self.reporter.info(f"Completed tasks before failure: {', '.join(completed)}")
        else:
            self.reporter.info("No tasks completed before failure")

    async def process(
        self,
        private_key: str,
        proxy: Optional[str],
        index: int,
        total: int,
    ) -> RunOutcome:
        """Build the account for *private_key* and run its pipeline.

        Errors raised before the first operation (bad key, client setup)
        mark the account failed with nothing attempted.
        """
        try:
            account = Account.from_private_key(private_key, proxy=proxy)
        except Exception as e:
            self.reporter.error(f"Invalid private key for account {index + 1}: {e}")
            return RunOutcome(completed_all=False, error=e)

        self.reporter.account_progress(index, total, account.address)
        if proxy:
            self.reporter.info(f"Using proxy: {mask_proxy(proxy)}")
        else:
            self.reporter.info("No proxy assigned, using direct connection")

        try:
            return await self.run(account)
        except Exception as e:
            self.reporter.error(f"Error processing account {account.address}: {e}")
            return RunOutcome(completed_all=False, address=account.address, error=e)
