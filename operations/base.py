"""Base classes for the per-account remote operations.

Every operation is a single-attempt unit: :meth:`RemoteOperation.attempt`
performs one try and raises on failure, leaving retries to
:class:`~core.retry.RetryPolicy`.  Operations hold no per-account state;
everything an attempt needs travels in an :class:`OperationContext`.

:class:`TransactionOperation` implements the shared build -> sign ->
submit -> confirm flow; subclasses only say which entry function to call
and with what arguments.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List

from core.account import Account
from core.chain_client import FaucetClient, MovementClient, entry_function_payload
from core.config import BotSettings
from core.errors import RemoteOperationError
from core.reporter import TaskReporter
from core.results import Confirmation, TxReceipt

logger = logging.getLogger(__name__)

VAULT_MODULE = "eigenfi_move_vault_hstmove"
MINTER_MODULE = "eigenfi_token_minter"


@dataclass
class OperationContext:
    """Everything one operation attempt needs for a single account."""

    account: Account
    chain: MovementClient
    faucet: FaucetClient
    settings: BotSettings
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    reporter: TaskReporter = field(default_factory=TaskReporter)


class RemoteOperation(ABC):
    """One named step of the account pipeline.

    Attributes:
        name: Registry key (``fund``, ``claim`` ...).
        label: Human-readable name used in progress output.
    """

    name: str = ""
    label: str = ""

    def describe(self, settings: BotSettings) -> str:
        return self.label or self.name

    @abstractmethod
    async def attempt(self, ctx: OperationContext) -> Any:
        """Perform one attempt and return the operation's payload."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class TransactionOperation(RemoteOperation):
    """An operation that submits one entry-function transaction."""

    module: str = VAULT_MODULE
    function: str = ""

    def function_id(self, settings: BotSettings) -> str:
        return f"{settings.module_address}::{self.module}::{self.function}"

    def arguments(self, settings: BotSettings) -> List[Any]:
        return []

    def build_payload(self, settings: BotSettings) -> Dict[str, Any]:
        return entry_function_payload(
            self.function_id(settings), self.arguments(settings),
        )

    async def attempt(self, ctx: OperationContext) -> TxReceipt:
        description = self.describe(ctx.settings)
        ctx.reporter.info(f"{description} for address: {ctx.account.address}")
        try:
            txn = await ctx.chain.generate_transaction(
                ctx.account.address, self.build_payload(ctx.settings),
            )
            signed = await ctx.chain.sign_transaction(ctx.account, txn)
            pending = await ctx.chain.submit_transaction(signed)
        except Exception as e:
            ctx.reporter.error(f"Error during {description}: {e}")
            raise

        txn_hash = pending["hash"]
        ctx.reporter.info(f"{self.label} transaction submitted with hash: {txn_hash}")
        return await self.confirm(ctx, txn_hash)

    async def confirm(self, ctx: OperationContext, txn_hash: str) -> TxReceipt:
        """Wait the confirmation delay, then look the transaction up.

        A failed lookup never fails the operation: the node already
        accepted the transaction, so it is reported as submitted but
        unconfirmed.  The same holds while the node still lists it as
        pending.
        """
        await ctx.sleep(ctx.settings.confirmation_delay_seconds)
        try:
            details = await ctx.chain.get_transaction_by_hash(txn_hash)
        except RemoteOperationError as e:
            ctx.reporter.warn(
                f"Unable to get transaction details, but transaction was submitted ({e})"
            )
            return TxReceipt(txn_hash, Confirmation.SUBMITTED_UNCONFIRMED)

        if details.get("type") == "pending_transaction":
            ctx.reporter.warn(f"{self.label} transaction {txn_hash} is still pending")
            return TxReceipt(txn_hash, Confirmation.SUBMITTED_UNCONFIRMED, details)

        if details.get("success") is False:
            ctx.reporter.warn(
                f"{self.label} transaction {txn_hash} executed with status "
                f"{details.get('vm_status', 'unknown')}"
            )
        else:
            ctx.reporter.success(f"{self.label} transaction completed successfully")
        return TxReceipt(txn_hash, Confirmation.CONFIRMED, details)
