"""
Remote operations for the Helix task bot.

Each operation performs exactly one attempt against the Movement testnet
and raises on failure; :class:`~core.retry.RetryPolicy` owns the retries.
Transaction-based operations share the build / sign / submit / confirm
flow of :class:`TransactionOperation`.

Submodules:
    base: ``RemoteOperation``, ``TransactionOperation``, ``OperationContext``.
    fund: ``RequestFunds`` – native MOVE from the testnet faucet.
    claim: ``ClaimTokens`` – mint hstMOVE via ``eigenfi_token_minter``.
    vault: ``Stake``, ``Compound``, ``Unstake`` – hstMOVE vault calls.
"""

from operations.base import OperationContext, RemoteOperation, TransactionOperation
from operations.claim import ClaimTokens
from operations.fund import RequestFunds
from operations.vault import Compound, Stake, Unstake

__all__ = [
    "OperationContext",
    "RemoteOperation",
    "TransactionOperation",
    "RequestFunds",
    "ClaimTokens",
    "Stake",
    "Compound",
    "Unstake",
]
