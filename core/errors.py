"""Exception types raised by the task engine and its remote clients."""

from typing import Optional


class RemoteOperationError(Exception):
    """Base class for failures talking to the node or the faucet."""


class TransientRemoteError(RemoteOperationError):
    """Network failure or non-2xx HTTP response; retried with back-off.

    Attributes:
        status: HTTP status code, or ``None`` for transport errors.
        body: Truncated response body (may be empty).
    """

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class ConfirmationUnavailable(RemoteOperationError):
    """A submitted transaction could not be looked up (e.g. indexing lag)."""

    def __init__(self, txn_hash: str, reason: str = ""):
        message = f"Transaction {txn_hash} not available"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.txn_hash = txn_hash


class AccountConstructionError(ValueError):
    """A private key could not be turned into an account."""


class NoAccountsError(RuntimeError):
    """The private-key source yielded no keys."""
