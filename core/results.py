"""Result types flowing up from operations to the batch summary.

Classes:
    OperationStatus: ``SUCCESS`` / ``FAILURE`` / ``NOT_RUN`` tag.
    Confirmation: Whether a submitted transaction was seen on-chain.
    TxReceipt: Payload of the transaction-submitting operations.
    OperationResult: Tagged outcome of one operation.
    AccountRunRecord: Per-account mapping of operation -> result.
    RunOutcome: What the account pipeline hands back to the batch runner.
    BatchSummary: Aggregate of one pass over all accounts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from core.config import OPERATION_ORDER


class OperationStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    NOT_RUN = "not_run"


class Confirmation(Enum):
    """Outcome of the post-submission lookup.

    ``SUBMITTED_UNCONFIRMED`` still counts as success: the node accepted
    the transaction but the lookup by hash failed.
    """

    CONFIRMED = "confirmed"
    SUBMITTED_UNCONFIRMED = "submitted_unconfirmed"


@dataclass(frozen=True)
class TxReceipt:
    """Submitted transaction hash plus confirmation state.

    Attributes:
        hash: Transaction hash returned by the node on submission.
        confirmation: :class:`Confirmation` outcome.
        details: Full transaction returned by the lookup (``None`` when
            the lookup failed).
    """

    hash: str
    confirmation: Confirmation
    details: Optional[Dict[str, Any]] = None

    @property
    def confirmed(self) -> bool:
        return self.confirmation is Confirmation.CONFIRMED


@dataclass(frozen=True)
class OperationResult:
    """Tagged outcome of a single operation for one account."""

    status: OperationStatus
    payload: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, payload: Any = None) -> "OperationResult":
        return cls(OperationStatus.SUCCESS, payload=payload)

    @classmethod
    def failure(cls, error: BaseException) -> "OperationResult":
        return cls(OperationStatus.FAILURE, error=error)

    @classmethod
    def not_run(cls) -> "OperationResult":
        return cls(OperationStatus.NOT_RUN)

    @property
    def succeeded(self) -> bool:
        return self.status is OperationStatus.SUCCESS

    @property
    def failed(self) -> bool:
        return self.status is OperationStatus.FAILURE


def _all_not_run() -> Dict[str, OperationResult]:
    return {name: OperationResult.not_run() for name in OPERATION_ORDER}


@dataclass
class AccountRunRecord:
    """Results of one pipeline execution, keyed by operation name.

    Every operation starts out ``NOT_RUN``; the pipeline overwrites
    entries as operations finish.
    """

    results: Dict[str, OperationResult] = field(default_factory=_all_not_run)

    def __getitem__(self, operation: str) -> OperationResult:
        return self.results[operation]

    def record(self, operation: str, result: OperationResult) -> None:
        self.results[operation] = result

    def completed(self) -> List[str]:
        """Names of operations that succeeded, in execution order."""
        return [name for name, res in self.results.items() if res.succeeded]

    def not_run(self) -> List[str]:
        return [
            name for name, res in self.results.items()
            if res.status is OperationStatus.NOT_RUN
        ]

    def failure(self) -> Optional[str]:
        """Name of the operation that failed, if any."""
        for name, res in self.results.items():
            if res.failed:
                return name
        return None


@dataclass
class RunOutcome:
    """Result of processing one account.

    Attributes:
        completed_all: ``True`` when every enabled operation succeeded.
        record: Per-operation results.
        address: Account address (``None`` if the key was unusable).
        error: Error that ended the account early, if any.
    """

    completed_all: bool
    record: AccountRunRecord = field(default_factory=AccountRunRecord)
    address: Optional[str] = None
    error: Optional[BaseException] = None


@dataclass
class BatchSummary:
    """Per-account outcomes of one batch, in processing order."""

    outcomes: List[RunOutcome] = field(default_factory=list)
    proxies_assigned: List[Optional[str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.completed_all)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded
