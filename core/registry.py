"""Operation registry for the Helix task bot.

Maps operation names to their implementing classes.  The pipeline asks
for operations in :data:`~core.config.OPERATION_ORDER`; the registry only
says which class implements each name.

Usage::

    from core.registry import build_operations

    operations = build_operations()
    [op.name for op in operations]  # fund, claim, stake, compound, unstake
"""

from typing import Dict, List, Sequence, Type

from core.config import OPERATION_ORDER
from operations import ClaimTokens, Compound, RemoteOperation, RequestFunds, Stake, Unstake

OPERATION_REGISTRY: Dict[str, Type[RemoteOperation]] = {
    "fund": RequestFunds,
    "claim": ClaimTokens,
    "stake": Stake,
    "compound": Compound,
    "unstake": Unstake,
}


def build_operations(names: Sequence[str] = OPERATION_ORDER) -> List[RemoteOperation]:
    """Instantiate the operations for *names*, in the given order.

    Raises:
        KeyError: A name has no registered implementation.
    """
    unknown = [name for name in names if name not in OPERATION_REGISTRY]
    if unknown:
        raise KeyError(f"Unknown operation: {', '.join(unknown)}")
    return [OPERATION_REGISTRY[name]() for name in names]
