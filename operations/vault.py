"""hstMOVE vault transactions: stake, compound and unstake."""

from typing import Any, List

from core.config import BotSettings
from operations.base import TransactionOperation


class Stake(TransactionOperation):
    """Stake ``amounts.stake_amount`` hstMOVE into the vault."""

    name = "stake"
    label = "Stake hstMOVE"
    function = "stake"

    def describe(self, settings: BotSettings) -> str:
        return f"Staking {settings.amounts.stake_amount} hstMOVE tokens"

    def arguments(self, settings: BotSettings) -> List[Any]:
        return [str(settings.amounts.stake_base_units)]


class Compound(TransactionOperation):
    name = "compound"
    label = "Compound"
    function = "compound"

    def describe(self, settings: BotSettings) -> str:
        return "Compounding stake rewards"


class Unstake(TransactionOperation):
    """Withdraw ``amounts.unstake_amount`` hstMOVE from the vault."""

    name = "unstake"
    label = "Unstake"
    function = "unstake"

    def describe(self, settings: BotSettings) -> str:
        return f"Unstaking {settings.amounts.unstake_amount} hstMOVE tokens"

    def arguments(self, settings: BotSettings) -> List[Any]:
        return [str(settings.amounts.unstake_base_units)]
