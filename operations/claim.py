"""hstMOVE token claim (``eigenfi_token_minter::mint_fa``)."""

from typing import Any, List

from core.config import BotSettings
from operations.base import MINTER_MODULE, TransactionOperation


class ClaimTokens(TransactionOperation):
    name = "claim"
    label = "Claim hstMOVE"
    module = MINTER_MODULE
    function = "mint_fa"

    def describe(self, settings: BotSettings) -> str:
        return "Claiming hstMOVE tokens"

    def arguments(self, settings: BotSettings) -> List[Any]:
        return [settings.hst_move_metadata, str(settings.claim_amount)]
