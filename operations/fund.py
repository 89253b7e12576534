"""Native MOVE faucet request."""

import logging
from typing import Any, Dict

from operations.base import OperationContext, RemoteOperation

logger = logging.getLogger(__name__)


class RequestFunds(RemoteOperation):
    """POST ``{address, amount}`` to the faucet's ``/fund`` endpoint.

    When the faucet reports pending funding transactions the attempt waits
    ``faucet_settle_seconds`` so later operations see the new balance.
    """

    name = "fund"
    label = "Claim Native MOVE"

    async def attempt(self, ctx: OperationContext) -> Dict[str, Any]:
        ctx.reporter.info(
            f"Requesting native MOVE funds for address: {ctx.account.address}"
        )
        try:
            response = await ctx.faucet.post(
                ctx.account.address, ctx.settings.faucet_amount,
            )
        except Exception as e:
            ctx.reporter.error(f"Error requesting funds: {e}")
            raise

        if ctx.faucet.pending_hashes(response):
            ctx.reporter.info("Waiting for faucet transaction to complete...")
            await ctx.sleep(ctx.settings.faucet_settle_seconds)
        return response
