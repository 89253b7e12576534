"""HTTP clients for the Movement node REST API and the testnet faucet.

Both clients share one pattern: a lazily created ``aiohttp.ClientSession``
with browser-like headers, every request routed through the account's
proxy (HTTP proxies per request, socks proxies through an
``aiohttp_socks.ProxyConnector``), and any transport failure or non-2xx
status raised as :class:`~core.errors.TransientRemoteError` so the retry
policy can act on it.

Transactions are built as JSON entry-function payloads, turned into a BCS
signing message by the node (``/transactions/encode_submission``), signed
locally with the account's Ed25519 key, and submitted as JSON.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import aiohttp
from aiohttp_socks import ProxyConnector

from core.account import Account
from core.config import BotSettings
from core.errors import ConfirmationUnavailable, TransientRemoteError

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36"
)

NODE_HEADERS: Dict[str, str] = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "en-US,en;q=0.9",
    "content-type": "application/json",
    "origin": "chrome-extension://ejjladinnckdgjemekebdpeokbikhfci",
    "user-agent": USER_AGENT,
    "x-aptos-client": "aptos-typescript-sdk/1.21.0",
}

FAUCET_HEADERS: Dict[str, str] = {
    **NODE_HEADERS,
    "priority": "u=1, i",
    "sec-ch-ua": '"Chromium";v="134", "Not:A-Brand";v="24", "Google Chrome";v="134"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "sec-fetch-dest": "empty",
    "sec-fetch-mode": "cors",
    "sec-fetch-site": "none",
    "x-aptos-typescript-sdk-origin-method": "fundAccount",
    "x-indexer-client": "aptos-petra",
}

ERROR_BODY_LIMIT = 500


def entry_function_payload(
    function: str,
    arguments: Sequence[Any] = (),
    type_arguments: Sequence[str] = (),
) -> Dict[str, Any]:
    """Build a JSON entry-function payload (``addr::module::function``)."""
    return {
        "type": "entry_function_payload",
        "function": function,
        "type_arguments": list(type_arguments),
        "arguments": list(arguments),
    }


class _HttpClient:
    """Shared session handling and error mapping for the REST clients."""

    def __init__(
        self,
        base_url: str,
        proxy: Optional[str] = None,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.proxy = proxy
        self.timeout = timeout
        self.headers = dict(headers or NODE_HEADERS)
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def uses_socks(self) -> bool:
        return bool(self.proxy) and self.proxy.lower().startswith("socks")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            # aiohttp only speaks HTTP proxies; socks goes through the connector
            connector = ProxyConnector.from_url(self.proxy) if self.uses_socks else None
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers=self.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def _request(
        self,
        method: str,
        path: str,
        payload: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            TransientRemoteError: Transport error, timeout, non-2xx status
                or an undecodable body.
        """
        url = f"{self.base_url}{path}"
        try:
            session = await self._get_session()
            async with session.request(
                method, url, json=payload,
                proxy=None if self.uses_socks else self.proxy,
            ) as response:
                text = await response.text()
                if not 200 <= response.status < 300:
                    raise TransientRemoteError(
                        f"HTTP {response.status} from {method} {path}",
                        status=response.status,
                        body=text[:ERROR_BODY_LIMIT],
                    )
        except aiohttp.ClientError as e:
            raise TransientRemoteError(f"{method} {path} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransientRemoteError(f"{method} {path} timed out") from e

        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            raise TransientRemoteError(
                f"Invalid JSON from {method} {path}",
                status=response.status,
                body=text[:ERROR_BODY_LIMIT],
            ) from e

    async def close(self) -> None:
        if self._session:
            await self._session.close()


class MovementClient(_HttpClient):
    """Node REST client: build, sign, submit and look up transactions."""

    def __init__(
        self,
        node_url: str,
        proxy: Optional[str] = None,
        timeout: float = 30.0,
        max_gas_amount: int = 2_000_000,
        gas_unit_price: int = 100,
        expiration_seconds: int = 600,
    ):
        super().__init__(node_url, proxy=proxy, timeout=timeout, headers=NODE_HEADERS)
        self.max_gas_amount = max_gas_amount
        self.gas_unit_price = gas_unit_price
        self.expiration_seconds = expiration_seconds

    async def get_account(self, address: str) -> Dict[str, Any]:
        """Fetch on-chain account info (``sequence_number``, ``authentication_key``)."""
        return await self._request("GET", f"/accounts/{address}")

    async def generate_transaction(
        self, sender: str, payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Build an unsigned transaction for *sender* using its next sequence number."""
        account_info = await self.get_account(sender)
        return {
            "sender": sender,
            "sequence_number": str(account_info["sequence_number"]),
            "max_gas_amount": str(self.max_gas_amount),
            "gas_unit_price": str(self.gas_unit_price),
            "expiration_timestamp_secs": str(int(time.time()) + self.expiration_seconds),
            "payload": payload,
        }

    async def sign_transaction(
        self, account: Account, txn: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Return *txn* with an Ed25519 signature attached."""
        signing_message = await self._request(
            "POST", "/transactions/encode_submission", txn,
        )
        if not isinstance(signing_message, str):
            raise TransientRemoteError(
                f"Unexpected encode_submission response: {signing_message!r}"
            )
        message = bytes.fromhex(signing_message.removeprefix("0x"))
        signature = account.sign(message)
        return {
            **txn,
            "signature": {
                "type": "ed25519_signature",
                "public_key": account.public_key_hex,
                "signature": "0x" + signature.hex(),
            },
        }

    async def submit_transaction(self, signed_txn: Dict[str, Any]) -> Dict[str, Any]:
        """Submit a signed transaction; returns the pending transaction."""
        pending = await self._request("POST", "/transactions", signed_txn)
        if not isinstance(pending, dict) or not pending.get("hash"):
            raise TransientRemoteError(
                f"Submission returned no transaction hash: {pending!r}"
            )
        return pending

    async def get_transaction_by_hash(self, txn_hash: str) -> Dict[str, Any]:
        """Look a transaction up by hash.

        Raises:
            ConfirmationUnavailable: The node does not know the hash yet.
            TransientRemoteError: Any other failure.
        """
        try:
            txn = await self._request("GET", f"/transactions/by_hash/{txn_hash}")
        except TransientRemoteError as e:
            if e.status == 404:
                raise ConfirmationUnavailable(txn_hash, "not found") from e
            raise
        if not isinstance(txn, dict):
            raise ConfirmationUnavailable(txn_hash, "empty response")
        return txn


class FaucetClient(_HttpClient):
    """Testnet faucet client (``POST /fund``)."""

    def __init__(self, faucet_url: str, proxy: Optional[str] = None, timeout: float = 30.0):
        super().__init__(faucet_url, proxy=proxy, timeout=timeout, headers=FAUCET_HEADERS)

    async def post(self, address: str, amount: int) -> Dict[str, Any]:
        """Request *amount* base units for *address*.

        Returns:
            The faucet response; ``txn_hashes`` lists pending funding
            transactions when the faucet reports them.
        """
        data = await self._request("POST", "/fund", {"address": address, "amount": amount})
        if isinstance(data, list):
            # Some faucet versions answer with a bare list of hashes
            return {"txn_hashes": data}
        return data or {}

    @staticmethod
    def pending_hashes(response: Dict[str, Any]) -> List[str]:
        hashes = response.get("txn_hashes") if isinstance(response, dict) else None
        return list(hashes or [])


@dataclass
class AccountClients:
    """The node and faucet clients for one account, sharing its proxy."""

    chain: MovementClient
    faucet: FaucetClient

    @classmethod
    def create(cls, settings: BotSettings, proxy: Optional[str] = None) -> "AccountClients":
        return cls(
            chain=MovementClient(
                settings.node_url,
                proxy=proxy,
                timeout=settings.request_timeout_seconds,
                max_gas_amount=settings.max_gas_amount,
                gas_unit_price=settings.gas_unit_price,
                expiration_seconds=settings.txn_expiration_seconds,
            ),
            faucet=FaucetClient(
                settings.faucet_url,
                proxy=proxy,
                timeout=settings.request_timeout_seconds,
            ),
        )

    async def close(self) -> None:
        await self.chain.close()
        await self.faucet.close()
