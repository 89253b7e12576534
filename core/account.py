"""Ed25519 accounts for Movement / Aptos style chains.

An account address is the authentication key of a single-signer Ed25519
account: ``sha3_256(public_key || 0x00)`` rendered as ``0x``-prefixed hex.
"""

import hashlib
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from nacl.signing import SigningKey

from core.errors import AccountConstructionError

logger = logging.getLogger(__name__)

ED25519_SCHEME = b"\x00"
_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")
_KEY_PREFIXES = ("ed25519-priv-",)


def _strip_key(raw: str) -> str:
    key = raw.strip()
    for prefix in _KEY_PREFIXES:
        if key.startswith(prefix):
            key = key[len(prefix):]
    if key.startswith(("0x", "0X")):
        key = key[2:]
    return key


def derive_address(public_key: bytes) -> str:
    """Return the ``0x`` address for an Ed25519 *public_key*."""
    return "0x" + hashlib.sha3_256(public_key + ED25519_SCHEME).hexdigest()


@dataclass(frozen=True)
class Account:
    """One keyed identity plus the proxy it talks through.

    Attributes:
        address: ``0x``-prefixed account address.
        public_key: Raw 32-byte Ed25519 public key.
        proxy: Proxy URL assigned to this account, or ``None``.
    """

    address: str
    public_key: bytes
    proxy: Optional[str] = None
    _signing_key: SigningKey = field(repr=False, compare=False, default=None)

    @classmethod
    def from_private_key(cls, private_key: str, proxy: Optional[str] = None) -> "Account":
        """Build an account from a hex private key.

        Accepts an optional ``0x`` or ``ed25519-priv-`` prefix.  A 64-byte
        secret (seed followed by public key) is reduced to its seed.

        Raises:
            AccountConstructionError: The key is not hex or has the wrong
                length.
        """
        clean = _strip_key(private_key)
        if not clean or not _HEX_RE.match(clean):
            raise AccountConstructionError("Private key is not a valid hex string")
        if len(clean) % 2:
            raise AccountConstructionError("Private key has an odd number of hex digits")

        key_bytes = bytes.fromhex(clean)
        if len(key_bytes) == 64:
            key_bytes = key_bytes[:32]
        if len(key_bytes) != 32:
            raise AccountConstructionError(
                f"Private key must be 32 bytes, got {len(key_bytes)}"
            )

        signing_key = SigningKey(key_bytes)
        public_key = bytes(signing_key.verify_key)
        return cls(
            address=derive_address(public_key),
            public_key=public_key,
            proxy=proxy,
            _signing_key=signing_key,
        )

    @property
    def public_key_hex(self) -> str:
        return "0x" + self.public_key.hex()

    def sign(self, message: bytes) -> bytes:
        """Return the 64-byte Ed25519 signature of *message*."""
        return self._signing_key.sign(message).signature
