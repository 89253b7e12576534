import hashlib

import pytest
from nacl.signing import VerifyKey

from core.account import Account, derive_address
from core.errors import AccountConstructionError

SEED_HEX = "11" * 32


def test_address_is_sha3_of_public_key_and_scheme():
    account = Account.from_private_key(SEED_HEX)
    expected = "0x" + hashlib.sha3_256(account.public_key + b"\x00").hexdigest()
    assert account.address == expected
    assert derive_address(account.public_key) == expected
    assert len(account.address) == 66


@pytest.mark.parametrize("raw", [
    SEED_HEX,
    "0x" + SEED_HEX,
    "ed25519-priv-0x" + SEED_HEX,
    "  " + SEED_HEX + "\n",
])
def test_prefixes_and_whitespace_are_accepted(raw):
    assert Account.from_private_key(raw).address == Account.from_private_key(SEED_HEX).address


def test_sixty_four_byte_secret_uses_seed_half():
    full = SEED_HEX + "ab" * 32
    assert Account.from_private_key(full).public_key == Account.from_private_key(SEED_HEX).public_key


@pytest.mark.parametrize("raw", ["", "0x", "zz" * 32, "1" * 63, "11" * 16])
def test_malformed_keys_raise(raw):
    with pytest.raises(AccountConstructionError):
        Account.from_private_key(raw)


def test_signature_verifies_with_public_key():
    account = Account.from_private_key(SEED_HEX, proxy="http://1.2.3.4:8080")
    message = b"APTOS::RawTransaction" + b"\x01" * 10

    signature = account.sign(message)

    assert len(signature) == 64
    VerifyKey(account.public_key).verify(message, signature)
    assert account.proxy == "http://1.2.3.4:8080"
    assert account.public_key_hex == "0x" + account.public_key.hex()


def test_signing_key_not_in_repr():
    assert "_signing_key" not in repr(Account.from_private_key(SEED_HEX))
