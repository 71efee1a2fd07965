"""Primitive value types shared by the genesis schemas.

Addresses, public keys, and host/port pairs travel as normalized strings so
that YAML files stay human-editable and serialization stays byte-stable.
"""

from __future__ import annotations

import hashlib
import re
from enum import IntEnum
from typing import Annotated, Any

from pydantic import BeforeValidator

ADDRESS_LENGTH = 20
PUBLIC_KEY_LENGTH = 32
U64_MAX = 2**64 - 1

_HEX_RE = re.compile(r"^[0-9a-f]*$")
_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class NamedChain(IntEnum):
    """Well-known chain identifiers."""

    MAINNET = 1
    TESTNET = 2
    DEVNET = 3
    TESTING = 4
    PREMAINNET = 5


def parse_chain_id(value: Any) -> int:
    """Accept an integer or a named chain (``"testing"``) and return the integer tag."""
    if isinstance(value, bool):
        raise ValueError("chain_id must be an integer or a chain name")
    if isinstance(value, int):
        chain_id = value
    elif isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            chain_id = int(text)
        else:
            try:
                chain_id = NamedChain[text.upper()].value
            except KeyError:
                raise ValueError(f"Unknown chain name: {value!r}") from None
    else:
        raise ValueError("chain_id must be an integer or a chain name")
    if not 1 <= chain_id <= 255:
        raise ValueError(f"chain_id must be in [1, 255], got {chain_id}")
    return chain_id


def _strip_hex(value: Any, what: str, width: int = 0) -> str:
    if isinstance(value, bool):
        raise ValueError(f"{what} must be a hex string")
    if isinstance(value, int):
        # Unquoted 0x literals come back from YAML as integers, losing
        # leading zero nibbles.
        if value < 0:
            raise ValueError(f"{what} must be non-negative")
        return format(value, "x").rjust(width, "0")
    if isinstance(value, bytes):
        return value.hex()
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a hex string")
    text = value.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    if not text or not _HEX_RE.match(text):
        raise ValueError(f"{what} is not valid hex: {value!r}")
    return text


def normalize_address(value: Any) -> str:
    """Normalize an account address to ``0x`` + 40 lowercase hex digits.

    Short literals are left-padded, so ``0x123`` names the same account as
    ``0x000...0123``.
    """
    digits = _strip_hex(value, "account address")
    if len(digits) > ADDRESS_LENGTH * 2:
        raise ValueError(f"account address longer than {ADDRESS_LENGTH} bytes: {value!r}")
    return "0x" + digits.rjust(ADDRESS_LENGTH * 2, "0")


def normalize_public_key(value: Any) -> str:
    """Normalize a 32-byte public key to ``0x`` + 64 lowercase hex digits."""
    digits = _strip_hex(value, "public key", PUBLIC_KEY_LENGTH * 2)
    if len(digits) != PUBLIC_KEY_LENGTH * 2:
        raise ValueError(f"public key must be {PUBLIC_KEY_LENGTH} bytes: {value!r}")
    return "0x" + digits


def normalize_host_port(value: Any) -> str:
    """Validate a ``host:port`` string (IPv6 hosts in brackets)."""
    if not isinstance(value, str):
        raise ValueError("host must be a 'host:port' string")
    host, sep, port = value.strip().rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"expected 'host:port', got {value!r}")
    if not 0 < int(port) < 65536:
        raise ValueError(f"port out of range in {value!r}")
    return f"{host}:{int(port)}"


def derive_account_address(public_key: bytes) -> str:
    """Account address for an Ed25519 public key (single-signer scheme byte ``0x00``)."""
    digest = hashlib.sha3_256(public_key + b"\x00").digest()
    return "0x" + digest[:ADDRESS_LENGTH].hex()


def is_valid_name(name: str) -> bool:
    """Whether *name* is usable as a participant name and store path segment."""
    return bool(_NAME_RE.match(name))


Address = Annotated[str, BeforeValidator(normalize_address)]
PublicKeyHex = Annotated[str, BeforeValidator(normalize_public_key)]
HostAndPort = Annotated[str, BeforeValidator(normalize_host_port)]
ChainId = Annotated[int, BeforeValidator(parse_chain_id)]
