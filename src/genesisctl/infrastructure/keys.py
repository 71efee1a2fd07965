"""Key material generation (Ed25519 signing keys, X25519 network keys).

:class:`KeyGenerator` draws key seeds either from OS randomness or, for
reproducible test networks, from a 32-byte seed expanded with SHA3-256 in
counter mode. Two generators built from the same seed yield the same keys in
the same order.
"""

from __future__ import annotations

import hashlib
import secrets
import struct
from dataclasses import dataclass

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

SEED_LENGTH = 32


@dataclass(frozen=True)
class KeyMaterial:
    """Raw private keys for one validator operator."""

    account_key: bytes
    consensus_key: bytes
    validator_network_key: bytes
    full_node_network_key: bytes

    @property
    def account_public_key(self) -> bytes:
        return public_key_of(self.account_key)

    @property
    def consensus_public_key(self) -> bytes:
        return public_key_of(self.consensus_key)

    @property
    def validator_network_public_key(self) -> bytes:
        key = X25519PrivateKey.from_private_bytes(self.validator_network_key)
        return key.public_key().public_bytes_raw()

    @property
    def full_node_network_public_key(self) -> bytes:
        key = X25519PrivateKey.from_private_bytes(self.full_node_network_key)
        return key.public_key().public_bytes_raw()


class KeyGenerator:
    """Source of private keys, seeded or random."""

    def __init__(self, seed: bytes | None = None) -> None:
        if seed is not None and len(seed) != SEED_LENGTH:
            msg = f"Key seed must be {SEED_LENGTH} bytes, got {len(seed)}"
            raise ValueError(msg)
        self._seed = seed
        self._counter = 0

    @classmethod
    def from_seed(cls, seed: bytes) -> KeyGenerator:
        return cls(seed)

    @property
    def deterministic(self) -> bool:
        return self._seed is not None

    def _next_bytes(self) -> bytes:
        if self._seed is None:
            return secrets.token_bytes(32)
        block = hashlib.sha3_256(self._seed + struct.pack("<Q", self._counter)).digest()
        self._counter += 1
        return block

    def generate_ed25519(self) -> Ed25519PrivateKey:
        return Ed25519PrivateKey.from_private_bytes(self._next_bytes())

    def generate_x25519(self) -> X25519PrivateKey:
        return X25519PrivateKey.from_private_bytes(self._next_bytes())

    def generate_key_material(self) -> KeyMaterial:
        return KeyMaterial(
            account_key=self.generate_ed25519().private_bytes_raw(),
            consensus_key=self.generate_ed25519().private_bytes_raw(),
            validator_network_key=self.generate_x25519().private_bytes_raw(),
            full_node_network_key=self.generate_x25519().private_bytes_raw(),
        )


def public_key_of(private_key: bytes) -> bytes:
    """Ed25519 public key for a raw 32-byte private key."""
    return Ed25519PrivateKey.from_private_bytes(private_key).public_key().public_bytes_raw()
