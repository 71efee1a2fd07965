"""Participant bundles — one validator operator's published identity.

Stored at ``participants/<name>/identity`` in the coordination store.
INVARIANT: A bundle is immutable once published; republishing replaces it.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from genesisctl.domain.serialization import dump_yaml, load_yaml, validate_model
from genesisctl.domain.types import U64_MAX, Address, HostAndPort, PublicKeyHex, is_valid_name
from genesisctl.errors import SchemaError

PARTICIPANTS_DIR = "participants"
IDENTITY_FILE = "identity"
PUBLIC_KEYS_FILE = "public-keys.yaml"
PRIVATE_KEYS_FILE = "private-keys.yaml"


class PublicIdentity(BaseModel):
    """Public half of a participant's key material (``public-keys.yaml``)."""

    model_config = {"frozen": True}

    account_address: Address
    account_public_key: PublicKeyHex
    consensus_public_key: PublicKeyHex
    validator_network_public_key: PublicKeyHex
    full_node_network_public_key: PublicKeyHex | None = None


class ParticipantBundle(BaseModel):
    """Everything genesis needs to know about one validator."""

    model_config = {"frozen": True, "extra": "forbid"}

    username: str
    owner_identity: PublicIdentity
    operator_identity: PublicIdentity | None = None
    voter_identity: PublicIdentity | None = None
    validator_host: HostAndPort
    full_node_host: HostAndPort | None = None
    stake_amount: int = Field(ge=0, le=U64_MAX)
    commission_percentage: int = Field(default=0, ge=0, le=100)

    @property
    def operator(self) -> PublicIdentity:
        """Operator identity, defaulting to the owner."""
        return self.operator_identity or self.owner_identity

    @property
    def voter(self) -> PublicIdentity:
        """Voter identity, defaulting to the owner."""
        return self.voter_identity or self.owner_identity


def identity_path(name: str) -> str:
    """Store path of *name*'s bundle."""
    if not is_valid_name(name):
        raise SchemaError(f"Invalid participant name: {name!r}", name=name)
    return f"{PARTICIPANTS_DIR}/{name}/{IDENTITY_FILE}"


def load_bundle(data: bytes | str) -> ParticipantBundle:
    raw = load_yaml(data, what=IDENTITY_FILE)
    return validate_model(ParticipantBundle, raw, what=IDENTITY_FILE)


def serialize_bundle(bundle: ParticipantBundle) -> bytes:
    return dump_yaml(bundle.model_dump(mode="json", exclude_none=True)).encode("utf-8")


def load_public_identity(data: bytes | str) -> PublicIdentity:
    raw = load_yaml(data, what=PUBLIC_KEYS_FILE)
    return validate_model(PublicIdentity, raw, what=PUBLIC_KEYS_FILE)


def serialize_public_identity(identity: PublicIdentity) -> bytes:
    return dump_yaml(identity.model_dump(mode="json", exclude_none=True)).encode("utf-8")


def bundle_summary(bundle: ParticipantBundle) -> dict[str, Any]:
    """Short description used in service payloads and logs."""
    return {
        "username": bundle.username,
        "account_address": bundle.owner_identity.account_address,
        "validator_host": bundle.validator_host,
        "stake_amount": bundle.stake_amount,
        "commission_percentage": bundle.commission_percentage,
    }
