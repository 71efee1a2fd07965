"""Key generation for validator operators.

Writes ``private-keys.yaml`` (keep secret) and ``public-keys.yaml`` (share
via ``publish``) into a directory.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from genesisctl.domain.participant import (
    PRIVATE_KEYS_FILE,
    PUBLIC_KEYS_FILE,
    PublicIdentity,
    serialize_public_identity,
)
from genesisctl.domain.serialization import dump_yaml
from genesisctl.domain.types import derive_account_address
from genesisctl.errors import AlreadyExists, GenesisError, StorageError
from genesisctl.infrastructure.keys import KeyGenerator
from genesisctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from genesisctl.infrastructure.keys import KeyMaterial


def _hex(raw: bytes) -> str:
    return "0x" + raw.hex()


def public_identity(material: KeyMaterial) -> PublicIdentity:
    account_key = material.account_public_key
    return PublicIdentity(
        account_address=derive_account_address(account_key),
        account_public_key=_hex(account_key),
        consensus_public_key=_hex(material.consensus_public_key),
        validator_network_public_key=_hex(material.validator_network_public_key),
        full_node_network_public_key=_hex(material.full_node_network_public_key),
    )


def private_keys_document(material: KeyMaterial) -> bytes:
    identity = public_identity(material)
    return dump_yaml(
        {
            "account_address": identity.account_address,
            "account_private_key": _hex(material.account_key),
            "consensus_private_key": _hex(material.consensus_key),
            "validator_network_private_key": _hex(material.validator_network_key),
            "full_node_network_private_key": _hex(material.full_node_network_key),
        }
    ).encode("utf-8")


def write_key_files(output_dir: Path, material: KeyMaterial, *, force: bool = False) -> dict[str, Path]:
    """Write both key files into *output_dir*.

    The private key file is created with mode 0600.

    Raises:
        AlreadyExists: a key file is present and *force* is False.
        StorageError: the directory cannot be written.
    """
    private_path = output_dir / PRIVATE_KEYS_FILE
    public_path = output_dir / PUBLIC_KEYS_FILE
    if not force:
        existing = [str(p) for p in (private_path, public_path) if p.exists()]
        if existing:
            raise AlreadyExists(f"Key files already exist: {', '.join(existing)}", paths=existing)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        fd = os.open(private_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as fh:
            fh.write(private_keys_document(material))
        public_path.write_bytes(serialize_public_identity(public_identity(material)))
    except OSError as exc:
        raise StorageError(f"Cannot write key files to {output_dir}: {exc}") from exc
    return {"private": private_path, "public": public_path}


def generate_keys(output_dir: Path, *, seed: bytes | None = None, force: bool = False) -> ServiceResult:
    """Generate one operator's key material and write it to *output_dir*."""
    op = "generate_keys"
    try:
        generator = KeyGenerator(seed)
    except ValueError as exc:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code="INVALID_SEED", message=str(exc)),
        )
    material = generator.generate_key_material()
    try:
        paths = write_key_files(output_dir, material, force=force)
    except GenesisError as exc:
        return ServiceResult.failure(op, exc)
    identity = public_identity(material)
    return ServiceResult(
        ok=True,
        op=op,
        data={
            "account_address": identity.account_address,
            "private_keys": str(paths["private"]),
            "public_keys": str(paths["public"]),
            "deterministic": generator.deterministic,
        },
    )
