"""Waypoint — the checkpoint joining nodes use to recognize the genesis state.

A waypoint is ``(version, digest)`` where the digest is SHA3-256 over the
version (u64, little-endian) followed by the artifact bytes. Text form is
``"<version>:<64 hex digits>"``.
"""

from __future__ import annotations

import hashlib
import re
import struct
from typing import Self

from pydantic import BaseModel, Field

from genesisctl.domain.genesis import GenesisArtifact
from genesisctl.errors import InvalidArtifact

GENESIS_VERSION = 0

_WAYPOINT_RE = re.compile(r"^(\d+):([0-9a-f]{64})$")


class Waypoint(BaseModel):
    model_config = {"frozen": True}

    version: int = Field(ge=0)
    digest: str = Field(pattern=r"^[0-9a-f]{64}$")

    def __str__(self) -> str:
        return f"{self.version}:{self.digest}"

    @classmethod
    def parse(cls, text: str) -> Self:
        match = _WAYPOINT_RE.match(text.strip())
        if match is None:
            raise InvalidArtifact(f"Malformed waypoint: {text.strip()!r}")
        return cls(version=int(match.group(1)), digest=match.group(2))


def derive_waypoint(artifact: GenesisArtifact, *, version: int = GENESIS_VERSION) -> Waypoint:
    """Pure function of *artifact*: the same bytes always give the same waypoint."""
    if not artifact.data:
        raise InvalidArtifact("Cannot derive a waypoint from an empty genesis artifact")
    hasher = hashlib.sha3_256()
    hasher.update(struct.pack("<Q", version))
    hasher.update(artifact.data)
    return Waypoint(version=version, digest=hasher.hexdigest())
