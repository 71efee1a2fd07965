"""Framework bundle — the versioned system bytecode embedded into genesis.

Binary layout of ``framework.mrb`` (all integers little-endian)::

    b"MRB1"
    u16 version length, version (UTF-8)
    u32 module count
    repeated: u16 name length, name (UTF-8), u32 code length, code

Module order is significant and preserved.
"""

from __future__ import annotations

import hashlib
import struct

from pydantic import BaseModel, Field

from genesisctl.errors import SchemaError

FRAMEWORK_FILE = "framework.mrb"

_MAGIC = b"MRB1"


class FrameworkModule(BaseModel):
    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    code: bytes

    @property
    def digest(self) -> str:
        return hashlib.sha3_256(self.code).hexdigest()


class FrameworkBundle(BaseModel):
    """Ordered, immutable set of system modules pinned for one genesis run."""

    model_config = {"frozen": True}

    version: str = Field(min_length=1)
    modules: tuple[FrameworkModule, ...]

    @property
    def digest(self) -> str:
        """SHA3-256 of the encoded bundle."""
        return hashlib.sha3_256(encode_bundle(self)).hexdigest()


def encode_bundle(bundle: FrameworkBundle) -> bytes:
    version = bundle.version.encode("utf-8")
    parts = [_MAGIC, struct.pack("<H", len(version)), version]
    parts.append(struct.pack("<I", len(bundle.modules)))
    for module in bundle.modules:
        name = module.name.encode("utf-8")
        parts.append(struct.pack("<H", len(name)))
        parts.append(name)
        parts.append(struct.pack("<I", len(module.code)))
        parts.append(module.code)
    return b"".join(parts)


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise SchemaError(f"Truncated {FRAMEWORK_FILE}", file=FRAMEWORK_FILE)
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def unpack(self, fmt: str) -> int:
        (value,) = struct.unpack(fmt, self.take(struct.calcsize(fmt)))
        return int(value)

    def text(self, fmt: str) -> str:
        try:
            return self.take(self.unpack(fmt)).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SchemaError(f"Bad UTF-8 in {FRAMEWORK_FILE}", file=FRAMEWORK_FILE) from exc

    @property
    def exhausted(self) -> bool:
        return self._pos == len(self._data)


def decode_bundle(data: bytes) -> FrameworkBundle:
    """Parse ``framework.mrb`` bytes, raising :class:`SchemaError` when malformed."""
    reader = _Reader(data)
    if reader.take(len(_MAGIC)) != _MAGIC:
        raise SchemaError(f"{FRAMEWORK_FILE} has a bad magic header", file=FRAMEWORK_FILE)
    version = reader.text("<H")
    count = reader.unpack("<I")
    modules = []
    for _ in range(count):
        name = reader.text("<H")
        if not name:
            raise SchemaError(f"Unnamed module in {FRAMEWORK_FILE}", file=FRAMEWORK_FILE)
        code = reader.take(reader.unpack("<I"))
        modules.append(FrameworkModule(name=name, code=code))
    if not reader.exhausted:
        raise SchemaError(f"Trailing bytes after {FRAMEWORK_FILE}", file=FRAMEWORK_FILE)
    if not version or not modules:
        raise SchemaError(f"{FRAMEWORK_FILE} must carry a version and modules", file=FRAMEWORK_FILE)
    return FrameworkBundle(version=version, modules=tuple(modules))
