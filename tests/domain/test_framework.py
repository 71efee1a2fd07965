"""Tests for the framework bundle binary format."""

from __future__ import annotations

import struct

import pytest

from genesisctl.domain.framework import FrameworkBundle, FrameworkModule, decode_bundle, encode_bundle
from genesisctl.errors import SchemaError


class TestEncoding:
    def test_decode_preserves_order(self, framework_bundle: FrameworkBundle) -> None:
        decoded = decode_bundle(encode_bundle(framework_bundle))
        assert [m.name for m in decoded.modules] == ["account", "coin"]
        assert decoded == framework_bundle

    def test_header(self, framework_bundle: FrameworkBundle) -> None:
        data = encode_bundle(framework_bundle)
        assert data.startswith(b"MRB1")
        assert struct.unpack_from("<H", data, 4)[0] == len("1.0.0")

    def test_digest_changes_with_code(self, framework_bundle: FrameworkBundle) -> None:
        other = FrameworkBundle(
            version=framework_bundle.version,
            modules=(FrameworkModule(name="account", code=b"\x00"), framework_bundle.modules[1]),
        )
        assert other.digest != framework_bundle.digest


class TestDecodeErrors:
    def test_bad_magic(self, framework_bundle: FrameworkBundle) -> None:
        data = b"XXXX" + encode_bundle(framework_bundle)[4:]
        with pytest.raises(SchemaError, match="magic"):
            decode_bundle(data)

    def test_truncated(self, framework_bundle: FrameworkBundle) -> None:
        with pytest.raises(SchemaError):
            decode_bundle(encode_bundle(framework_bundle)[:-1])

    def test_trailing_bytes(self, framework_bundle: FrameworkBundle) -> None:
        with pytest.raises(SchemaError, match="Trailing"):
            decode_bundle(encode_bundle(framework_bundle) + b"\x00")

    def test_empty_module_list(self) -> None:
        data = b"MRB1" + struct.pack("<H", 1) + b"1" + struct.pack("<I", 0)
        with pytest.raises(SchemaError):
            decode_bundle(data)

    def test_empty(self) -> None:
        with pytest.raises(SchemaError):
            decode_bundle(b"")
