"""Tests for key file generation."""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from genesisctl.domain.participant import PRIVATE_KEYS_FILE, PUBLIC_KEYS_FILE, load_public_identity
from genesisctl.domain.serialization import load_yaml
from genesisctl.services.keys import generate_keys

SEED = bytes(range(32))


class TestGenerateKeys:
    def test_writes_both_files(self, tmp_path: Path) -> None:
        result = generate_keys(tmp_path / "keys")
        assert result.ok
        assert result.data["deterministic"] is False
        public = load_public_identity((tmp_path / "keys" / PUBLIC_KEYS_FILE).read_bytes())
        assert public.account_address == result.data["account_address"]
        private = load_yaml((tmp_path / "keys" / PRIVATE_KEYS_FILE).read_bytes(), what="private")
        assert private["account_address"] == public.account_address
        assert "account_private_key" in private

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_private_file_mode(self, tmp_path: Path) -> None:
        generate_keys(tmp_path)
        mode = stat.S_IMODE((tmp_path / PRIVATE_KEYS_FILE).stat().st_mode)
        assert mode & 0o077 == 0

    def test_seeded_is_reproducible(self, tmp_path: Path) -> None:
        a = generate_keys(tmp_path / "a", seed=SEED)
        b = generate_keys(tmp_path / "b", seed=SEED)
        assert a.data["deterministic"] is True
        assert a.data["account_address"] == b.data["account_address"]
        assert (tmp_path / "a" / PUBLIC_KEYS_FILE).read_bytes() == (tmp_path / "b" / PUBLIC_KEYS_FILE).read_bytes()

    def test_unseeded_differs(self, tmp_path: Path) -> None:
        a = generate_keys(tmp_path / "a")
        b = generate_keys(tmp_path / "b")
        assert a.data["account_address"] != b.data["account_address"]

    def test_refuses_overwrite(self, tmp_path: Path) -> None:
        first = generate_keys(tmp_path, seed=SEED)
        second = generate_keys(tmp_path)
        assert second.error.code == "ALREADY_EXISTS"
        assert load_public_identity((tmp_path / PUBLIC_KEYS_FILE).read_bytes()).account_address == (
            first.data["account_address"]
        )
        assert generate_keys(tmp_path, force=True).ok

    def test_bad_seed(self, tmp_path: Path) -> None:
        result = generate_keys(tmp_path, seed=b"short")
        assert result.error.code == "INVALID_SEED"
        assert not (tmp_path / PRIVATE_KEYS_FILE).exists()
