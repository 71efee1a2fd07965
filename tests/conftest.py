"""Shared pytest fixtures for genesisctl tests."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from genesisctl.domain.framework import FRAMEWORK_FILE, FrameworkBundle, FrameworkModule, encode_bundle
from genesisctl.domain.layout import (
    BALANCES_FILE,
    EMPLOYEE_VESTING_ACCOUNTS_FILE,
    LAYOUT_FILE,
    LayoutDescriptor,
    serialize_layout,
)
from genesisctl.domain.participant import ParticipantBundle, identity_path, serialize_bundle
from genesisctl.infrastructure.keys import KeyGenerator
from genesisctl.infrastructure.store import MemoryStore
from genesisctl.services.keys import public_identity

STAKE = 100_000_000_000_000
ROOT_KEY = "0x" + "ab" * 32

BALANCES_YAML = b"""\
- account_address: "0x123"
  balance: 1
- account_address: "0x234"
  balance: 2
"""


def seed_for(label: str) -> bytes:
    """Stable 32-byte key seed derived from a label."""
    return hashlib.sha3_256(label.encode("utf-8")).digest()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def framework_bundle() -> FrameworkBundle:
    return FrameworkBundle(
        version="1.0.0",
        modules=(
            FrameworkModule(name="account", code=b"\xa1\x1c\xeb\x0b\x01"),
            FrameworkModule(name="coin", code=b"\xa1\x1c\xeb\x0b\x02\x03"),
        ),
    )


@pytest.fixture
def make_bundle() -> Callable[..., ParticipantBundle]:
    """Factory building a deterministic bundle for a participant name."""

    def _make(
        name: str,
        *,
        stake: int = STAKE,
        commission: int = 0,
        host: str = "localhost:6180",
        key_label: str | None = None,
    ) -> ParticipantBundle:
        material = KeyGenerator(seed_for(key_label or name)).generate_key_material()
        return ParticipantBundle(
            username=name,
            owner_identity=public_identity(material),
            validator_host=host,
            stake_amount=stake,
            commission_percentage=commission,
        )

    return _make


@pytest.fixture
def populated_store(
    memory_store: MemoryStore,
    framework_bundle: FrameworkBundle,
    make_bundle: Callable[..., ParticipantBundle],
) -> MemoryStore:
    """Store ready for genesis: two published validators, balances, empty vesting, framework."""
    layout = LayoutDescriptor(
        root_key=ROOT_KEY,
        users=["user-0", "user-1"],
        balances_file=BALANCES_FILE,
        vesting_file=EMPLOYEE_VESTING_ACCOUNTS_FILE,
    )
    memory_store.write(LAYOUT_FILE, serialize_layout(layout))
    memory_store.write(BALANCES_FILE, BALANCES_YAML)
    memory_store.write(EMPLOYEE_VESTING_ACCOUNTS_FILE, b"[]\n")
    memory_store.write(FRAMEWORK_FILE, encode_bundle(framework_bundle))
    for name in ("user-0", "user-1"):
        memory_store.write(identity_path(name), serialize_bundle(make_bundle(name)))
    return memory_store


@pytest.fixture
def framework_file(tmp_path: Path, framework_bundle: FrameworkBundle) -> Path:
    path = tmp_path / "head.mrb"
    path.write_bytes(encode_bundle(framework_bundle))
    return path


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI from an empty temp directory with no config discovery leaks.

    Use via ``@pytest.mark.usefixtures("_isolated_project")``.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GENESISCTL_CONFIG", raising=False)
    for var in ("GENESISCTL_STORE__PATH", "GENESISCTL_STORE__BACKEND"):
        monkeypatch.delenv(var, raising=False)
