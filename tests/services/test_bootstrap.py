"""Tests for single-machine bootstrap."""

from __future__ import annotations

from pathlib import Path

from genesisctl.domain.framework import FrameworkBundle
from genesisctl.infrastructure.artifacts import GENESIS_BLOB, artifacts_complete
from genesisctl.services.bootstrap import bootstrap_local, participant_name
from genesisctl.services.genesis import GenesisService

SEED = b"\x07" * 32


class TestBootstrapLocal:
    def test_generates_genesis(self, tmp_path: Path, framework_bundle: FrameworkBundle) -> None:
        result = bootstrap_local(3, tmp_path / "out", framework_bundle, seed=SEED)
        assert result.ok, result.error
        assert result.op == "bootstrap_local"
        assert result.data["participants"] == ["user-0", "user-1", "user-2"]
        assert result.data["deterministic"] is True
        assert artifacts_complete(tmp_path / "out")
        assert {"keys", "layout", "publish", "aggregate", "build", "write"} <= set(result.meta["timings_ms"])

    def test_seeded_runs_agree(self, tmp_path: Path, framework_bundle: FrameworkBundle) -> None:
        a = bootstrap_local(2, tmp_path / "a", framework_bundle, seed=SEED)
        b = bootstrap_local(2, tmp_path / "b", framework_bundle, seed=SEED)
        assert a.data["waypoint"] == b.data["waypoint"]
        assert (tmp_path / "a" / GENESIS_BLOB).read_bytes() == (tmp_path / "b" / GENESIS_BLOB).read_bytes()

    def test_unseeded_runs_differ(self, tmp_path: Path, framework_bundle: FrameworkBundle) -> None:
        a = bootstrap_local(1, tmp_path / "a", framework_bundle)
        b = bootstrap_local(1, tmp_path / "b", framework_bundle)
        assert a.data["deterministic"] is False
        assert a.data["waypoint"] != b.data["waypoint"]

    def test_waypoint_matches_file(self, tmp_path: Path, framework_bundle: FrameworkBundle) -> None:
        result = bootstrap_local(1, tmp_path, framework_bundle, seed=SEED)
        check = GenesisService.waypoint(tmp_path / GENESIS_BLOB)
        assert check.data["waypoint"] == result.data["waypoint"]
        assert check.data["matches"] is True

    def test_only_output_survives(self, tmp_path: Path, framework_bundle: FrameworkBundle) -> None:
        out = tmp_path / "out"
        bootstrap_local(1, out, framework_bundle, seed=SEED)
        assert sorted(p.name for p in out.iterdir()) == ["genesis.blob", "waypoint.txt"]

    def test_zero_validators(self, tmp_path: Path, framework_bundle: FrameworkBundle) -> None:
        result = bootstrap_local(0, tmp_path, framework_bundle)
        assert result.error.code == "SCHEMA_ERROR"

    def test_bad_seed(self, tmp_path: Path, framework_bundle: FrameworkBundle) -> None:
        result = bootstrap_local(1, tmp_path, framework_bundle, seed=b"x")
        assert result.error.code == "SCHEMA_ERROR"

    def test_existing_output(self, tmp_path: Path, framework_bundle: FrameworkBundle) -> None:
        assert bootstrap_local(1, tmp_path, framework_bundle, seed=SEED).ok
        again = bootstrap_local(1, tmp_path, framework_bundle, seed=SEED)
        assert again.op == "bootstrap_local"
        assert again.error.code == "ALREADY_EXISTS"

    def test_participant_name(self) -> None:
        assert participant_name(0) == "user-0"
        assert participant_name(12) == "user-12"
