"""Tests for GenesisService — generate, waypoint, wait."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pluggy
import pytest

from genesisctl.domain.genesis import GenesisArtifact, GenesisInputSet
from genesisctl.domain.layout import LAYOUT_FILE, LayoutDescriptor, load_layout, serialize_layout
from genesisctl.domain.participant import ParticipantBundle, identity_path, serialize_bundle
from genesisctl.domain.waypoint import derive_waypoint
from genesisctl.infrastructure.artifacts import GENESIS_BLOB, WAYPOINT_FILE, artifacts_complete
from genesisctl.infrastructure.polling import PollPolicy
from genesisctl.infrastructure.store import MemoryStore
from genesisctl.plugins.manager import PluginManager
from genesisctl.services.genesis import GenesisService

hookimpl = pluggy.HookimplMarker("genesisctl")


class FixedBuilder:
    def __init__(self, blob: bytes) -> None:
        self.blob = blob
        self.calls: list[GenesisInputSet] = []

    def build(self, inputs: GenesisInputSet) -> GenesisArtifact:
        self.calls.append(inputs)
        return GenesisArtifact(self.blob)


class ExplodingBuilder:
    def build(self, inputs: GenesisInputSet) -> GenesisArtifact:
        raise RuntimeError("vm aborted")


class RecordingPlugin:
    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    @hookimpl
    def post_genesis(self, output_dir: str, waypoint: str) -> None:
        self.events.append((output_dir, waypoint))


class FailingPlugin:
    @hookimpl
    def post_genesis(self, output_dir: str, waypoint: str) -> None:
        raise RuntimeError("webhook down")


def _add_participant(store: MemoryStore, name: str) -> None:
    layout = load_layout(store.read(LAYOUT_FILE))
    data = layout.model_dump()
    data["participants"] = [*layout.participants, name]
    store.write(LAYOUT_FILE, serialize_layout(LayoutDescriptor.model_validate(data)))


class TestGenerate:
    def test_writes_both_artifacts(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        out = tmp_path / "out"
        result = GenesisService(populated_store).generate(out)

        assert result.ok, result.error
        assert result.op == "generate_genesis"
        assert artifacts_complete(out)
        blob = (out / GENESIS_BLOB).read_bytes()
        waypoint = (out / WAYPOINT_FILE).read_text(encoding="utf-8").strip()
        assert waypoint == result.data["waypoint"]
        assert waypoint == str(derive_waypoint(GenesisArtifact(blob)))
        assert result.data["participants"] == ["user-0", "user-1"]
        assert result.data["size"] == len(blob)
        assert set(result.meta["timings_ms"]) == {"aggregate", "build", "waypoint", "write"}

    def test_waypoint_stable_across_runs(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        first = GenesisService(populated_store).generate(tmp_path / "a")
        copy = MemoryStore(populated_store.snapshot())
        second = GenesisService(copy).generate(tmp_path / "b")
        assert first.data["waypoint"] == second.data["waypoint"]
        assert (tmp_path / "a" / GENESIS_BLOB).read_bytes() == (tmp_path / "b" / GENESIS_BLOB).read_bytes()

    def test_republish_last_write_wins(
        self,
        populated_store: MemoryStore,
        make_bundle: Callable[..., ParticipantBundle],
        tmp_path: Path,
    ) -> None:
        before = GenesisService(populated_store).generate(tmp_path / "a")
        populated_store.write(identity_path("user-1"), serialize_bundle(make_bundle("user-1", commission=5)))
        after = GenesisService(populated_store).generate(tmp_path / "b")
        assert before.ok and after.ok
        assert before.data["waypoint"] != after.data["waypoint"]

    def test_missing_participant_writes_nothing(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        _add_participant(populated_store, "user-2")
        out = tmp_path / "out"
        result = GenesisService(populated_store).generate(out)

        assert not result.ok
        assert result.error.code == "MISSING_PARTICIPANT"
        assert result.error.detail["name"] == "user-2"
        assert not out.exists()

    def test_existing_output_requires_force(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        service = GenesisService(populated_store)
        assert service.generate(tmp_path).ok
        again = service.generate(tmp_path)
        assert not again.ok
        assert again.error.code == "ALREADY_EXISTS"
        assert service.generate(tmp_path, force=True).ok

    def test_custom_builder(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        builder = FixedBuilder(b"opaque-state")
        result = GenesisService(populated_store, builder=builder).generate(tmp_path)
        assert result.ok
        assert (tmp_path / GENESIS_BLOB).read_bytes() == b"opaque-state"
        assert [p.username for p in builder.calls[0].participants] == ["user-0", "user-1"]

    def test_builder_exception_surfaces(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        out = tmp_path / "out"
        result = GenesisService(populated_store, builder=ExplodingBuilder()).generate(out)
        assert not result.ok
        assert result.error.code == "BUILDER_FAILED"
        assert "vm aborted" in result.error.message
        assert result.error.detail == {"exception": "RuntimeError"}
        assert not out.exists()

    def test_empty_artifact_rejected(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        result = GenesisService(populated_store, builder=FixedBuilder(b"")).generate(tmp_path / "out")
        assert not result.ok
        assert result.error.code == "INVALID_ARTIFACT"
        assert not (tmp_path / "out").exists()

    def test_post_genesis_notified(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        plugins = PluginManager()
        recorder = RecordingPlugin()
        plugins.register_plugin(recorder)
        result = GenesisService(populated_store, plugins).generate(tmp_path)
        assert result.ok
        assert recorder.events == [(str(tmp_path), result.data["waypoint"])]

    def test_failing_hook_is_a_warning(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        plugins = PluginManager()
        plugins.register_plugin(FailingPlugin())
        result = GenesisService(populated_store, plugins).generate(tmp_path)
        assert result.ok
        assert result.warnings == ["Event dispatch failed for post_genesis"]
        assert artifacts_complete(tmp_path)


class TestWaypoint:
    def test_derives_and_matches(self, populated_store: MemoryStore, tmp_path: Path) -> None:
        generated = GenesisService(populated_store).generate(tmp_path)
        result = GenesisService.waypoint(tmp_path / GENESIS_BLOB)
        assert result.ok
        assert result.data["waypoint"] == generated.data["waypoint"]
        assert result.data["matches"] is True

    def test_detects_mismatch(self, tmp_path: Path) -> None:
        (tmp_path / GENESIS_BLOB).write_bytes(b"state")
        (tmp_path / WAYPOINT_FILE).write_text("0:" + "0" * 64 + "\n", encoding="utf-8")
        result = GenesisService.waypoint(tmp_path / GENESIS_BLOB)
        assert result.ok
        assert result.data["matches"] is False

    def test_without_recorded_waypoint(self, tmp_path: Path) -> None:
        (tmp_path / GENESIS_BLOB).write_bytes(b"state")
        result = GenesisService.waypoint(tmp_path / GENESIS_BLOB)
        assert "matches" not in result.data

    def test_missing_blob(self, tmp_path: Path) -> None:
        result = GenesisService.waypoint(tmp_path / GENESIS_BLOB)
        assert not result.ok
        assert result.error.code == "NOT_FOUND"

    def test_empty_blob(self, tmp_path: Path) -> None:
        (tmp_path / GENESIS_BLOB).write_bytes(b"")
        result = GenesisService.waypoint(tmp_path / GENESIS_BLOB)
        assert result.error.code == "INVALID_ARTIFACT"

    def test_unreadable_recorded_waypoint(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / GENESIS_BLOB).write_bytes(b"state")
        (tmp_path / WAYPOINT_FILE).write_text("0:" + "0" * 64 + "\n", encoding="utf-8")

        def _denied(self: Path, *args: object, **kwargs: object) -> str:
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "read_text", _denied)
        result = GenesisService.waypoint(tmp_path / GENESIS_BLOB)
        assert not result.ok
        assert result.error.code == "IO_ERROR"
        assert WAYPOINT_FILE in result.error.message


class TestWaitForParticipants:
    def test_ready(self, populated_store: MemoryStore) -> None:
        result = GenesisService(populated_store).wait_for_participants(PollPolicy(timeout=0))
        assert result.ok
        assert result.data == {"participants": ["user-0", "user-1"], "count": 2}

    def test_timeout_reports_missing(self, populated_store: MemoryStore) -> None:
        _add_participant(populated_store, "user-2")
        result = GenesisService(populated_store).wait_for_participants(PollPolicy(timeout=0))
        assert not result.ok
        assert result.error.code == "TIMEOUT"
        assert result.error.detail["missing"] == ["user-2"]

    def test_no_layout_yet(self) -> None:
        result = GenesisService(MemoryStore()).wait_for_participants(PollPolicy(timeout=0))
        assert result.error.code == "TIMEOUT"
        assert "missing" not in result.error.detail

    def test_bad_layout_is_not_retried(self) -> None:
        store = MemoryStore({LAYOUT_FILE: b"users: [a, a]\n"})
        result = GenesisService(store).wait_for_participants(PollPolicy(timeout=5))
        assert result.error.code == "DUPLICATE_PARTICIPANT"

    def test_syncs_before_probing(self, populated_store: MemoryStore) -> None:
        calls: list[int] = []

        class SyncingStore(MemoryStore):
            def sync(self) -> None:
                calls.append(1)

        store = SyncingStore(populated_store.snapshot())
        assert GenesisService(store).wait_for_participants(PollPolicy(timeout=0)).ok
        assert calls == [1]
