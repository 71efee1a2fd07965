"""Tests for operation-specific Rich renderers."""

from genesisctl.output.renderers import render_result
from genesisctl.services.result import ServiceError, ServiceResult

WAYPOINT = "0:" + "cd" * 32


def _genesis_result(op: str = "generate_genesis") -> ServiceResult:
    return ServiceResult(
        ok=True,
        op=op,
        data={
            "chain_id": 4,
            "is_test": True,
            "participants": ["user-0", "user-1"],
            "genesis": "out/genesis.blob",
            "waypoint_file": "out/waypoint.txt",
            "waypoint": WAYPOINT,
            "size": 1234,
        },
        meta={"timings_ms": {"aggregate": 3.5, "build": 150.0}},
    )


class TestGenericRenderer:
    def test_fields_and_warnings(self) -> None:
        result = ServiceResult(ok=True, op="publish", data={"username": "alice"}, warnings=["hook down"])
        output = render_result(result)
        assert output.startswith("OK")
        assert "publish" in output
        assert "username:" in output
        assert "alice" in output
        assert "warning:" in output
        assert "hook down" in output

    def test_nested_values_as_json(self) -> None:
        result = ServiceResult(ok=True, op="add_framework", data={"modules": ["account", "coin"]})
        assert '["account","coin"]' in render_result(result)


class TestErrorRenderer:
    def test_message(self) -> None:
        result = ServiceResult(
            ok=False,
            op="generate_genesis",
            error=ServiceError(code="MISSING_PARTICIPANT", message="Participant 'bob' has not published"),
        )
        output = render_result(result)
        assert "ERROR" in output
        assert "Participant 'bob' has not published" in output
        assert "detail" not in output

    def test_missing_names_always_shown(self) -> None:
        result = ServiceResult(
            ok=False,
            op="wait_for_participants",
            error=ServiceError(code="TIMEOUT", message="Timed out", detail={"missing": ["carol"]}),
        )
        output = render_result(result)
        assert "missing" in output
        assert "carol" in output

    def test_detail_when_verbose(self) -> None:
        result = ServiceResult(
            ok=False,
            op="generate_genesis",
            error=ServiceError(code="BUILDER_FAILED", message="boom", detail={"exception": "RuntimeError"}),
        )
        assert "RuntimeError" not in render_result(result)
        assert "RuntimeError" in render_result(result, verbose=True)


class TestGenesisRenderer:
    def test_panel(self) -> None:
        output = render_result(_genesis_result())
        assert WAYPOINT in output
        assert "validators: 2 (user-0, user-1)" in output
        assert "1234 bytes" in output
        assert "timings" not in output

    def test_timings_when_verbose(self) -> None:
        output = render_result(_genesis_result("bootstrap_local"), verbose=True)
        assert "timings" in output
        assert "build" in output


class TestLayoutRenderer:
    def test_table_and_participants(self) -> None:
        result = ServiceResult(
            ok=True,
            op="layout_show",
            data={"path": "layout.yaml", "layout": {"root_key": None, "chain_id": 4, "users": ["alice", "bob"]}},
        )
        output = render_result(result)
        assert "chain_id" in output
        assert "2 participants" in output
        assert "alice" in output

    def test_template_prints_yaml(self) -> None:
        result = ServiceResult(ok=True, op="layout_template", data={"text": "users: []\n", "layout": {}})
        assert render_result(result) == "users: []"


class TestStoreListRenderer:
    def test_counts(self) -> None:
        result = ServiceResult(
            ok=True,
            op="store_list",
            data={
                "items": [{"path": "layout.yaml"}, {"path": "participants/alice/identity"}],
                "count": 2,
                "published": ["alice"],
            },
        )
        output = render_result(result)
        assert "participants/alice/identity" in output
        assert "2 entries, 1 published participants" in output


class TestWaypointRenderer:
    def test_match_flag(self) -> None:
        result = ServiceResult(
            ok=True,
            op="derive_waypoint",
            data={"genesis": "genesis.blob", "waypoint": WAYPOINT, "matches": False},
        )
        output = render_result(result)
        assert WAYPOINT in output
        assert "differs from waypoint.txt" in output
