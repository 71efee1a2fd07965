"""Tests for the format_result dispatcher and OutputSettings."""

import json

from genesisctl.output.formatters import OutputSettings, format_result
from genesisctl.services.result import ServiceError, ServiceResult

WAYPOINT = "0:" + "ab" * 32


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail", **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code="ERR", message=msg, detail=dict(detail)),
    )


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResultJSON:
    def test_json_mode(self) -> None:
        output = format_result(_ok("generate_genesis", waypoint=WAYPOINT), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["op"] == "generate_genesis"
        assert data["data"]["waypoint"] == WAYPOINT

    def test_json_mode_error(self) -> None:
        output = format_result(_err("publish", "Bad"), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is False
        assert data["error"]["message"] == "Bad"

    def test_json_wins_over_quiet(self) -> None:
        output = format_result(_ok("x", a=1), settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(output)["data"] == {"a": 1}


class TestFormatResultQuiet:
    def test_waypoint_only(self) -> None:
        result = _ok("generate_genesis", waypoint=WAYPOINT, genesis="out/genesis.blob")
        assert format_result(result, settings=OutputSettings(quiet=True)) == WAYPOINT

    def test_template_text(self) -> None:
        result = _ok("layout_template", text="users: []\n")
        assert format_result(result, settings=OutputSettings(quiet=True)) == "users: []"

    def test_listing_paths(self) -> None:
        result = _ok("store_list", items=[{"path": "a"}, {"path": "b/c"}])
        assert format_result(result, settings=OutputSettings(quiet=True)) == "a\nb/c"

    def test_plain_ok(self) -> None:
        assert format_result(_ok("publish"), settings=OutputSettings(quiet=True)) == "OK: publish"

    def test_error(self) -> None:
        output = format_result(_err("publish", "nope"), settings=OutputSettings(quiet=True))
        assert output.startswith("ERROR: publish")
        assert "nope" in output


class TestFormatResultHuman:
    def test_default_is_human(self) -> None:
        output = format_result(_ok("publish", username="alice"))
        assert "OK" in output
        assert "username:" in output
        assert "alice" in output
