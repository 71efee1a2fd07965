"""End-to-end CLI runs against a local filesystem store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from genesisctl.cli import cli
from genesisctl.domain.participant import PUBLIC_KEYS_FILE

ROOT_KEY = "0x" + "ab" * 32
STAKE = "100000000000000"


def _ok(runner: CliRunner, *args: str) -> str:
    result = runner.invoke(cli, ["--no-interact", *args])
    assert result.exit_code == 0, result.output
    return result.output


def _prepare_store(runner: CliRunner, tmp_path: Path, names: tuple[str, ...] = ("alice", "bob")) -> None:
    layout = tmp_path / "layout.yaml"
    layout.write_text(_ok(runner, "layout", "template"))
    _ok(runner, "layout", "setup", str(layout))
    user_flags = [flag for name in names for flag in ("--user", name)]
    _ok(runner, "layout", "update", "--root-key", ROOT_KEY, *user_flags)


def _publish(runner: CliRunner, name: str, seed_byte: int) -> None:
    keys_dir = Path("keys") / name
    _ok(runner, "keys", "generate", "--output-dir", str(keys_dir), "--seed", f"{seed_byte:02x}" * 32)
    _ok(
        runner,
        "publish",
        name,
        "--keys",
        str(keys_dir / PUBLIC_KEYS_FILE),
        "--validator-host",
        f"{name}.example:6180",
        "--stake",
        STAKE,
    )


@pytest.mark.usefixtures("_isolated_project")
class TestWorkflow:
    def test_full_ceremony(self, cli_runner: CliRunner, tmp_path: Path, framework_file: Path) -> None:
        _prepare_store(cli_runner, tmp_path)
        _publish(cli_runner, "alice", 1)
        _publish(cli_runner, "bob", 2)
        _ok(cli_runner, "framework", "add", str(framework_file))

        waited = json.loads(_ok(cli_runner, "--json", "genesis", "wait", "--timeout", "0"))
        assert waited["data"]["participants"] == ["alice", "bob"]

        generated = json.loads(_ok(cli_runner, "--json", "genesis", "generate"))
        out = Path.cwd() / "genesis-out"
        assert generated["data"]["genesis"] == str(out / "genesis.blob")
        recorded = (out / "waypoint.txt").read_text().strip()
        assert generated["data"]["waypoint"] == recorded

        derived = _ok(cli_runner, "-q", "genesis", "waypoint", str(out / "genesis.blob")).strip()
        assert derived == recorded

    def test_generate_before_everyone_published(
        self, cli_runner: CliRunner, tmp_path: Path, framework_file: Path
    ) -> None:
        _prepare_store(cli_runner, tmp_path)
        _publish(cli_runner, "alice", 1)
        _ok(cli_runner, "framework", "add", str(framework_file))

        result = cli_runner.invoke(cli, ["genesis", "generate"])
        assert result.exit_code == 1
        assert "bob" in result.output
        assert not (tmp_path / "genesis-out").exists()

    def test_wait_times_out_listing_missing(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _prepare_store(cli_runner, tmp_path)
        _publish(cli_runner, "bob", 2)
        result = cli_runner.invoke(cli, ["genesis", "wait", "--timeout", "0"])
        assert result.exit_code == 1
        assert "alice" in result.output

    def test_store_list(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _prepare_store(cli_runner, tmp_path)
        _publish(cli_runner, "alice", 1)
        listed = json.loads(_ok(cli_runner, "--json", "store", "list"))
        assert listed["data"]["published"] == ["alice"]
        quiet = _ok(cli_runner, "-q", "store", "list", "participants").split()
        assert quiet == ["participants/alice/identity"]

    def test_store_init_force(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _prepare_store(cli_runner, tmp_path)
        refused = cli_runner.invoke(cli, ["store", "init"])
        assert refused.exit_code == 1
        _ok(cli_runner, "store", "init", "--force")
        assert list((tmp_path / ".genesis").iterdir()) == []

    def test_layout_show_warns_without_root_key(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        layout = tmp_path / "layout.yaml"
        layout.write_text("users: [alice]\n")
        _ok(cli_runner, "layout", "setup", str(layout))
        output = _ok(cli_runner, "layout", "show")
        assert "root_key is not set" in output
        assert "1 participants" in output

    def test_publish_rejects_bad_host(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _prepare_store(cli_runner, tmp_path)
        _ok(cli_runner, "keys", "generate", "--output-dir", "keys/alice")
        result = cli_runner.invoke(
            cli,
            ["publish", "alice", "--keys", "keys/alice/public-keys.yaml", "--validator-host", "nohost", "--stake", STAKE],
        )
        assert result.exit_code == 1
        assert "SCHEMA_ERROR" in result.output or "Invalid" in result.output

    def test_config_file_moves_store(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "genesisctl.toml").write_text('[store]\npath = "coord"\n')
        _ok(cli_runner, "store", "init")
        assert (tmp_path / "coord").is_dir()

    def test_store_flag_overrides_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "genesisctl.toml").write_text('[store]\npath = "coord"\n')
        _ok(cli_runner, "--store", "alt", "store", "init")
        assert (tmp_path / "alt").is_dir()
        assert not (tmp_path / "coord").exists()

    def test_commands_find_store_from_subdirectory(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _prepare_store(cli_runner, tmp_path)
        _publish(cli_runner, "alice", 1)
        nested = tmp_path / "keys" / "alice"
        monkeypatch.chdir(nested)
        listed = json.loads(_ok(cli_runner, "--json", "store", "list"))
        assert listed["data"]["published"] == ["alice"]
        assert not (nested / ".genesis").exists()

    def test_bootstrap_local(self, cli_runner: CliRunner, tmp_path: Path, framework_file: Path) -> None:
        seed = "07" * 32
        args = ["--json", "genesis", "bootstrap-local", "--validators", "2", "--framework", str(framework_file)]
        first = json.loads(_ok(cli_runner, *args, "--seed", seed, "--output-dir", "a"))
        second = json.loads(_ok(cli_runner, *args, "--seed", seed, "--output-dir", "b"))
        assert first["data"]["waypoint"] == second["data"]["waypoint"]
        assert first["data"]["participants"] == ["user-0", "user-1"]
        assert not (tmp_path / ".genesis").exists()

    def test_bootstrap_rejects_bad_framework(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        bogus = tmp_path / "bogus.mrb"
        bogus.write_bytes(b"nope")
        result = cli_runner.invoke(cli, ["genesis", "bootstrap-local", "--framework", str(bogus)])
        assert result.exit_code == 1

    def test_bad_seed_is_usage_error(self, cli_runner: CliRunner, framework_file: Path) -> None:
        result = cli_runner.invoke(
            cli, ["genesis", "bootstrap-local", "--framework", str(framework_file), "--seed", "zz"]
        )
        assert result.exit_code == 2
        assert "seed must be hex" in result.output
