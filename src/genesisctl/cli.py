"""genesisctl entry point: global flags, settings, and the command tree."""

from __future__ import annotations

from typing import Any

import click

from genesisctl import __version__
from genesisctl.commands import register_commands
from genesisctl.commands._context import AppContext
from genesisctl.config.settings import GenesisSettings

_CEREMONY = """\
\b
Ceremony order:
  1. coordinator: store init, layout setup, layout update, framework add
  2. each operator: keys generate, publish
  3. coordinator: genesis wait, genesis generate
  4. everyone: genesis waypoint genesis.blob (compare with waypoint.txt)
"""


@click.group(invoke_without_command=True, epilog=_CEREMONY)
@click.version_option(version=__version__, prog_name="genesisctl")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON on stdout.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the essential value (e.g. the waypoint).")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr.")
@click.option("--log-json", is_flag=True, help="Log as JSON lines on stderr.")
@click.option("--no-interact", is_flag=True, help="Never prompt (for CI and scripted ceremonies).")
@click.option("-c", "--config", "config_path", default=None, help="Use this genesisctl.toml.")
@click.option(
    "--store",
    "store_path",
    default=None,
    help="Coordination store directory; overrides [store] path.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    no_interact: bool,
    config_path: str | None,
    store_path: str | None,
) -> None:
    """Bootstrap a ledger network's genesis from independently published validators."""
    overrides: dict[str, Any] = {}
    if store_path is not None:
        overrides["store"] = {"path": store_path}
    settings = GenesisSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        no_interact=no_interact,
        **overrides,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
