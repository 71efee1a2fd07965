"""Command group: genesis generation and verification."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from genesisctl.commands._base import GenesisGroup, parse_seed

if TYPE_CHECKING:
    from genesisctl.commands._context import AppContext

_GENESIS_EXAMPLES = """\
  genesisctl genesis wait --timeout 600
  genesisctl genesis generate --output-dir out/
  genesisctl genesis waypoint out/genesis.blob
  genesisctl genesis bootstrap-local --validators 4 --framework head.mrb"""

_OUTPUT_DIR = click.Path(file_okay=False, path_type=Path)


@click.group(cls=GenesisGroup, examples=_GENESIS_EXAMPLES)
@click.pass_obj
def genesis(app: AppContext) -> None:
    """Build genesis from the coordination store."""


@genesis.command(
    examples="""\
  genesisctl genesis generate
  genesisctl genesis generate --output-dir out/ --force""",
)
@click.option("--output-dir", type=_OUTPUT_DIR, default=None, help="Where to write genesis.blob and waypoint.txt.")
@click.option("--force", is_flag=True, help="Overwrite existing artifacts.")
@click.pass_obj
def generate(app: AppContext, output_dir: Path | None, force: bool) -> None:
    """Aggregate the store and write genesis.blob + waypoint.txt."""
    from genesisctl.services.genesis import GenesisService

    service = GenesisService(app.store, app.plugins)
    app.emit(service.generate(output_dir or app.settings.output_dir, force=force))


@genesis.command(
    examples="""\
  genesisctl genesis waypoint out/genesis.blob
  genesisctl -q genesis waypoint out/genesis.blob""",
)
@click.argument("blob", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def waypoint(app: AppContext, blob: Path) -> None:
    """Derive the waypoint of BLOB."""
    from genesisctl.services.genesis import GenesisService

    app.emit(GenesisService.waypoint(blob))


@genesis.command(
    examples="""\
  genesisctl genesis wait
  genesisctl genesis wait --timeout 60 --interval 5""",
)
@click.option("--timeout", type=click.FloatRange(min=0), default=None, help="Seconds before giving up.")
@click.option("--interval", type=click.FloatRange(min=0, min_open=True), default=None, help="Seconds between checks.")
@click.pass_obj
def wait(app: AppContext, timeout: float | None, interval: float | None) -> None:
    """Wait until every participant in the layout has published."""
    from genesisctl.services.genesis import GenesisService

    policy = app.poll_policy(timeout=timeout, interval=interval)
    app.emit(GenesisService(app.store, app.plugins).wait_for_participants(policy))


@genesis.command(
    "bootstrap-local",
    examples="""\
  genesisctl genesis bootstrap-local --framework head.mrb
  genesisctl genesis bootstrap-local --validators 4 --framework head.mrb --seed 00..00 --output-dir net/""",
)
@click.option("--validators", "count", type=click.IntRange(min=1), default=1, show_default=True)
@click.option(
    "--framework",
    "framework_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Framework bundle (.mrb).",
)
@click.option("--output-dir", type=_OUTPUT_DIR, default=None)
@click.option("--seed", default=None, callback=parse_seed, help="32-byte hex seed for reproducible keys.")
@click.option("--chain-id", type=click.IntRange(1, 255), default=4, show_default=True)
@click.option("--force", is_flag=True, help="Overwrite existing artifacts.")
@click.pass_obj
def bootstrap_local_cmd(
    app: AppContext,
    count: int,
    framework_file: Path,
    output_dir: Path | None,
    seed: bytes | None,
    chain_id: int,
    force: bool,
) -> None:
    """Generate genesis for a local N-validator test network."""
    from genesisctl.domain.framework import decode_bundle
    from genesisctl.errors import GenesisError
    from genesisctl.services.bootstrap import bootstrap_local
    from genesisctl.services.result import ServiceResult

    try:
        bundle = decode_bundle(framework_file.read_bytes())
    except GenesisError as exc:
        app.emit(ServiceResult.failure("bootstrap_local", exc))
        return
    app.emit(
        bootstrap_local(
            count,
            output_dir or app.settings.output_dir,
            bundle,
            seed=seed,
            chain_id=chain_id,
            force=force,
            plugins=app.plugins,
        )
    )
