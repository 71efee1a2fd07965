"""Command group: validator key generation."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from genesisctl.commands._base import GenesisGroup, parse_seed

if TYPE_CHECKING:
    from genesisctl.commands._context import AppContext


_KEYS_EXAMPLES = """\
  genesisctl keys generate --output-dir keys/alice
  genesisctl publish alice --keys keys/alice/public-keys.yaml ..."""


@click.group(cls=GenesisGroup, examples=_KEYS_EXAMPLES)
@click.pass_obj
def keys(app: AppContext) -> None:
    """Generate operator key material."""


@keys.command(
    "generate",
    examples="""\
  genesisctl keys generate --output-dir keys/alice
  genesisctl keys generate --output-dir keys/test --seed 0x$(printf '%064d' 1)""",
)
@click.option(
    "--output-dir",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for private-keys.yaml and public-keys.yaml.",
)
@click.option("--seed", default=None, callback=parse_seed, help="32-byte hex seed (test networks only).")
@click.option("--force", is_flag=True, help="Overwrite existing key files.")
@click.pass_obj
def generate(app: AppContext, output_dir: Path, seed: bytes | None, force: bool) -> None:
    """Generate account, consensus and network keys."""
    from genesisctl.services.keys import generate_keys

    app.emit(generate_keys(output_dir, seed=seed, force=force))
