"""Command group: the genesis layout file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from genesisctl.commands._base import GenesisGroup

if TYPE_CHECKING:
    from genesisctl.commands._context import AppContext

_LAYOUT_EXAMPLES = """\
  genesisctl layout template > layout.yaml
  genesisctl layout setup layout.yaml
  genesisctl layout update --user alice --user bob --root-key 0x...
  genesisctl layout show"""


@click.group(cls=GenesisGroup, examples=_LAYOUT_EXAMPLES)
@click.pass_obj
def layout(app: AppContext) -> None:
    """Create and edit layout.yaml."""


@layout.command(
    examples="""\
  genesisctl layout template > layout.yaml
  genesisctl layout template --write""",
)
@click.option("--write", is_flag=True, help="Write the template into the store instead of stdout.")
@click.option("--force", is_flag=True, help="With --write, overwrite an existing layout.")
@click.pass_obj
def template(app: AppContext, write: bool, force: bool) -> None:
    """Print (or store) a default layout."""
    from genesisctl.services.layout import LayoutService

    if write:
        app.emit(LayoutService(app.store, app.plugins).write_template(force=force))
    else:
        app.emit(LayoutService.template())


@layout.command(
    examples="""\
  genesisctl layout setup layout.yaml
  genesisctl layout setup layout.yaml --force""",
)
@click.argument("layout_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Reinitialize a non-empty store.")
@click.pass_obj
def setup(app: AppContext, layout_file: Path, force: bool) -> None:
    """Initialize the store and seed it with LAYOUT_FILE."""
    from genesisctl.services.layout import LayoutService

    app.emit(LayoutService(app.store, app.plugins).setup(layout_file.read_bytes(), force=force))


def _read_optional(path: Path | None) -> bytes | None:
    return path.read_bytes() if path is not None else None


@layout.command(
    examples="""\
  genesisctl layout update --root-key 0x6f1c...
  genesisctl layout update --user alice --user bob
  genesisctl layout update --chain-id testnet --no-test
  genesisctl layout update --balances balances.yaml""",
)
@click.option("--root-key", default=None, help="Root account public key (hex).")
@click.option("--user", "users", multiple=True, help="Participant name to add (repeatable).")
@click.option("--chain-id", default=None, help="Chain id (1-255) or name such as 'testing'.")
@click.option("--test/--no-test", "is_test", default=None, help="Mark the network as a test network.")
@click.option(
    "--balances",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Local balances YAML to validate and store.",
)
@click.option(
    "--vesting",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Local employee vesting YAML to validate and store.",
)
@click.option("--balances-file", default=None, help="Store path of an already-stored balances file.")
@click.option("--vesting-file", default=None, help="Store path of an already-stored vesting file.")
@click.pass_obj
def update(
    app: AppContext,
    root_key: str | None,
    users: tuple[str, ...],
    chain_id: str | None,
    is_test: bool | None,
    balances: Path | None,
    vesting: Path | None,
    balances_file: str | None,
    vesting_file: str | None,
) -> None:
    """Edit the stored layout."""
    from genesisctl.services.layout import LayoutService

    app.emit(
        LayoutService(app.store, app.plugins).update(
            root_key=root_key,
            participants=users,
            chain_id=chain_id,
            is_test=is_test,
            balances_file=balances_file,
            vesting_file=vesting_file,
            balances=_read_optional(balances),
            vesting=_read_optional(vesting),
        )
    )


@layout.command(
    examples="""\
  genesisctl layout show
  genesisctl --json layout show""",
)
@click.pass_obj
def show(app: AppContext) -> None:
    """Show the stored layout."""
    from genesisctl.services.layout import LayoutService

    app.emit(LayoutService(app.store).show())
