"""Command group: coordination store setup and inspection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from genesisctl.commands._base import GenesisGroup

if TYPE_CHECKING:
    from genesisctl.commands._context import AppContext

_STORE_EXAMPLES = """\
  genesisctl store init
  genesisctl store init --force
  genesisctl store list participants"""


@click.group(cls=GenesisGroup, examples=_STORE_EXAMPLES)
@click.pass_obj
def store(app: AppContext) -> None:
    """Manage the coordination store."""


@store.command(
    "init",
    examples="""\
  genesisctl store init
  GENESISCTL_STORE__BACKEND=git genesisctl store init""",
)
@click.option("--force", is_flag=True, help="Clear an existing non-empty store.")
@click.pass_obj
def init_store(app: AppContext, force: bool) -> None:
    """Create an empty store at the configured location."""
    from genesisctl.services.store import StoreService

    if force and not app.settings.no_interact and not app.settings.json_output:
        click.confirm(f"Erase everything in {app.store.location}?", abort=True)
    app.emit(StoreService(app.store, app.plugins).init(force=force))


@store.command(
    "list",
    examples="""\
  genesisctl store list
  genesisctl --json store list participants""",
)
@click.argument("prefix", required=False, default="")
@click.pass_obj
def list_store(app: AppContext, prefix: str) -> None:
    """List files in the store, optionally under PREFIX."""
    from genesisctl.services.store import StoreService

    app.emit(StoreService(app.store).list(prefix))
