"""Subcommand modules for genesisctl.

Provides register_commands() which uses deferred imports to keep
``genesisctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from genesisctl.commands.framework import framework
    from genesisctl.commands.genesis import genesis
    from genesisctl.commands.keys import keys
    from genesisctl.commands.layout import layout
    from genesisctl.commands.store import store

    cli.add_command(store)
    cli.add_command(keys)
    cli.add_command(layout)
    cli.add_command(framework)
    cli.add_command(genesis)

    # --- Standalone commands ---
    from genesisctl.commands.publish import publish

    cli.add_command(publish)
