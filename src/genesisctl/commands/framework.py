"""Command group: the framework bundle genesis installs."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from genesisctl.commands._base import GenesisGroup

if TYPE_CHECKING:
    from genesisctl.commands._context import AppContext


@click.group(
    cls=GenesisGroup,
    examples="""\
  genesisctl framework add head.mrb
  genesisctl --json framework add releases/v1.mrb""",
)
@click.pass_obj
def framework(app: AppContext) -> None:
    """Manage the framework bundle."""


@framework.command(
    examples="""\
  genesisctl framework add head.mrb""",
)
@click.argument("bundle_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def add(app: AppContext, bundle_file: Path) -> None:
    """Validate BUNDLE_FILE and store it as framework.mrb."""
    from genesisctl.services.framework import FrameworkService

    app.emit(FrameworkService(app.store, app.plugins).add(bundle_file.read_bytes()))
