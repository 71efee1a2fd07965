"""Scoped scratch workspaces for key material and staging.

Every run gets its own fresh directory, owned by the caller and removed on
every exit path. Nothing is shared through process-wide temp paths, so two
bootstrap runs in one process cannot see each other's files.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workspace:
    """Handle to a scratch directory that exists for the duration of a ``with`` block."""

    root: Path

    def path(self, *parts: str) -> Path:
        return self.root.joinpath(*parts)

    def subdir(self, *parts: str) -> Path:
        """Return ``root/parts``, creating it."""
        target = self.path(*parts)
        target.mkdir(parents=True, exist_ok=True)
        return target


@contextmanager
def workspace(prefix: str = "genesisctl-", *, parent: Path | None = None) -> Iterator[Workspace]:
    """Create a fresh workspace and tear it down on exit (success or failure).

    Usage::

        with workspace() as ws:
            keys_dir = ws.subdir("keys", "user-0")
    """
    root = Path(tempfile.mkdtemp(prefix=prefix, dir=parent))
    logger.debug("Created workspace %s", root)
    try:
        yield Workspace(root)
    finally:
        try:
            shutil.rmtree(root)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Failed to remove workspace %s", root, exc_info=True)
