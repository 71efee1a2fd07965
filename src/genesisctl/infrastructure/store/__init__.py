"""Coordination store backends.

``open_store`` picks a backend by name so callers (CLI, tests) never branch
on which one is in play.
"""

from __future__ import annotations

from pathlib import Path

from genesisctl.infrastructure.store.base import CoordinationStore, normalize_store_path
from genesisctl.infrastructure.store.filesystem import FilesystemStore
from genesisctl.infrastructure.store.git import GitStore
from genesisctl.infrastructure.store.memory import MemoryStore

__all__ = [
    "CoordinationStore",
    "FilesystemStore",
    "GitStore",
    "MemoryStore",
    "normalize_store_path",
    "open_store",
]


def open_store(
    backend: str,
    root: Path,
    *,
    remote: str | None = None,
    branch: str = "main",
    auto_push: bool = True,
    author_name: str = "genesisctl",
    author_email: str = "genesisctl@localhost",
) -> CoordinationStore:
    """Construct the store named by *backend* (``"local"`` or ``"git"``)."""
    if backend == "local":
        return FilesystemStore(root)
    if backend == "git":
        return GitStore(
            root,
            remote=remote,
            branch=branch,
            auto_push=auto_push,
            author_name=author_name,
            author_email=author_email,
        )
    msg = f"Unknown store backend: {backend!r}"
    raise ValueError(msg)
