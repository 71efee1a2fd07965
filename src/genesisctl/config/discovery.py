"""Locate the genesisctl project a command runs in.

A project is anchored by ``genesisctl.toml``. Without one, an already
initialized store directory (``.genesis/`` by default) anchors it instead, so
participants can run commands from any subdirectory of a config-less
checkout. ``GENESISCTL_CONFIG`` names the config file directly and disables
the walk-up.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "genesisctl.toml"
CONFIG_ENV_VAR = "GENESISCTL_CONFIG"
STORE_PATH_ENV_VAR = "GENESISCTL_STORE__PATH"
DEFAULT_STORE_DIR = ".genesis"


def _ancestors(start: Path | None) -> Iterator[Path]:
    here = (start or Path.cwd()).resolve()
    yield here
    yield from here.parents


def find_config(start: Path | None = None) -> Path | None:
    """Nearest ``genesisctl.toml`` at or above *start* (default: cwd).

    When ``GENESISCTL_CONFIG`` is set it wins outright; a dangling value
    means "no config", not "keep looking".
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    for directory in _ancestors(start):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def store_dir_name() -> str:
    """Store directory to anchor on: the env override when it is relative."""
    override = os.environ.get(STORE_PATH_ENV_VAR)
    if override and not Path(override).expanduser().is_absolute():
        return override
    return DEFAULT_STORE_DIR


def find_store_anchor(start: Path | None = None, store_dir: str | None = None) -> Path | None:
    """Nearest directory at or above *start* holding an initialized store.

    Returns the directory containing the store, which becomes the project
    root that relative paths resolve against.
    """
    name = store_dir or store_dir_name()
    for directory in _ancestors(start):
        if (directory / name).is_dir():
            return directory
    return None
