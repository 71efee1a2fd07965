"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, genesisctl.toml only contains
overrides. A local bootstrap needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from genesisctl.config.discovery import DEFAULT_STORE_DIR

# --- genesisctl.toml sections ---


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    backend: Literal["local", "git"] = "local"
    path: str = DEFAULT_STORE_DIR
    remote: str | None = None
    branch: str = "main"
    auto_push: bool = True
    author_name: str = "genesisctl"
    author_email: str = "genesisctl@localhost"


class GenesisConfig(BaseModel):
    """[genesis] section."""

    model_config = {"frozen": True}

    output_dir: str = "genesis-out"


class WaitConfig(BaseModel):
    """[wait] section."""

    model_config = {"frozen": True}

    timeout_secs: float = 300.0
    interval_secs: float = 2.0
    backoff: Literal["fixed", "exponential"] = "fixed"
    max_interval_secs: float = 30.0


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    entry_points: bool = True
    disabled: list[str] = Field(default_factory=list)

