"""Ledger genesis builder seam.

Anything that turns a :class:`GenesisInputSet` into a blob satisfies
:class:`LedgerGenesisBuilder`. The default routes through the
``build_genesis`` plugin hook, where the built-in reference builder sits
last in line.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from genesisctl.domain.genesis import GenesisArtifact
from genesisctl.errors import InvalidArtifact

if TYPE_CHECKING:
    from genesisctl.domain.genesis import GenesisInputSet
    from genesisctl.plugins.manager import PluginManager


class LedgerGenesisBuilder(Protocol):
    def build(self, inputs: GenesisInputSet) -> GenesisArtifact: ...


class PluginGenesisBuilder:
    """Dispatches to the first ``build_genesis`` implementation that answers."""

    def __init__(self, plugins: PluginManager) -> None:
        self._plugins = plugins

    def build(self, inputs: GenesisInputSet) -> GenesisArtifact:
        blob = self._plugins.hook.build_genesis(inputs=inputs)
        if blob is None:
            raise InvalidArtifact("No genesis builder produced an artifact")
        if not isinstance(blob, bytes | bytearray):
            raise InvalidArtifact(f"Genesis builder returned {type(blob).__name__}, expected bytes")
        return GenesisArtifact(bytes(blob))
