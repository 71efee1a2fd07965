"""Pluggy hook specifications for genesisctl.

One builder hook lets an external VM produce the genesis state; the
``post_*`` hooks announce pipeline milestones (notifications, audit trails,
pushing artifacts elsewhere).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from genesisctl.domain.genesis import GenesisInputSet

hookspec = pluggy.HookspecMarker("genesisctl")


class GenesisctlHookSpec:
    """Hook specifications for the genesisctl plugin system."""

    @hookspec(firstresult=True)
    def build_genesis(self, inputs: GenesisInputSet) -> bytes | None:
        """Execute genesis for *inputs* and return the ledger-state blob.

        The first non-None result wins. Return None to defer to the next
        builder. Exceptions propagate to the caller unchanged.
        """

    @hookspec
    def post_store_init(self, location: str) -> None:
        """Called after a coordination store is initialized."""

    @hookspec
    def post_layout_update(self, participants: list[str], chain_id: int) -> None:
        """Called after ``layout.yaml`` is (re)written."""

    @hookspec
    def post_publish(self, username: str, path: str) -> None:
        """Called after a participant bundle is written to the store."""

    @hookspec
    def post_genesis(self, output_dir: str, waypoint: str) -> None:
        """Called after ``genesis.blob`` and ``waypoint.txt`` are written."""
