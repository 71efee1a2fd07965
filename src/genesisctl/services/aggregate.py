"""GenesisAggregator — fold the coordination store into a GenesisInputSet.

Pipeline: LAYOUT → PARTICIPANTS → ACCOUNTS → FRAMEWORK → CHECK → ASSEMBLE

INVARIANT: The result depends only on store content. Participants are read
in sorted-name order; store listing order, wall clock and hash iteration
order never reach the input set.
INVARIANT: Layout problems (bad schema, duplicate names, no root key) are
reported before any participant is read.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from genesisctl.domain.accounts import load_balances, load_vesting
from genesisctl.domain.genesis import GenesisInputSet, check_participant_consistency
from genesisctl.domain.layout import LAYOUT_FILE, LayoutDescriptor, load_layout
from genesisctl.domain.participant import ParticipantBundle, identity_path, load_bundle
from genesisctl.errors import MissingParticipant, MissingRootKey, NotFound, SchemaError

if TYPE_CHECKING:
    from genesisctl.infrastructure.store.base import CoordinationStore
    from genesisctl.services.framework import FrameworkBundleProvider

logger = logging.getLogger(__name__)


class GenesisAggregator:
    """Reads and validates everything genesis needs, or raises the first problem found."""

    def __init__(self, store: CoordinationStore, framework: FrameworkBundleProvider) -> None:
        self._store = store
        self._framework = framework

    def load_layout(self) -> LayoutDescriptor:
        layout = load_layout(self._store.read(LAYOUT_FILE))
        if layout.root_key is None:
            raise MissingRootKey()
        return layout

    def missing_participants(self, layout: LayoutDescriptor) -> list[str]:
        """Names in *layout* with nothing published yet, sorted."""
        return [n for n in sorted(layout.participants) if not self._store.exists(identity_path(n))]

    def _read_bundle(self, name: str) -> ParticipantBundle:
        try:
            data = self._store.read(identity_path(name))
        except NotFound as exc:
            raise MissingParticipant(name) from exc
        bundle = load_bundle(data)
        if bundle.username != name:
            raise SchemaError(
                f"Identity published under {name!r} names {bundle.username!r}",
                name=name,
            )
        return bundle

    def _read_reference(self, path: str) -> bytes:
        try:
            return self._store.read(path)
        except ValueError as exc:
            raise SchemaError(f"Invalid store path in {LAYOUT_FILE}: {exc}", path=path) from exc

    def aggregate(self) -> GenesisInputSet:
        """Build the validated input set.

        Raises:
            SchemaError, DuplicateParticipant, MissingRootKey: layout problems.
            MissingParticipant: a listed name has no published identity.
            DuplicateAddress: repeated balance address or vesting beneficiary.
            StakeOutOfRange, DuplicateIdentity: cross-participant conflicts.
            NotFound: a referenced accounts file or the framework is absent.
        """
        # ── LAYOUT ───────────────────────────────────────────────
        layout = self.load_layout()

        # ── PARTICIPANTS ─────────────────────────────────────────
        bundles = {name: self._read_bundle(name) for name in sorted(layout.participants)}

        # ── ACCOUNTS ─────────────────────────────────────────────
        balances = []
        if layout.balances_file:
            balances = load_balances(self._read_reference(layout.balances_file), what=layout.balances_file)
        vesting = []
        if layout.vesting_file:
            vesting = load_vesting(self._read_reference(layout.vesting_file), what=layout.vesting_file)

        # ── FRAMEWORK ────────────────────────────────────────────
        framework = self._framework.load()

        # ── CHECK ────────────────────────────────────────────────
        check_participant_consistency(layout, bundles)

        # ── ASSEMBLE ─────────────────────────────────────────────
        inputs = GenesisInputSet(
            layout=layout,
            participants=tuple(bundles[name] for name in sorted(bundles)),
            balances=tuple(balances),
            vesting=tuple(vesting),
            framework=framework,
        )
        logger.debug(
            "Aggregated %d participants, %d balances, %d vesting records",
            len(inputs.participants),
            len(inputs.balances),
            len(inputs.vesting),
        )
        return inputs
