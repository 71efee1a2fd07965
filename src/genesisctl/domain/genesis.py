"""Genesis input set, artifact, and the cross-participant consistency rules.

INVARIANT: A GenesisInputSet is only ever built complete and validated.
INVARIANT: ``canonical_bytes()`` depends only on content — participants are
sorted by name and every mapping is emitted with sorted keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from genesisctl.domain.accounts import AccountBalanceEntry, EmployeeVestingEntry
from genesisctl.domain.framework import FrameworkBundle
from genesisctl.domain.layout import LayoutDescriptor
from genesisctl.domain.participant import ParticipantBundle
from genesisctl.domain.serialization import canonical_json
from genesisctl.errors import DuplicateIdentity, StakeOutOfRange


class GenesisInputSet(BaseModel):
    """Everything the ledger genesis builder consumes, validated as a unit."""

    model_config = {"frozen": True}

    layout: LayoutDescriptor
    participants: tuple[ParticipantBundle, ...]
    balances: tuple[AccountBalanceEntry, ...] = ()
    vesting: tuple[EmployeeVestingEntry, ...] = ()
    framework: FrameworkBundle

    @property
    def chain_id(self) -> int:
        return self.layout.chain_id

    @property
    def is_test(self) -> bool:
        return self.layout.is_test

    def to_document(self) -> dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "is_test": self.is_test,
            "layout": self.layout.to_document(),
            "participants": [p.model_dump(mode="json") for p in self.participants],
            "balances": [b.model_dump(mode="json") for b in self.balances],
            "vesting": [v.model_dump(mode="json") for v in self.vesting],
            "framework": {
                "version": self.framework.version,
                "modules": [
                    {"name": m.name, "code": m.code.hex()} for m in self.framework.modules
                ],
            },
        }

    def canonical_bytes(self) -> bytes:
        """Byte-stable encoding; equal snapshots give equal bytes."""
        return canonical_json(self.to_document())


@dataclass(frozen=True)
class GenesisArtifact:
    """The binary initial ledger state produced by a genesis builder."""

    data: bytes

    def __len__(self) -> int:
        return len(self.data)


def check_participant_consistency(
    layout: LayoutDescriptor,
    bundles: Mapping[str, ParticipantBundle],
) -> None:
    """Cross-participant rules applied before assembly.

    - every stake lies in ``[min_stake, max_stake]``
    - no two participants share an owner account or a consensus key

    *bundles* is iterated in sorted-name order so the first reported
    conflict is the same on every run.
    """
    owners: dict[str, str] = {}
    consensus: dict[str, str] = {}
    for name in sorted(bundles):
        bundle = bundles[name]
        if not layout.min_stake <= bundle.stake_amount <= layout.max_stake:
            raise StakeOutOfRange(name, bundle.stake_amount, layout.min_stake, layout.max_stake)

        owner = bundle.owner_identity.account_address
        if owner in owners:
            raise DuplicateIdentity("owner account", owner, (owners[owner], name))
        owners[owner] = name

        key = bundle.operator.consensus_public_key
        if key in consensus:
            raise DuplicateIdentity("consensus key", key, (consensus[key], name))
        consensus[key] = name
