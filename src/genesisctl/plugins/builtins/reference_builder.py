"""Reference genesis builder.

Stands in for a real VM: instead of executing the framework's genesis
transaction it records the resulting initial state (accounts, validator
set, chain parameters, framework module digests) as a versioned,
canonical-JSON blob. Deterministic for a given input set.

Blob layout: ``b"GENESIS\\x00"`` + u32 format version (LE) + state JSON.
"""

from __future__ import annotations

import logging
import struct
from typing import Any

import pluggy

from genesisctl.domain.genesis import GenesisInputSet
from genesisctl.domain.participant import ParticipantBundle
from genesisctl.domain.serialization import canonical_json
from genesisctl.domain.types import derive_account_address

hookimpl = pluggy.HookimplMarker("genesisctl")

logger = logging.getLogger(__name__)

GENESIS_MAGIC = b"GENESIS\x00"
FORMAT_VERSION = 1


def _network_address(host_port: str, network_key: str) -> str:
    host, _, port = host_port.rpartition(":")
    return f"/dns/{host}/tcp/{port}/noise-ik/{network_key}/handshake/0"


def _validator_entry(bundle: ParticipantBundle) -> dict[str, Any]:
    operator = bundle.operator
    entry: dict[str, Any] = {
        "name": bundle.username,
        "owner_address": bundle.owner_identity.account_address,
        "operator_address": operator.account_address,
        "voter_address": bundle.voter.account_address,
        "consensus_public_key": operator.consensus_public_key,
        "validator_network_address": _network_address(
            bundle.validator_host, operator.validator_network_public_key
        ),
        "stake_amount": bundle.stake_amount,
        "commission_percentage": bundle.commission_percentage,
    }
    if bundle.full_node_host and operator.full_node_network_public_key:
        entry["full_node_network_address"] = _network_address(
            bundle.full_node_host, operator.full_node_network_public_key
        )
    return entry


def build_reference_state(inputs: GenesisInputSet) -> dict[str, Any]:
    """The initial state a genesis transaction over *inputs* would produce."""
    layout = inputs.layout
    assert layout.root_key is not None
    accounts: dict[str, int] = {b.account_address: b.balance for b in inputs.balances}
    for bundle in inputs.participants:
        owner = bundle.owner_identity.account_address
        accounts.setdefault(owner, 0)
    return {
        "chain_id": layout.chain_id,
        "is_test": layout.is_test,
        "root_account": derive_account_address(bytes.fromhex(layout.root_key[2:])),
        "config": {
            "allow_new_validators": layout.allow_new_validators,
            "epoch_duration_secs": layout.epoch_duration_secs,
            "min_stake": layout.min_stake,
            "max_stake": layout.max_stake,
            "recurring_lockup_duration_secs": layout.recurring_lockup_duration_secs,
            "required_proposer_stake": layout.required_proposer_stake,
            "rewards_apy_percentage": layout.rewards_apy_percentage,
            "voting_duration_secs": layout.voting_duration_secs,
            "voting_power_increase_limit": layout.voting_power_increase_limit,
        },
        "accounts": [{"address": a, "balance": accounts[a]} for a in sorted(accounts)],
        "total_supply": sum(accounts.values()),
        "validators": [_validator_entry(b) for b in inputs.participants],
        "vesting": [v.model_dump(mode="json") for v in inputs.vesting],
        "framework": {
            "version": inputs.framework.version,
            "digest": inputs.framework.digest,
            "modules": [{"name": m.name, "digest": m.digest} for m in inputs.framework.modules],
        },
    }


def encode_reference_state(state: dict[str, Any]) -> bytes:
    return GENESIS_MAGIC + struct.pack("<I", FORMAT_VERSION) + canonical_json(state)


class ReferenceGenesisBuilder:
    """Built-in fallback for the ``build_genesis`` hook."""

    @hookimpl(trylast=True)
    def build_genesis(self, inputs: GenesisInputSet) -> bytes:
        state = build_reference_state(inputs)
        logger.debug(
            "Built reference genesis: %d validators, %d accounts",
            len(state["validators"]),
            len(state["accounts"]),
        )
        return encode_reference_state(state)
