"""Single-machine bootstrap of an N-validator test network.

Runs the whole flow (keys, layout, publication, framework, genesis) against
a throwaway filesystem store inside a scoped workspace. Only the output
directory survives the run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from genesisctl.domain.framework import encode_bundle
from genesisctl.domain.layout import DEFAULT_MIN_STAKE, build_template, serialize_layout
from genesisctl.domain.participant import ParticipantBundle
from genesisctl.errors import GenesisError, SchemaError
from genesisctl.infrastructure.keys import KeyGenerator
from genesisctl.infrastructure.store import FilesystemStore
from genesisctl.infrastructure.workspace import workspace
from genesisctl.services.base import timed_stage
from genesisctl.services.framework import FrameworkService
from genesisctl.services.genesis import GenesisService
from genesisctl.services.keys import public_identity, write_key_files
from genesisctl.services.layout import LayoutService
from genesisctl.services.publish import PublishService
from genesisctl.services.result import ServiceResult

if TYPE_CHECKING:
    from pathlib import Path

    from genesisctl.domain.framework import FrameworkBundle
    from genesisctl.plugins.manager import PluginManager

VALIDATOR_PORT = 6180
FULL_NODE_PORT = 6182


def participant_name(index: int) -> str:
    return f"user-{index}"


def bootstrap_local(
    count: int,
    output_dir: Path,
    framework: FrameworkBundle,
    *,
    seed: bytes | None = None,
    stake_amount: int = DEFAULT_MIN_STAKE,
    chain_id: int = 4,
    force: bool = False,
    plugins: PluginManager | None = None,
) -> ServiceResult:
    """Generate genesis for *count* local validators named ``user-0`` to ``user-<count-1>``.

    With *seed* every key, and therefore the waypoint, is reproducible.
    """
    op = "bootstrap_local"
    timings: dict[str, float] = {}
    log = structlog.get_logger("genesisctl.bootstrap")
    if count < 1:
        return ServiceResult.failure(op, SchemaError("At least one validator is required", count=count))
    try:
        generator = KeyGenerator(seed)
    except ValueError as exc:
        return ServiceResult.failure(op, SchemaError(str(exc)))

    warnings: list[str] = []
    try:
        with workspace(prefix="genesisctl-bootstrap-") as ws:
            store = FilesystemStore(ws.path("store"))

            with timed_stage("keys", timings):
                root_material = generator.generate_key_material()
                bundles = []
                for index in range(count):
                    name = participant_name(index)
                    material = generator.generate_key_material()
                    write_key_files(ws.subdir("keys", name), material)
                    bundles.append(
                        ParticipantBundle(
                            username=name,
                            owner_identity=public_identity(material),
                            validator_host=f"localhost:{VALIDATOR_PORT}",
                            full_node_host=f"localhost:{FULL_NODE_PORT}",
                            stake_amount=stake_amount,
                        )
                    )

            with timed_stage("layout", timings):
                layouts = LayoutService(store, plugins)
                result = layouts.setup(serialize_layout(build_template()))
                if result.ok:
                    result = layouts.update(
                        root_key="0x" + root_material.account_public_key.hex(),
                        participants=[b.username for b in bundles],
                        chain_id=chain_id,
                    )
                if not result.ok:
                    return result.model_copy(update={"op": op})
                warnings.extend(result.warnings)

            with timed_stage("publish", timings):
                result = PublishService(store, plugins).publish_many(bundles)
                if not result.ok:
                    return result.model_copy(update={"op": op})
                warnings.extend(result.warnings)

            result = FrameworkService(store, plugins).add(encode_bundle(framework))
            if not result.ok:
                return result.model_copy(update={"op": op})

            result = GenesisService(store, plugins).generate(output_dir, force=force)
    except GenesisError as exc:
        return ServiceResult.failure(op, exc)

    if not result.ok:
        return result.model_copy(update={"op": op})
    log.info("bootstrap.complete", validators=count, waypoint=result.data["waypoint"])
    meta = dict(result.meta or {})
    meta["timings_ms"] = {**timings, **meta.get("timings_ms", {})}
    return result.model_copy(
        update={
            "op": op,
            "warnings": warnings + result.warnings,
            "data": {**result.data, "deterministic": generator.deterministic},
            "meta": meta,
        }
    )
