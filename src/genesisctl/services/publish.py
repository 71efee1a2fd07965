"""PublishService — participants place their identity bundle in the store.

Each participant owns exactly one path, ``participants/<name>/identity``;
publishing again overwrites it (last writer wins).
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from genesisctl.domain.layout import check_participants
from genesisctl.domain.participant import (
    ParticipantBundle,
    bundle_summary,
    identity_path,
    load_public_identity,
    serialize_bundle,
)
from genesisctl.domain.serialization import validate_model
from genesisctl.errors import GenesisError, SchemaError
from genesisctl.services.base import BaseService
from genesisctl.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def build_bundle(
    name: str,
    owner_keys: bytes,
    *,
    validator_host: str,
    stake_amount: int,
    full_node_host: str | None = None,
    commission_percentage: int = 0,
    operator_keys: bytes | None = None,
    voter_keys: bytes | None = None,
) -> ParticipantBundle:
    """Assemble a bundle from ``public-keys.yaml`` documents.

    Raises:
        SchemaError: a key document or a field value is invalid.
    """
    fields = {
        "username": name,
        "owner_identity": load_public_identity(owner_keys),
        "operator_identity": load_public_identity(operator_keys) if operator_keys else None,
        "voter_identity": load_public_identity(voter_keys) if voter_keys else None,
        "validator_host": validator_host,
        "full_node_host": full_node_host,
        "stake_amount": stake_amount,
        "commission_percentage": commission_percentage,
    }
    return validate_model(ParticipantBundle, fields, what=f"participant {name!r}")


class PublishService(BaseService):
    """Writes participant bundles into the coordination store."""

    def _write(self, name: str, bundle: ParticipantBundle) -> str:
        if bundle.username != name:
            raise SchemaError(
                f"Bundle username {bundle.username!r} does not match {name!r}",
                name=name,
            )
        path = identity_path(name)
        self._store.write(path, serialize_bundle(bundle))
        logger.debug("Published %s to %s", name, path)
        return path

    def publish(self, name: str, bundle: ParticipantBundle) -> ServiceResult:
        """Publish one participant's bundle under *name*."""
        op = "publish"
        warnings: list[str] = []
        try:
            path = self._write(name, bundle)
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)

        self._dispatch_event("post_publish", {"username": name, "path": path}, warnings)
        data = bundle_summary(bundle)
        data["path"] = path
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    def publish_many(
        self,
        bundles: Sequence[ParticipantBundle],
        *,
        max_workers: int | None = None,
    ) -> ServiceResult:
        """Publish several distinct participants concurrently.

        Paths are disjoint, so the writes never contend. A name repeated
        within the batch is rejected before anything is written.
        """
        op = "publish_many"
        warnings: list[str] = []
        try:
            check_participants(b.username for b in bundles)
            for bundle in bundles:
                identity_path(bundle.username)
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                futures = [pool.submit(self._write, b.username, b) for b in bundles]
                paths = [f.result() for f in futures]
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)

        for bundle, path in zip(bundles, paths, strict=True):
            self._dispatch_event("post_publish", {"username": bundle.username, "path": path}, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "count": len(paths),
                "published": sorted(b.username for b in bundles),
            },
            warnings=warnings,
        )
