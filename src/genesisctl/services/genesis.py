"""GenesisService — from a populated store to ``genesis.blob`` + ``waypoint.txt``.

Pipeline: AGGREGATE → BUILD → WAYPOINT → WRITE → NOTIFY

INVARIANT: Nothing is written to the output directory unless every earlier
stage succeeded. Builder failures surface unchanged and are never retried.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from genesisctl.domain.genesis import GenesisArtifact
from genesisctl.domain.layout import LAYOUT_FILE, load_layout
from genesisctl.domain.participant import identity_path
from genesisctl.domain.waypoint import Waypoint, derive_waypoint
from genesisctl.errors import GenesisError, NotFound, StorageError
from genesisctl.infrastructure.artifacts import WAYPOINT_FILE, write_artifacts
from genesisctl.infrastructure.polling import wait_until
from genesisctl.services.aggregate import GenesisAggregator
from genesisctl.services.base import BaseService, timed_stage
from genesisctl.services.builder import PluginGenesisBuilder
from genesisctl.services.framework import StoreFrameworkProvider
from genesisctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from genesisctl.domain.layout import LayoutDescriptor
    from genesisctl.infrastructure.polling import PollPolicy
    from genesisctl.infrastructure.store.base import CoordinationStore
    from genesisctl.plugins.manager import PluginManager
    from genesisctl.services.builder import LedgerGenesisBuilder
    from genesisctl.services.framework import FrameworkBundleProvider

logger = logging.getLogger(__name__)


class GenesisService(BaseService):
    """Runs the genesis pipeline against one coordination store."""

    def __init__(
        self,
        store: CoordinationStore,
        plugins: PluginManager | None = None,
        *,
        framework: FrameworkBundleProvider | None = None,
        builder: LedgerGenesisBuilder | None = None,
    ) -> None:
        super().__init__(store, plugins)
        self._framework = framework or StoreFrameworkProvider(store)
        if builder is None:
            if plugins is None:
                from genesisctl.plugins.manager import PluginManager

                plugins = PluginManager()
            builder = PluginGenesisBuilder(plugins)
        self._builder = builder

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, output_dir: Path, *, force: bool = False) -> ServiceResult:
        """Aggregate the store, build genesis, and write both artifacts."""
        op = "generate_genesis"
        warnings: list[str] = []
        timings: dict[str, float] = {}
        log = structlog.get_logger("genesisctl.genesis").bind(store=self._store.location)

        try:
            # ── AGGREGATE ────────────────────────────────────────
            with timed_stage("aggregate", timings):
                inputs = GenesisAggregator(self._store, self._framework).aggregate()

            # ── BUILD ────────────────────────────────────────────
            with timed_stage("build", timings):
                try:
                    artifact = self._builder.build(inputs)
                except GenesisError:
                    raise
                except Exception as exc:
                    log.error("genesis.builder_failed", error=str(exc))
                    return ServiceResult(
                        ok=False,
                        op=op,
                        error=ServiceError(
                            code="BUILDER_FAILED",
                            message=f"Genesis builder failed: {exc}",
                            detail={"exception": type(exc).__name__},
                        ),
                    )

            # ── WAYPOINT ─────────────────────────────────────────
            with timed_stage("waypoint", timings):
                waypoint = derive_waypoint(artifact)

            # ── WRITE ────────────────────────────────────────────
            with timed_stage("write", timings):
                paths = write_artifacts(output_dir, artifact.data, str(waypoint), force=force)
        except GenesisError as exc:
            log.info("genesis.failed", code=exc.code, message=exc.message)
            return ServiceResult.failure(op, exc)

        # ── NOTIFY ───────────────────────────────────────────────
        self._dispatch_event(
            "post_genesis",
            {"output_dir": str(output_dir), "waypoint": str(waypoint)},
            warnings,
        )
        log.info(
            "genesis.written",
            chain_id=inputs.chain_id,
            participants=len(inputs.participants),
            waypoint=str(waypoint),
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "chain_id": inputs.chain_id,
                "is_test": inputs.is_test,
                "participants": [p.username for p in inputs.participants],
                "genesis": str(paths.genesis),
                "waypoint_file": str(paths.waypoint),
                "waypoint": str(waypoint),
                "size": len(artifact),
            },
            warnings=warnings,
            meta={"timings_ms": timings},
        )

    @staticmethod
    def waypoint(blob_path: Path) -> ServiceResult:
        """Derive the waypoint of an existing ``genesis.blob``.

        If a ``waypoint.txt`` sits next to the blob, ``matches`` tells
        whether it agrees.
        """
        op = "derive_waypoint"
        try:
            try:
                data = blob_path.read_bytes()
            except FileNotFoundError as exc:
                raise NotFound(str(blob_path)) from exc
            except OSError as exc:
                raise StorageError(f"Cannot read {blob_path}: {exc}") from exc
            waypoint = derive_waypoint(GenesisArtifact(data))

            result: dict[str, object] = {"genesis": str(blob_path), "waypoint": str(waypoint)}
            recorded = blob_path.parent / WAYPOINT_FILE
            if recorded.is_file():
                try:
                    text = recorded.read_text(encoding="utf-8")
                except OSError as exc:
                    raise StorageError(f"Cannot read {recorded}: {exc}") from exc
                result["matches"] = Waypoint.parse(text) == waypoint
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)
        return ServiceResult(ok=True, op=op, data=result)

    def wait_for_participants(self, policy: PollPolicy) -> ServiceResult:
        """Block until every participant in the layout has published.

        Git-backed stores are pulled before each probe. A store without a
        layout yet counts as not ready.
        """
        op = "wait_for_participants"
        missing: list[str] = []
        sync = getattr(self._store, "sync", None)

        def _probe() -> LayoutDescriptor | None:
            if sync is not None:
                sync()
            layout = load_layout(self._store.read(LAYOUT_FILE))
            missing[:] = [
                n for n in sorted(layout.participants) if not self._store.exists(identity_path(n))
            ]
            return layout if not missing else None

        try:
            layout = wait_until(
                _probe,
                policy,
                what="participant identities",
                transient=(StorageError,),
            )
        except GenesisError as exc:
            if missing:
                exc.detail["missing"] = list(missing)
            return ServiceResult.failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"participants": sorted(layout.participants), "count": len(layout.participants)},
        )
