"""StoreService — initialize and inspect the coordination store."""

from __future__ import annotations

from genesisctl.domain.participant import IDENTITY_FILE, PARTICIPANTS_DIR
from genesisctl.errors import GenesisError, SchemaError
from genesisctl.services.base import BaseService
from genesisctl.services.result import ServiceResult


class StoreService(BaseService):
    def init(self, *, force: bool = False) -> ServiceResult:
        op = "store_init"
        warnings: list[str] = []
        try:
            self._store.init(force=force)
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)
        self._dispatch_event("post_store_init", {"location": self._store.location}, warnings)
        return ServiceResult(
            ok=True,
            op=op,
            data={"location": self._store.location, "reinitialized": force},
            warnings=warnings,
        )

    def list(self, prefix: str = "") -> ServiceResult:
        """List entries under *prefix*, plus the names that have published."""
        op = "store_list"
        try:
            try:
                entries = self._store.list(prefix)
            except ValueError as exc:
                raise SchemaError(str(exc), prefix=prefix) from exc
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)

        published = sorted(
            parts[1]
            for parts in (e.split("/") for e in entries)
            if len(parts) == 3 and parts[0] == PARTICIPANTS_DIR and parts[2] == IDENTITY_FILE
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "location": self._store.location,
                "items": [{"path": e} for e in entries],
                "count": len(entries),
                "published": published,
            },
        )
