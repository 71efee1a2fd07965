"""Framework bundle providers and the ``framework add`` operation.

The aggregator never knows where the framework comes from; it is handed a
:class:`FrameworkBundleProvider`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from genesisctl.domain.framework import FRAMEWORK_FILE, FrameworkBundle, decode_bundle, encode_bundle
from genesisctl.errors import GenesisError
from genesisctl.services.base import BaseService
from genesisctl.services.result import ServiceResult

if TYPE_CHECKING:
    from genesisctl.infrastructure.store.base import CoordinationStore


class FrameworkBundleProvider(Protocol):
    def load(self) -> FrameworkBundle: ...


class StoreFrameworkProvider:
    """Reads ``framework.mrb`` from the coordination store."""

    def __init__(self, store: CoordinationStore, path: str = FRAMEWORK_FILE) -> None:
        self._store = store
        self._path = path

    def load(self) -> FrameworkBundle:
        return decode_bundle(self._store.read(self._path))


class StaticFrameworkProvider:
    """Hands out a bundle that is already in memory."""

    def __init__(self, bundle: FrameworkBundle) -> None:
        self._bundle = bundle

    def load(self) -> FrameworkBundle:
        return self._bundle


class FrameworkService(BaseService):
    """Publishes a compiled framework bundle into the store."""

    def add(self, data: bytes) -> ServiceResult:
        """Validate *data* as a framework bundle and store it as ``framework.mrb``.

        The bytes are re-encoded from the decoded bundle, so what lands in
        the store is always in canonical form.
        """
        op = "add_framework"
        try:
            bundle = decode_bundle(data)
            self._store.write(FRAMEWORK_FILE, encode_bundle(bundle))
        except GenesisError as exc:
            return ServiceResult.failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": FRAMEWORK_FILE,
                "version": bundle.version,
                "modules": [m.name for m in bundle.modules],
                "digest": bundle.digest,
            },
        )
