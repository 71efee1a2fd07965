"""In-memory coordination store for tests and throwaway runs."""

from __future__ import annotations

import threading

from genesisctl.errors import AlreadyExists, NotFound
from genesisctl.infrastructure.store.base import (
    CoordinationStore,
    normalize_store_path,
    under_prefix,
)


class MemoryStore(CoordinationStore):
    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self._files: dict[str, bytes] = {}
        self._lock = threading.Lock()
        for path, data in (files or {}).items():
            self._files[normalize_store_path(path)] = bytes(data)

    @property
    def location(self) -> str:
        return "memory://"

    def init(self, *, force: bool = False) -> None:
        with self._lock:
            if self._files and not force:
                raise AlreadyExists("In-memory store is not empty")
            self._files.clear()

    def read(self, path: str) -> bytes:
        key = normalize_store_path(path)
        with self._lock:
            try:
                return self._files[key]
            except KeyError:
                raise NotFound(key) from None

    def write(self, path: str, data: bytes) -> None:
        key = normalize_store_path(path)
        with self._lock:
            self._files[key] = bytes(data)

    def list(self, prefix: str = "") -> list[str]:
        prefix = normalize_store_path(prefix) if prefix else ""
        with self._lock:
            return sorted(p for p in self._files if under_prefix(p, prefix))

    def exists(self, path: str) -> bool:
        key = normalize_store_path(path)
        with self._lock:
            return key in self._files

    def snapshot(self) -> dict[str, bytes]:
        """Copy of the current contents."""
        with self._lock:
            return dict(self._files)
