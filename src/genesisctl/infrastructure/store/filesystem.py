"""Local-directory coordination store.

Writes go to a temporary sibling file that is then renamed over the target,
so readers see either the old or the new content, never a partial file.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from genesisctl.errors import AlreadyExists, NotFound, StorageError
from genesisctl.infrastructure.store.base import (
    CoordinationStore,
    normalize_store_path,
    under_prefix,
)

logger = logging.getLogger(__name__)

# Directories never reported by list().
_SKIP_DIRS = frozenset({".git"})
_TMP_PREFIX = ".tmp-"


class FilesystemStore(CoordinationStore):
    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def location(self) -> str:
        return str(self._root)

    def _resolve(self, path: str) -> Path:
        rel = normalize_store_path(path)
        target = self._root / rel
        # Guard against symlinked directories pointing outside the root.
        if not target.resolve().is_relative_to(self._root.resolve()):
            msg = f"Path escapes store root: {path!r}"
            raise ValueError(msg)
        return target

    def init(self, *, force: bool = False) -> None:
        try:
            if self._root.exists():
                if not self._root.is_dir():
                    raise StorageError(f"Store root is not a directory: {self._root}")
                entries = list(self._root.iterdir())
                if entries and not force:
                    raise AlreadyExists(
                        f"Store root {self._root} is not empty; use force to reinitialize",
                        path=str(self._root),
                    )
                for entry in entries:
                    if entry.is_dir() and not entry.is_symlink():
                        shutil.rmtree(entry)
                    else:
                        entry.unlink()
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot initialize store at {self._root}: {exc}") from exc
        logger.debug("Initialized filesystem store at %s", self._root)

    def read(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return target.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise NotFound(normalize_store_path(path)) from None
        except OSError as exc:
            raise StorageError(f"Cannot read {path}: {exc}", path=path) from exc

    def write(self, path: str, data: bytes) -> None:
        target = self._resolve(path)
        tmp_name: str | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=_TMP_PREFIX, dir=target.parent)
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, target)
            tmp_name = None
        except OSError as exc:
            raise StorageError(f"Cannot write {path}: {exc}", path=path) from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def list(self, prefix: str = "") -> list[str]:
        prefix = normalize_store_path(prefix) if prefix else ""
        if not self._root.is_dir():
            return []
        results: list[str] = []
        for path in self._root.rglob("*"):
            rel = path.relative_to(self._root)
            if any(part in _SKIP_DIRS for part in rel.parts):
                continue
            if rel.name.startswith(_TMP_PREFIX) or not path.is_file():
                continue
            key = rel.as_posix()
            if under_prefix(key, prefix):
                results.append(key)
        return sorted(results)

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()
