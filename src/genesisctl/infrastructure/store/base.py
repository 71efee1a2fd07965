"""CoordinationStore — the capability every backend implements.

The aggregation logic only ever sees this interface, so a throwaway local
directory in tests and a reviewed git repository in production behave the
same from its point of view.

INVARIANT: Paths are relative POSIX strings that stay inside the store root.
INVARIANT: A reader never observes a half-written file.
Concurrency model: single writer per path. Distinct participants write
disjoint paths, so no locking is done here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import PurePosixPath


def normalize_store_path(path: str) -> str:
    """Validate and normalize a store-relative path.

    Raises:
        ValueError: the path is empty, absolute, or climbs out of the root.
    """
    if not path or not path.strip():
        raise ValueError("Store path must not be empty")
    pure = PurePosixPath(path.replace("\\", "/"))
    if pure.is_absolute():
        raise ValueError(f"Store path must be relative: {path!r}")
    parts = [p for p in pure.parts if p not in ("", ".")]
    if not parts or ".." in parts:
        raise ValueError(f"Path escapes store root: {path!r}")
    return "/".join(parts)


def under_prefix(path: str, prefix: str) -> bool:
    """Whether *path* lies under directory *prefix* (``""`` matches everything)."""
    if not prefix:
        return True
    return path == prefix or path.startswith(prefix + "/")


class CoordinationStore(ABC):
    """Versioned file tree used as the rendezvous point for genesis."""

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the store lives."""

    @abstractmethod
    def init(self, *, force: bool = False) -> None:
        """Create an empty store.

        Raises:
            AlreadyExists: the store has content and *force* is False.
        """

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Return the bytes at *path*, or raise :class:`NotFound`."""

    @abstractmethod
    def write(self, path: str, data: bytes) -> None:
        """Create or overwrite *path* atomically, creating parent directories."""

    @abstractmethod
    def list(self, prefix: str = "") -> list[str]:
        """Sorted relative paths of all files under *prefix*."""

    def exists(self, path: str) -> bool:
        return normalize_store_path(path) in self.list()
