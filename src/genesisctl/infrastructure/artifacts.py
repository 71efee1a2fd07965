"""Writing ``genesis.blob`` and ``waypoint.txt`` to the output directory.

The pair is only meaningful together. Each file is written atomically; if
the second write fails the first is removed again, so a failed run never
leaves a complete-looking pair behind. :func:`artifacts_complete` is the
check consumers should use.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from genesisctl.errors import AlreadyExists, StorageError

GENESIS_BLOB = "genesis.blob"
WAYPOINT_FILE = "waypoint.txt"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactPaths:
    genesis: Path
    waypoint: Path


def artifact_paths(output_dir: Path) -> ArtifactPaths:
    return ArtifactPaths(genesis=output_dir / GENESIS_BLOB, waypoint=output_dir / WAYPOINT_FILE)


def artifacts_complete(output_dir: Path) -> bool:
    """True when both files exist with non-zero size."""
    paths = artifact_paths(output_dir)
    return all(p.is_file() and p.stat().st_size > 0 for p in (paths.genesis, paths.waypoint))


def _atomic_write(target: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_artifacts(
    output_dir: Path,
    blob: bytes,
    waypoint_text: str,
    *,
    force: bool = False,
) -> ArtifactPaths:
    """Persist the genesis blob and its waypoint.

    Raises:
        AlreadyExists: either file exists and *force* is False.
        StorageError: the directory cannot be created or written.
    """
    paths = artifact_paths(output_dir)
    if not force:
        existing = [str(p) for p in (paths.genesis, paths.waypoint) if p.exists()]
        if existing:
            raise AlreadyExists(
                f"Output already exists: {', '.join(existing)}; use force to overwrite",
                paths=existing,
            )

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        # A stale waypoint must never pair with a new blob.
        paths.waypoint.unlink(missing_ok=True)
    except OSError as exc:
        raise StorageError(f"Cannot create output directory {output_dir}: {exc}") from exc

    try:
        _atomic_write(paths.genesis, blob)
    except OSError as exc:
        raise StorageError(f"Cannot write {paths.genesis}: {exc}") from exc

    try:
        _atomic_write(paths.waypoint, f"{waypoint_text}\n".encode())
    except OSError as exc:
        paths.genesis.unlink(missing_ok=True)
        raise StorageError(f"Cannot write {paths.waypoint}: {exc}") from exc

    logger.debug("Wrote %s and %s", paths.genesis, paths.waypoint)
    return paths
