"""Git-backed coordination store.

The working tree is a :class:`FilesystemStore`; every write is staged and
committed, and pushed when a remote is configured with ``auto_push``. This is
the production shape: participants open pull requests (or push) against a
shared repository that the aggregator later clones.

Unlike a best-effort integration, every git failure here raises
:class:`StorageError`. Genesis must never run against a store that silently
failed to sync.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from pathlib import Path

from genesisctl.errors import AlreadyExists, StorageError
from genesisctl.infrastructure.store.base import CoordinationStore, normalize_store_path
from genesisctl.infrastructure.store.filesystem import FilesystemStore

logger = logging.getLogger(__name__)


class GitStore(CoordinationStore):
    def __init__(
        self,
        root: Path,
        *,
        remote: str | None = None,
        branch: str = "main",
        auto_push: bool = True,
        author_name: str = "genesisctl",
        author_email: str = "genesisctl@localhost",
    ) -> None:
        self._tree = FilesystemStore(root)
        self._remote = remote
        self._branch = branch
        self._auto_push = auto_push
        self._author_name = author_name
        self._author_email = author_email
        # One index per working tree: git refuses concurrent add/commit.
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._tree.root

    @property
    def location(self) -> str:
        if self._remote:
            return f"{self._remote} ({self._branch}) @ {self.root}"
        return f"git:{self.root}"

    # ------------------------------------------------------------------
    # CoordinationStore
    # ------------------------------------------------------------------

    def init(self, *, force: bool = False) -> None:
        if self._remote:
            self._clone(force=force)
        else:
            self._tree.init(force=force)
            self._run_git("init")
            self._run_git("symbolic-ref", "HEAD", f"refs/heads/{self._branch}")
        self._run_git("config", "user.name", self._author_name)
        self._run_git("config", "user.email", self._author_email)
        logger.debug("Initialized git store at %s", self.location)

    def read(self, path: str) -> bytes:
        return self._tree.read(path)

    def write(self, path: str, data: bytes) -> None:
        rel = normalize_store_path(path)
        with self._lock:
            self._tree.write(rel, data)
            self._run_git("add", "--", rel)
            if self._has_staged_changes():
                self._run_git("commit", "-m", f"Update {rel}")
                logger.info("Committed %s", rel)
                if self._remote and self._auto_push:
                    self._run_git("push", "origin", f"HEAD:{self._branch}")
                    logger.info("Pushed %s to %s", rel, self._remote)

    def list(self, prefix: str = "") -> list[str]:
        return self._tree.list(prefix)

    def exists(self, path: str) -> bool:
        return self._tree.exists(path)

    # ------------------------------------------------------------------
    # Remote synchronization
    # ------------------------------------------------------------------

    def sync(self) -> None:
        """Fast-forward the working tree from the remote (no-op without one)."""
        if not self._remote:
            return
        with self._lock:
            self._run_git("pull", "--ff-only", "origin", self._branch)
        logger.debug("Synced %s from %s", self.root, self._remote)

    # ------------------------------------------------------------------
    # Git subprocess helpers
    # ------------------------------------------------------------------

    def _clone(self, *, force: bool) -> None:
        assert self._remote is not None
        root = self.root
        if root.exists() and any(root.iterdir()):
            if not force:
                raise AlreadyExists(
                    f"Store root {root} is not empty; use force to reclone",
                    path=str(root),
                )
            self._tree.init(force=True)
        root.parent.mkdir(parents=True, exist_ok=True)
        self._run_git("clone", self._remote, str(root), cwd=root.parent)
        self._checkout_branch()

    def _checkout_branch(self) -> None:
        remote_ref = f"refs/remotes/origin/{self._branch}"
        found = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", remote_ref],
            cwd=self.root,
            capture_output=True,
            text=True,
            check=False,
        )
        if found.returncode == 0:
            self._run_git("checkout", "-B", self._branch, f"origin/{self._branch}")
        else:
            # Branch not on the remote yet: the first write creates it.
            self._run_git("symbolic-ref", "HEAD", f"refs/heads/{self._branch}")

    def _has_staged_changes(self) -> bool:
        result = subprocess.run(
            ["git", "diff", "--cached", "--quiet"],
            cwd=self.root,
            capture_output=True,
            text=True,
            check=False,
        )
        # Exit code 1 means there ARE staged changes.
        if result.returncode not in (0, 1):
            raise StorageError(f"git diff --cached failed: {result.stderr.strip()}")
        return result.returncode == 1

    def _run_git(self, *args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
        """Run a git command in the store root, raising StorageError on failure."""
        logger.debug("git %s", " ".join(args))
        try:
            return subprocess.run(
                ["git", *args],
                cwd=cwd or self.root,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip()
            raise StorageError(
                f"git {args[0]} failed: {detail}",
                command=["git", *args],
                returncode=exc.returncode,
            ) from exc
        except OSError as exc:
            raise StorageError(f"Cannot run git: {exc}") from exc
