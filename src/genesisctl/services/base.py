"""BaseService — shared foundation for genesisctl services.

Every service receives the :class:`CoordinationStore` it operates on and,
optionally, a :class:`PluginManager` for lifecycle notifications.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Iterator

    from genesisctl.infrastructure.store.base import CoordinationStore
    from genesisctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


@contextmanager
def timed_stage(name: str, timings: dict[str, float]) -> Iterator[None]:
    """Record how long a pipeline stage took into *timings* (milliseconds).

    Failed stages are logged too, then the exception propagates.
    """
    log = structlog.get_logger("genesisctl.stages")
    start = time.perf_counter()
    ok = False
    try:
        yield
        ok = True
    finally:
        elapsed = round((time.perf_counter() - start) * 1000, 2)
        timings[name] = elapsed
        log.debug("stage.complete", stage=name, duration_ms=elapsed, ok=ok)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class PublishService(BaseService):
            def publish(self, bundle: ParticipantBundle) -> ServiceResult:
                self._store.write(...)
    """

    def __init__(self, store: CoordinationStore, plugins: PluginManager | None = None) -> None:
        self._store = store
        self._plugins = plugins

    @property
    def store(self) -> CoordinationStore:
        return self._store

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call a ``post_*`` hook. No-op without a plugin manager.

        INVARIANT: Notification hook failures are warnings, never errors.
        """
        if self._plugins is None:
            return
        try:
            getattr(self._plugins.hook, hook_name)(**payload)
        except Exception:
            logger.debug("Event dispatch failed for %s", hook_name, exc_info=True)
            warnings.append(f"Event dispatch failed for {hook_name}")
