"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy store and plugin initialization and
centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import click

from genesisctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from genesisctl.config.settings import GenesisSettings
    from genesisctl.infrastructure.polling import PollPolicy
    from genesisctl.infrastructure.store.base import CoordinationStore
    from genesisctl.plugins.manager import PluginManager
    from genesisctl.services.result import ServiceResult

logger = logging.getLogger(__name__)


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store and plugin manager are created on first use so ``--help``
    and ``--version`` never touch the filesystem or entry points.
    """

    def __init__(self, settings: GenesisSettings) -> None:
        self.settings = settings
        self._store: CoordinationStore | None = None
        self._plugins: PluginManager | None = None

        from genesisctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            trace_git=settings.trace_git,
        )

    @property
    def store(self) -> CoordinationStore:
        """The configured coordination store (created lazily on first access)."""
        if self._store is None:
            from genesisctl.infrastructure.store import open_store

            cfg = self.settings.store
            self._store = open_store(
                cfg.backend,
                self.settings.store_root,
                remote=cfg.remote,
                branch=cfg.branch,
                auto_push=cfg.auto_push,
                author_name=cfg.author_name,
                author_email=cfg.author_email,
            )
        return self._store

    @property
    def plugins(self) -> PluginManager:
        """Plugin manager with entry-point plugins loaded (unless disabled)."""
        if self._plugins is None:
            from genesisctl.plugins.manager import PluginManager

            pm = PluginManager()
            cfg = self.settings.plugins
            if cfg.entry_points:
                names = pm.discover_and_load(blocked=cfg.disabled)
                logger.debug("Loaded plugins: %s", ", ".join(names))
            self._plugins = pm
        return self._plugins

    def poll_policy(self, *, timeout: float | None = None, interval: float | None = None) -> PollPolicy:
        from genesisctl.infrastructure.polling import Backoff, PollPolicy

        cfg = self.settings.wait
        return PollPolicy(
            timeout=cfg.timeout_secs if timeout is None else timeout,
            interval=cfg.interval_secs if interval is None else interval,
            backoff=Backoff(cfg.backoff),
            max_interval=cfg.max_interval_secs,
        )

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
