"""Plugin discovery and loading.

Discovery: entry points in the ``genesisctl.plugins`` group via pluggy's
setuptools loader. The built-in reference builder is always registered and
marked ``trylast``, so any installed builder takes precedence.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Iterable

import pluggy

from genesisctl.plugins.hookspecs import GenesisctlHookSpec

PROJECT_NAME = "genesisctl"
ENTRY_POINT_GROUP = "genesisctl.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, registration, and hook dispatch."""

    def __init__(self, *, builtins: bool = True) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(GenesisctlHookSpec)
        self._loaded = False
        if builtins:
            from genesisctl.plugins.builtins.reference_builder import ReferenceGenesisBuilder

            self.register_plugin(ReferenceGenesisBuilder(), name="reference-builder")

    def discover_and_load(self, *, blocked: Iterable[str] = ()) -> list[str]:
        """Load entry-point plugins, skipping any name in *blocked*.

        Returns the names of all registered plugins.
        """
        for name in blocked:
            self._pm.set_blocked(name)
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._normalize_plugin_instances()
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly; hook
        dispatch against a class leaves ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)
