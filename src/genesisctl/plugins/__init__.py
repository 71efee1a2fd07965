"""Extension layer — plugin system via pluggy.

Discovery: entry points (pip-installed) in the ``genesisctl.plugins`` group.
INVARIANT: Notification hook failures are warnings; builder failures are errors.
"""

from genesisctl.plugins.manager import PluginManager

__all__ = ["PluginManager"]
