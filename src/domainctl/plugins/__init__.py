"""Extension layer: plugin system via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins in ``.domainctl/plugins/``.
INVARIANT: Notification failures are warnings, never errors.
"""

from domainctl.plugins.hookspecs import hookimpl
from domainctl.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
