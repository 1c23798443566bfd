"""Common base for the registry services.

A service wraps one :class:`Registry` and opens its own transactions
with ``self._registry.transaction()``; nothing is shared between
services except the registry itself.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from domainctl.infrastructure.registry import Registry

logger = logging.getLogger(__name__)


class BaseService:
    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def _notify_plugins(self, warnings: list[str], hook_name: str, **kwargs: Any) -> None:
        """Call a ``post_*`` hook after the change has committed.

        A failing plugin cannot undo the change, so its exception becomes
        an entry in *warnings* instead of an error.
        """
        plugins = self._registry.plugins
        hook = getattr(plugins.hook, hook_name, None) if plugins is not None else None
        if hook is None:
            return
        try:
            hook(**kwargs)
        except Exception:
            logger.warning("Plugin hook %s raised", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
