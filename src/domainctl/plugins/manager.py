"""Plugin discovery for registry hooks.

Two sources, loaded in this order:

- installed distributions advertising the ``domainctl.plugins`` entry point
- single-file modules in ``<root>/.domainctl/plugins/`` (names starting
  with ``_`` are skipped)

A plugin is any object with ``@hookimpl`` methods. Classes found either
way are instantiated with no arguments before registration.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType

import pluggy

from domainctl.plugins.hookspecs import DomainctlHookSpec

PROJECT_NAME = "domainctl"
ENTRYPOINT_GROUP = "domainctl.plugins"
LOCAL_MODULE_PREFIX = "domainctl_local_plugin_"

logger = logging.getLogger(__name__)


def _declares_hooks(cls: type) -> bool:
    """True if any public method carries the ``domainctl_impl`` marker."""
    return any(
        getattr(member, f"{PROJECT_NAME}_impl", None)
        for name, member in inspect.getmembers(cls, callable)
        if not name.startswith("_")
    )


def _import_local_modules(directory: Path) -> Iterator[ModuleType]:
    """Import each plugin file in *directory*; broken files are logged and skipped."""
    for path in sorted(directory.glob("*.py")):
        if path.name.startswith("_"):
            continue
        module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            logger.warning("Cannot import local plugin %s", path)
            continue
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(module_name, None)
            logger.warning("Skipping local plugin %s", path, exc_info=True)
            continue
        yield module


def _plugin_classes(module: ModuleType) -> Iterator[type]:
    """Classes defined (not imported) in *module* that implement hooks."""
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if obj.__module__ == module.__name__ and _declares_hooks(obj):
            yield obj


class PluginManager:
    """Owns the pluggy manager the registry dispatches hooks through."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(DomainctlHookSpec)
        self._loaded = False

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    @property
    def is_loaded(self) -> bool:
        """Whether :meth:`discover_and_load` has run."""
        return self._loaded

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then local ones. Returns all plugin names."""
        self._pm.load_setuptools_entrypoints(ENTRYPOINT_GROUP)
        self._instantiate_entrypoint_classes()
        if local_dir is not None and local_dir.is_dir():
            for module in _import_local_modules(local_dir):
                for cls in _plugin_classes(module):
                    self._register_class(cls, f"{module.__name__}.{cls.__name__}")
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        resolved = name or type(plugin).__name__
        self._pm.register(plugin, name=resolved)
        logger.debug("Registered plugin %s", resolved)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or type(p).__name__ for p in self._pm.get_plugins()]

    def _register_class(self, cls: type, name: str) -> None:
        try:
            instance = cls()
        except Exception:
            logger.warning("Cannot instantiate plugin %s", name, exc_info=True)
            return
        self.register_plugin(instance, name=name)

    def _instantiate_entrypoint_classes(self) -> None:
        """Swap classes registered by entry points for instances.

        pluggy registers whatever the entry point names; a bare class would
        be called with ``self`` unbound.
        """
        for plugin in self.get_plugins():
            if inspect.isclass(plugin) and _declares_hooks(plugin):
                name = self._pm.get_name(plugin) or plugin.__name__
                self._pm.unregister(plugin)
                self._register_class(plugin, name)
