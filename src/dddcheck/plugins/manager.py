"""Plugin discovery, catalog extension and hook dispatch.

Discovery: pip-installed plugins via the ``dddcheck.plugins`` entry point
group. INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

import pluggy

from dddcheck.domain.catalog import NodeCatalog
from dddcheck.domain.errors import CatalogError
from dddcheck.plugins.hookspecs import DddcheckHookSpec

PROJECT_NAME = "dddcheck"
ENTRY_POINT_GROUP = "dddcheck.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Thin wrapper over :class:`pluggy.PluginManager` for dddcheck hooks."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(DddcheckHookSpec)

    def discover(self) -> list[str]:
        """Load entry-point plugins; returns the names of all registered plugins."""
        count = self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        logger.debug("Loaded %d entry-point plugins", count)
        self._normalize_plugin_instances()
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        resolved = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved)
        logger.debug("Registered plugin: %s", resolved)

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def extend_catalog(self, catalog: NodeCatalog, warnings: list[str]) -> NodeCatalog:
        """Layer every plugin's ``register_node_types`` result onto *catalog*.

        A plugin whose hook raises, or whose entries do not form a valid
        catalog, is skipped with a warning.
        """
        for plugin in self._pm.get_plugins():
            name = self._pm.get_name(plugin) or plugin.__class__.__name__
            impl = getattr(plugin, "register_node_types", None)
            if impl is None:
                continue
            try:
                entries: dict[str, Any] | None = impl()
                if entries:
                    catalog = catalog.extend(entries)
                    logger.debug("Plugin %s added node types: %s", name, sorted(entries))
            except CatalogError as exc:
                warnings.append(f"Plugin {name} registered an invalid catalog: {exc}")
            except Exception:
                logger.warning("register_node_types failed for %s", name, exc_info=True)
                warnings.append(f"Plugin {name} failed in register_node_types")
        return catalog

    def notify_post_validate(self, warnings: list[str], **payload: Any) -> None:
        try:
            self._pm.hook.post_validate(**payload)
        except Exception:
            logger.debug("post_validate dispatch failed", exc_info=True)
            warnings.append("Plugin dispatch failed for post_validate")

    # ------------------------------------------------------------------
    # Discovery helpers
    # ------------------------------------------------------------------

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instances.

        Entry points may name a class; hooks called on the class would
        leave ``self`` unbound.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not _has_hook_impls(plugin):
                continue
            name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Failed to instantiate entry-point plugin %s", name, exc_info=True)
                continue
            self._pm.register(instance, name=name)
            logger.debug("Instantiated entry-point plugin: %s", name)


def _has_hook_impls(cls: type) -> bool:
    """Whether any public attribute of *cls* carries the ``dddcheck_impl`` marker."""
    for name in dir(cls):
        if name.startswith("_"):
            continue
        method = getattr(cls, name, None)
        if callable(method) and getattr(method, f"{PROJECT_NAME}_impl", None):
            return True
    return False
