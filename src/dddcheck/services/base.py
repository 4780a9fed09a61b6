"""BaseService: shared construction for dddcheck services.

Every service receives the frozen :class:`DddSettings` at construction
time and an optional :class:`PluginManager`. Services never print; they
return :class:`ServiceResult`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dddcheck.config.settings import DddSettings
    from dddcheck.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ProjectService(BaseService):
            def check(self) -> ServiceResult:
                root = self._settings.project_root
                ...
    """

    def __init__(self, settings: DddSettings, plugins: PluginManager | None = None) -> None:
        self._settings = settings
        self._plugins = plugins

    def _notify(self, warnings: list[str], **payload: int) -> None:
        """Dispatch ``post_validate``. No-op without a plugin manager."""
        if self._plugins is None:
            return
        self._plugins.notify_post_validate(warnings, **payload)
