"""Pluggy hook specifications for dddcheck.

One setup-time hook lets plugins grow the node catalog without code
changes to the validator; one lifecycle hook fires after each run.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("dddcheck")
hookimpl = pluggy.HookimplMarker("dddcheck")


class DddcheckHookSpec:
    """Hook specifications for the dddcheck plugin system."""

    @hookspec
    def register_node_types(self) -> dict[str, Any] | None:
        """Return catalog entries (``type -> {ports, extends, dynamic}``) to add."""

    @hookspec
    def post_validate(
        self,
        flow_count: int,
        error_count: int,
        warning_count: int,
        score_pct: int,
    ) -> None:
        """Called after a project has been validated."""
