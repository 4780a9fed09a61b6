"""Command: show the effective node type catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from dddcheck.commands._base import DddCommand

if TYPE_CHECKING:
    from dddcheck.commands._context import AppContext


@click.command(
    cls=DddCommand,
    examples="""\
  dddcheck catalog
  dddcheck -q catalog
  dddcheck --json catalog""",
)
@click.pass_obj
def catalog(app: AppContext) -> None:
    """List node types, their output ports and the trigger kinds."""
    from dddcheck.services.project import ProjectService

    app.emit(ProjectService(app.settings, app.plugins).catalog())
