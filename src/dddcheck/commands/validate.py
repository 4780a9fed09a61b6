"""Command: validate every flow of the project."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from dddcheck.commands._base import DddCommand

if TYPE_CHECKING:
    from dddcheck.commands._context import AppContext


@click.command(
    cls=DddCommand,
    examples="""\
  dddcheck validate
  dddcheck validate --errors-only
  dddcheck validate --min-severity error
  dddcheck validate --strict
  dddcheck --json validate""",
)
@click.option(
    "--min-severity",
    type=click.Choice(["warning", "error"]),
    default="warning",
    help="Hide findings below this severity.",
)
@click.option("--errors-only", is_flag=True, help="Shortcut for --min-severity error.")
@click.option("--strict", is_flag=True, help="Exit with code 1 when any error is found.")
@click.pass_obj
def validate(app: AppContext, min_severity: str, errors_only: bool, strict: bool) -> None:
    """Validate flow graphs and score the project."""
    from dddcheck.services.project import ProjectService

    threshold = "error" if errors_only else min_severity
    result = ProjectService(app.settings, app.plugins).check(min_severity=threshold)
    app.emit(result)
    if strict and result.data.get("error_count", 0) > 0:
        raise SystemExit(1)
