"""Subcommand modules for dddcheck.

Provides register_commands() which uses deferred imports to keep
``dddcheck --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from dddcheck.commands.catalog import catalog
    from dddcheck.commands.report import report
    from dddcheck.commands.validate import validate

    cli.add_command(validate)
    cli.add_command(report)
    cli.add_command(catalog)
