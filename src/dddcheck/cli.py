"""Root ``dddcheck`` command group.

Global flags are collected into :class:`DddSettings` once; subcommands
receive the resulting :class:`AppContext` through ``@click.pass_obj``.
"""

from __future__ import annotations

import click

from dddcheck import __version__
from dddcheck.commands import register_commands
from dddcheck.commands._context import AppContext
from dddcheck.config.settings import DddSettings


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(version=__version__, prog_name="dddcheck")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the essentials.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs, flow table and timing spans.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    metavar="PATH",
    help="Use this dddcheck.toml instead of searching upward from the CWD.",
)
@click.option("--sync", is_flag=True, help="Validate flows one at a time.")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, **flags: bool) -> None:
    """dddcheck: validate DDD Tool flow specs, score them, write reports."""
    ctx.obj = AppContext(DddSettings.from_cli(config_path=config_path, **flags))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
