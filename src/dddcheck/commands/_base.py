"""Click command class with an ``--examples`` flag.

``--examples`` is eager: it prints canned invocations and exits before
the command body runs, so it works outside a project too.
"""

from __future__ import annotations

from typing import Any

import click


def _print_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    examples = getattr(ctx.command, "examples", None) or ""
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(examples)
    ctx.exit(0)


class DddCommand(click.Command):
    """Command that takes an ``examples`` text and exposes it as ``--examples``.

    Usage::

        @click.command(cls=DddCommand, examples="  dddcheck validate --strict")
        def validate(...): ...
    """

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_print_examples,
                    help="Show usage examples and exit.",
                )
            )
