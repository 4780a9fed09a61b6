"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy plugin discovery and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from dddcheck.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from dddcheck.config.settings import DddSettings
    from dddcheck.plugins.manager import PluginManager
    from dddcheck.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  Plugins are discovered
    on first use so ``--help`` and ``--version`` never load entry points.
    """

    def __init__(self, settings: DddSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None
        self._plugins_loaded = False

        from dddcheck.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from dddcheck.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def plugins(self) -> PluginManager | None:
        """The plugin manager, or None when ``[plugins] enabled = false``."""
        if not self._plugins_loaded:
            self._plugins_loaded = True
            if self.settings.plugins.enabled:
                from dddcheck.plugins.manager import PluginManager

                self._plugins = PluginManager()
                self._plugins.discover()
        return self._plugins

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
