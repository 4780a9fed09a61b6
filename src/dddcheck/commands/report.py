"""Command: write the tool-compatibility and spec-quality reports."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from dddcheck.commands._base import DddCommand

if TYPE_CHECKING:
    from dddcheck.commands._context import AppContext


@click.command(
    cls=DddCommand,
    examples="""\
  dddcheck report
  dddcheck report --output-dir build/reports
  dddcheck --json report""",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the YAML reports (default: [reports] output_dir under the project).",
)
@click.pass_obj
def report(app: AppContext, output_dir: Path | None) -> None:
    """Validate the project and write both YAML reports."""
    from dddcheck.output.reports import compatibility_report, write_reports
    from dddcheck.services.project import ProjectService
    from dddcheck.services.result import ServiceResult

    settings = app.settings
    result = ProjectService(settings, app.plugins).check(min_severity="warning")
    if not result.ok:
        app.emit(result.model_copy(update={"op": "report"}))
        return

    directory = output_dir
    if directory is None:
        directory = Path(settings.reports.output_dir)
        if not directory.is_absolute():
            directory = settings.project_root / directory

    try:
        written = write_reports(result.data, directory, settings.reports)
    except OSError as exc:
        app.emit(
            ServiceResult.failure(
                "report", "WRITE_FAILED", f"Cannot write reports: {exc}", output_dir=str(directory)
            )
        )
        return

    data = {
        **result.data,
        "output_dir": str(directory),
        "files_written": [str(p) for p in written],
        "compatibility": compatibility_report(result.data)["compatibility"],
    }
    app.emit(result.model_copy(update={"op": "report", "data": data}))
