"""Rich Console factory and theme for dddcheck output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DDD_THEME = Theme(
    {
        "ddd.ok": "bold green",
        "ddd.error": "bold red",
        "ddd.warning": "bold yellow",
        "ddd.op": "bold cyan",
        "ddd.key": "dim",
        "ddd.id": "bold blue",
        "ddd.path": "dim",
        "ddd.code": "magenta",
        "ddd.score": "bold magenta",
        "ddd.label.excellent": "bold green",
        "ddd.label.good": "green",
        "ddd.label.fair": "yellow",
        "ddd.label.poor": "red",
    }
)

_SEVERITY_STYLES: dict[str, str] = {
    "error": "ddd.error",
    "warning": "ddd.warning",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=DDD_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_severity(severity: str) -> str:
    return _SEVERITY_STYLES.get(severity, "")


def style_for_label(label: str) -> str:
    """Rich style for a quality label (EXCELLENT/GOOD/FAIR/POOR)."""
    style = f"ddd.label.{label.lower()}"
    return style if style in DDD_THEME.styles else ""
