"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.text import Text

from dddcheck.output.console import (
    create_console,
    get_output,
    style_for_label,
    style_for_severity,
)

if TYPE_CHECKING:
    from rich.console import Console

    from dddcheck.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(_extract_id(item) for item in items if _extract_id(item))

    if "score_pct" in result.data:
        return f"{result.data['score_pct']} {result.data.get('quality_label', '')}".rstrip()

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_id(item: Any) -> str:
    """Extract an identifier from a dict item (flows, catalog entries)."""
    if isinstance(item, dict):
        for key in ("id", "type"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="ddd.ok")
    op = Text(f"  {result.op}", style="ddd.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="ddd.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="ddd.id")
    elif key.endswith("dir") or key == "path":
        v = Text(str(value), style="ddd.path")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(
    console: Console,
    span_data: dict[str, Any],
    indent: int = 4,
) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _score_line(console: Console, data: dict[str, Any]) -> None:
    label = str(data.get("quality_label", ""))
    style = style_for_label(label)
    coverage = data.get("coverage", {})
    score = f"  score: [ddd.score]{data.get('score_pct', 0)}%[/ddd.score]"
    if style:
        score += f" [{style}]{label}[/{style}]"
    console.print(score)
    if coverage:
        console.print(
            f"  node types: {coverage.get('node_type_coverage', '')}"
            f" ({coverage.get('node_coverage_pct', 0)}%)"
            f"  trigger types: {coverage.get('trigger_type_coverage', '')}"
            f" ({coverage.get('trigger_coverage_pct', 0)}%)"
        )


def _flow_table(flows: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Flow", style="ddd.id", no_wrap=True)
    table.add_column("Path", style="ddd.path")
    table.add_column("Status")
    table.add_column("Errors", justify="right")
    table.add_column("Warnings", justify="right")
    for flow in flows:
        table.add_row(
            str(flow.get("id", "")),
            str(flow.get("path", "")),
            str(flow.get("status", "")),
            str(flow.get("errors", 0)),
            str(flow.get("warnings", 0)),
        )
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="ddd.error")
    op = Text(f"  {result.op}", style="ddd.op")
    sep = Text(" - ")
    console.print(label, op, sep, Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Validate renderers ────────────────────────────────────────────────


def _render_validate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render findings grouped by flow, then the score summary."""
    d = result.data
    findings = [*d.get("errors", []), *d.get("warnings", [])]
    findings.sort(key=lambda f: (f.get("flowId", ""), f.get("nodeId") or ""))

    if not findings:
        console.print("[ddd.ok]OK[/ddd.ok]  No findings.")
    else:
        by_flow: dict[str, list[dict[str, Any]]] = {}
        for finding in findings:
            by_flow.setdefault(str(finding.get("flowId", "")), []).append(finding)

        for flow_id, flow_findings in by_flow.items():
            console.print(f"\n[bold]{escape(flow_id)}[/bold]")
            for finding in flow_findings:
                sev = str(finding.get("severity", "warning"))
                style = style_for_severity(sev)
                prefix = f"[{style}]{sev}[/{style}]" if style else sev
                node_id = finding.get("nodeId")
                nid = escape(f" [{node_id}]") if node_id else ""
                code = finding.get("code", "")
                msg = escape(str(finding.get("message", "")))
                console.print(f"  {prefix}{nid} [ddd.code]{code}[/ddd.code]: {msg}")
        console.print()

    console.print(f"{d.get('error_count', 0)} errors, {d.get('warning_count', 0)} warnings")
    _score_line(console, d)

    if verbose:
        flows = d.get("flows", [])
        if flows:
            console.print()
            console.print(_flow_table(flows))
        _render_meta(console, result)


# ── Report renderers ─────────────────────────────────────────────────


def _render_report(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render written report paths and the compatibility verdict."""
    _status_line(console, result)
    d = result.data
    for key in ("output_dir", "compatibility"):
        if key in d:
            _field(console, key, d[key])
    files = d.get("files", {})
    if files:
        _field(console, "files", f"{files.get('normalized_ok', 0)}/{files.get('total', 0)} usable")
    _score_line(console, d)
    written = d.get("files_written", [])
    _field(console, "files_written", len(written))
    if verbose:
        for path in written:
            console.print(f"    {path}")
        _render_meta(console, result)


# ── Catalog renderers ────────────────────────────────────────────────


def _render_catalog(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the node catalog as a table."""
    d = result.data
    items = d.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Type", style="ddd.id", no_wrap=True)
    table.add_column("Ports")
    table.add_column("Dynamic")
    for item in items:
        table.add_row(
            str(item.get("type", "")),
            ", ".join(item.get("ports", [])) or "-",
            "yes" if item.get("dynamic") else "",
        )
    console.print(table)
    console.print(f"\n{d.get('count', len(items))} node types")
    kinds = d.get("trigger_kinds", [])
    if kinds:
        console.print(f"trigger kinds: {', '.join(kinds)}")
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "validate": _render_validate,
    "report": _render_report,
    "catalog": _render_catalog,
}
