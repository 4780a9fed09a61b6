"""Report emitter: tool-compatibility and spec-quality YAML reports.

Both reports are shaped from the ``validate`` payload. Key order is fixed
and findings arrive pre-sorted, so identical input always yields
byte-identical files.
"""

from __future__ import annotations

import logging
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ruamel.yaml import YAML
from ruamel.yaml.representer import RoundTripRepresenter

if TYPE_CHECKING:
    from dddcheck.config.models import ReportsConfig

logger = logging.getLogger(__name__)

FULLY_COMPATIBLE = "FULLY_COMPATIBLE"
PARTIALLY_COMPATIBLE = "PARTIALLY_COMPATIBLE"
INCOMPATIBLE = "INCOMPATIBLE"


def compatibility_status(total: int, normalized_ok: int) -> str:
    """Every file usable, none usable (or no files), or somewhere between."""
    if total == 0 or normalized_ok == 0:
        return INCOMPATIBLE
    if normalized_ok == total:
        return FULLY_COMPATIBLE
    return PARTIALLY_COMPATIBLE


def compatibility_report(data: dict[str, Any]) -> dict[str, Any]:
    files = data.get("files", {})
    total = int(files.get("total", 0))
    normalized_ok = int(files.get("normalized_ok", 0))
    return {
        "totalFiles": total,
        "parsedOk": int(files.get("parsed_ok", 0)),
        "parsedFailed": int(files.get("parsed_failed", 0)),
        "normalizedOk": normalized_ok,
        "normalizedFailed": int(files.get("normalized_failed", 0)),
        "nodeTypeCoverage": data.get("coverage", {}).get("node_type_coverage", "0/0"),
        "compatibility": compatibility_status(total, normalized_ok),
    }


def quality_report(data: dict[str, Any]) -> dict[str, Any]:
    coverage = data.get("coverage", {})
    return {
        "scorePct": int(data.get("score_pct", 0)),
        "qualityLabel": data.get("quality_label", ""),
        "nodeTypeCoveragePct": int(coverage.get("node_coverage_pct", 0)),
        "triggerTypeCoveragePct": int(coverage.get("trigger_coverage_pct", 0)),
        "errors": [dict(f) for f in data.get("errors", [])],
        "warnings": [dict(f) for f in data.get("warnings", [])],
    }


class _ReportRepresenter(RoundTripRepresenter):
    """Round-trip representer that writes ``null`` instead of an empty value."""

    def represent_none(self, data: None) -> Any:
        return self.represent_scalar("tag:yaml.org,2002:null", "null")


_ReportRepresenter.add_representer(type(None), _ReportRepresenter.represent_none)


def _yaml() -> YAML:
    # Round-trip dumper keeps insertion order; the safe dumper sorts keys.
    yaml = YAML()
    yaml.default_flow_style = False
    yaml.width = 4096
    yaml.indent(mapping=2, sequence=4, offset=2)
    yaml.Representer = _ReportRepresenter
    return yaml


def dump_yaml(report: dict[str, Any]) -> str:
    buf = StringIO()
    _yaml().dump(report, buf)
    return buf.getvalue()


def write_reports(
    data: dict[str, Any], directory: Path, config: ReportsConfig
) -> list[Path]:
    """Write both reports under *directory*; returns the written paths."""
    directory.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for filename, report in (
        (config.compatibility_file, compatibility_report(data)),
        (config.quality_file, quality_report(data)),
    ):
        path = directory / filename
        path.write_text(dump_yaml(report), encoding="utf-8")
        logger.debug("Wrote %s", path)
        written.append(path)
    return written
