"""ProjectService: validate every flow of a project and score the result.

Pipeline (one ``check()`` call):

1. Load ``specs/`` (flow documents + lookup tables) and the node catalog.
2. Barrier: build the ReferenceTables once, including every flow id, so
   ``sub_flow`` references can be resolved by any worker.
3. Fan out: one task per flow (build graph, validate) on a thread pool.
   Flows share no mutable state; results are collected in file order.
4. Fan in: project-level checks, stable sort, coverage and score.

Malformed flows never abort the run; they become findings.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dddcheck.domain.catalog import NodeCatalog
from dddcheck.domain.errors import CatalogError, ParseError
from dddcheck.domain.findings import (
    Finding,
    ValidationResult,
    error,
    sort_findings,
    warning,
)
from dddcheck.domain.graph import FlowGraph, build
from dddcheck.domain.references import ReferenceTables
from dddcheck.domain.specs import EventSpec, TriggerSpec
from dddcheck.domain.types import FindingCode, NodeType, Severity
from dddcheck.infrastructure.loader import (
    FlowSource,
    ProjectSource,
    load_catalog_file,
    load_project,
)
from dddcheck.services.base import BaseService
from dddcheck.services.coverage import CoverageReport, analyze
from dddcheck.services.result import ServiceResult
from dddcheck.services.telemetry import get_current_span, trace_span, traced
from dddcheck.services.validator import StructuralValidator

logger = logging.getLogger(__name__)

PROJECT_SCOPE = "(project)"

STATUS_OK = "ok"
STATUS_PARSE_FAILED = "parse_failed"
STATUS_NORMALIZE_FAILED = "normalize_failed"


# ---------------------------------------------------------------------------
# Core pipeline (no file I/O)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FlowOutcome:
    """What happened to one flow file."""

    source: FlowSource
    status: str
    result: ValidationResult
    graph: FlowGraph | None = None


@dataclass(frozen=True)
class ProjectRun:
    """Fan-in of one validation run."""

    outcomes: list[FlowOutcome]
    project_findings: list[Finding] = field(default_factory=list)

    @property
    def graphs(self) -> list[FlowGraph]:
        return [o.graph for o in self.outcomes if o.graph is not None]

    @property
    def results(self) -> list[ValidationResult]:
        project = ValidationResult.from_findings(PROJECT_SCOPE, self.project_findings)
        return [*(o.result for o in self.outcomes), project]

    @property
    def findings(self) -> list[Finding]:
        """Every finding the score counts, one entry per finding.

        Each result is already free of duplicates; two files sharing a flow
        id keep both copies of an identical finding.
        """
        every: list[Finding] = []
        for result in self.results:
            every.extend(result.errors)
            every.extend(result.warnings)
        return sort_findings(every, dedupe=False)

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)


def _validate_one(
    source: FlowSource, catalog: NodeCatalog, validator: StructuralValidator
) -> FlowOutcome:
    if not source.parsed:
        result = ValidationResult.from_findings(
            source.flow_id,
            [error(FindingCode.MALFORMED_FLOW, source.flow_id, source.error or "Unreadable flow")],
        )
        return FlowOutcome(source=source, status=STATUS_PARSE_FAILED, result=result)
    try:
        graph = build(source.flow_id, source.nodes, source.connections, catalog)
    except ParseError as exc:
        return FlowOutcome(
            source=source,
            status=STATUS_NORMALIZE_FAILED,
            result=StructuralValidator.parse_failure(source.flow_id, exc),
        )
    return FlowOutcome(
        source=source, status=STATUS_OK, result=validator.validate(graph), graph=graph
    )


def validate_sources(
    sources: Sequence[FlowSource],
    tables: ReferenceTables,
    catalog: NodeCatalog,
    *,
    max_workers: int = 4,
    sync: bool = False,
) -> ProjectRun:
    """Validate *sources* against *catalog* and the lookup *tables*.

    The flow-id table is completed here, before any worker starts.
    """
    tables = tables.with_flows(s.flow_id for s in sources)
    validator = StructuralValidator(catalog, tables)

    if sync or max_workers <= 1 or len(sources) <= 1:
        outcomes = [_validate_one(s, catalog, validator) for s in sources]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [pool.submit(_validate_one, s, catalog, validator) for s in sources]
            outcomes = [f.result() for f in futures]

    return ProjectRun(outcomes=outcomes, project_findings=_project_findings(outcomes))


def _project_findings(outcomes: Sequence[FlowOutcome]) -> list[Finding]:
    """Cross-flow checks: duplicate flow ids, emitted events nobody consumes."""
    findings: list[Finding] = []

    seen: Counter[str] = Counter()
    for outcome in outcomes:
        flow_id = outcome.source.flow_id
        seen[flow_id] += 1
        if seen[flow_id] > 1:
            findings.append(
                error(
                    FindingCode.DUPLICATE_FLOW_ID,
                    flow_id,
                    f"Flow id '{flow_id}' is declared again in {outcome.source.path.name}",
                )
            )

    consumed: set[str] = set()
    emitted: list[tuple[str, str, str]] = []
    for outcome in outcomes:
        if outcome.graph is None:
            continue
        for node in outcome.graph.nodes:
            spec = node.spec
            if isinstance(spec, TriggerSpec) and spec.resolved_kind == "event" and spec.event_name:
                consumed.add(spec.event_name)
            elif isinstance(spec, EventSpec) and spec.event and node.type == NodeType.EVENT:
                if spec.direction == "consume":
                    consumed.add(spec.event)
                else:
                    emitted.append((outcome.graph.id, node.id, spec.event))

    for flow_id, node_id, event in emitted:
        if event not in consumed:
            findings.append(
                warning(
                    FindingCode.UNCONSUMED_EVENT,
                    flow_id,
                    f"Event '{event}' is emitted but no flow consumes it",
                    node_id=node_id,
                )
            )
    return findings


# ---------------------------------------------------------------------------
# ProjectService
# ---------------------------------------------------------------------------


class ProjectService(BaseService):
    """Validates the project rooted at ``settings.project_root``."""

    @traced
    def check(self, *, min_severity: str = "warning") -> ServiceResult:
        """Validate every flow and report findings, coverage and score.

        ``min_severity="error"`` hides warnings from the listing; they still
        count toward the score.
        """
        warnings: list[str] = []
        root = self._settings.project_root

        try:
            with trace_span("load_project"):
                project = load_project(root)
        except FileNotFoundError as exc:
            return ServiceResult.failure("validate", "NO_SPECS", str(exc), project=str(root))

        try:
            catalog = self.load_catalog(warnings)
        except (CatalogError, ValueError, OSError) as exc:
            return ServiceResult.failure("validate", "CATALOG_INVALID", str(exc))

        with trace_span("validate_flows") as span:
            run = validate_sources(
                project.flows,
                self._reference_tables(project),
                catalog,
                max_workers=self._settings.validator.max_workers,
                sync=self._settings.effective_sync,
            )
            if span is not None:
                span.annotate("flows", len(run.outcomes))

        with trace_span("coverage"):
            coverage = analyze(run.graphs, run.results, catalog, self._settings.scoring)

        self._notify(
            warnings,
            flow_count=len(run.outcomes),
            error_count=coverage.error_count,
            warning_count=coverage.warning_count,
            score_pct=coverage.score_pct,
        )
        current = get_current_span()
        if current is not None:
            current.annotate("score_pct", coverage.score_pct)

        logger.debug(
            "Validated %d flows: %d errors, %d warnings, score %d",
            len(run.outcomes),
            coverage.error_count,
            coverage.warning_count,
            coverage.score_pct,
        )
        return ServiceResult(
            ok=True,
            op="validate",
            data=self._payload(project, run, coverage, min_severity=min_severity),
            warnings=warnings,
        )

    @traced
    def catalog(self) -> ServiceResult:
        """List the effective node catalog and trigger kinds."""
        warnings: list[str] = []
        try:
            catalog = self.load_catalog(warnings)
        except (CatalogError, ValueError, OSError) as exc:
            return ServiceResult.failure("catalog", "CATALOG_INVALID", str(exc))

        items = [
            {"type": c.type, "ports": list(c.ports), "dynamic": c.dynamic}
            for c in catalog.contracts.values()
        ]
        return ServiceResult(
            ok=True,
            op="catalog",
            data={
                "items": items,
                "count": len(items),
                "trigger_kinds": list(catalog.trigger_kinds),
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def load_catalog(self, warnings: list[str]) -> NodeCatalog:
        """Default catalog + ``[catalog] path`` file + plugin node types.

        Raises:
            CatalogError: the combined catalog is inconsistent.
            ValueError, OSError: the catalog file cannot be used.
        """
        config = self._settings.catalog
        catalog = NodeCatalog.from_mapping(
            {}, base=NodeCatalog.default(), trigger_kinds=config.trigger_kinds
        )
        if config.path:
            path = Path(config.path)
            if not path.is_absolute():
                path = self._settings.project_root / path
            catalog = catalog.extend(load_catalog_file(path))
            logger.debug("Extended catalog from %s", path)
        if self._plugins is not None:
            catalog = self._plugins.extend_catalog(catalog, warnings)
        return catalog

    def _reference_tables(self, project: ProjectSource) -> ReferenceTables:
        return ReferenceTables(
            schemas=project.schemas,
            errors=project.errors,
            events=project.events,
            integrations=project.integrations,
            optional=frozenset(self._settings.references.optional),
        )

    @staticmethod
    def _payload(
        project: ProjectSource,
        run: ProjectRun,
        coverage: CoverageReport,
        *,
        min_severity: str,
    ) -> dict[str, Any]:
        findings = run.findings
        errors = [f.to_report() for f in findings if f.severity == Severity.ERROR]
        warns = [f.to_report() for f in findings if f.severity == Severity.WARNING]
        if min_severity == "error":
            warns = []

        def rel(path: Path) -> str:
            try:
                return path.relative_to(project.root).as_posix()
            except ValueError:
                return path.as_posix()

        flows = [
            {
                "id": o.source.flow_id,
                "path": rel(o.source.path),
                "status": o.status,
                "errors": len(o.result.errors),
                "warnings": len(o.result.warnings),
            }
            for o in run.outcomes
        ]
        parsed_ok = len(run.outcomes) - run.count(STATUS_PARSE_FAILED)
        normalized_ok = run.count(STATUS_OK)
        return {
            "flows": flows,
            "files": {
                "total": len(run.outcomes),
                "parsed_ok": parsed_ok,
                "parsed_failed": run.count(STATUS_PARSE_FAILED),
                "normalized_ok": normalized_ok,
                "normalized_failed": parsed_ok - normalized_ok,
            },
            "coverage": {
                "node_types_observed": list(coverage.node_types_observed),
                "trigger_types_observed": list(coverage.trigger_types_observed),
                "node_type_coverage": coverage.node_type_coverage,
                "trigger_type_coverage": coverage.trigger_type_coverage,
                "node_coverage_pct": coverage.node_coverage_pct,
                "trigger_coverage_pct": coverage.trigger_coverage_pct,
            },
            "score_pct": coverage.score_pct,
            "quality_label": coverage.quality_label,
            "error_count": coverage.error_count,
            "warning_count": coverage.warning_count,
            "errors": errors,
            "warnings": warns,
            "count": len(errors) + len(warns),
        }
