"""Coverage analysis and quality scoring across a project's flows.

Coverage and score are reported side by side and never combined:

- coverage: how much of the node-type / trigger-kind catalog the flows
  exercise (orphan nodes do not count);
- score: 100 minus weighted error and warning counts, clamped to [0, 100].

The catalog is always passed in; nothing here knows how many node types
exist.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import BaseModel

from dddcheck.config.models import ScoringConfig
from dddcheck.domain.catalog import NodeCatalog
from dddcheck.domain.findings import ValidationResult
from dddcheck.domain.graph import FlowGraph
from dddcheck.domain.specs import TriggerSpec
from dddcheck.infrastructure.graph.engine import GraphEngine

QUALITY_LABELS = ("EXCELLENT", "GOOD", "FAIR", "POOR")


class CoverageReport(BaseModel):
    """Aggregate over one validation run. Created fresh, never mutated."""

    model_config = {"frozen": True}

    node_types_observed: tuple[str, ...]
    trigger_types_observed: tuple[str, ...]
    node_type_total: int
    trigger_type_total: int
    node_coverage_pct: int
    trigger_coverage_pct: int
    error_count: int
    warning_count: int
    score_pct: int
    quality_label: str

    @property
    def node_type_coverage(self) -> str:
        return f"{len(self.node_types_observed)}/{self.node_type_total}"

    @property
    def trigger_type_coverage(self) -> str:
        return f"{len(self.trigger_types_observed)}/{self.trigger_type_total}"


def observed_node_types(graphs: Iterable[FlowGraph]) -> set[str]:
    """Union of node types across *graphs*, counting reachable nodes only.

    A flow without a trigger contributes nothing.
    """
    seen: set[str] = set()
    for graph in graphs:
        reachable = GraphEngine(graph).reachable_from_trigger()
        seen.update(n.type for n in graph.nodes if n.id in reachable)
    return seen


def observed_trigger_kinds(graphs: Iterable[FlowGraph], catalog: NodeCatalog) -> set[str]:
    """Union of normalized trigger kinds that the trigger catalog knows."""
    kinds: set[str] = set()
    for graph in graphs:
        for node in graph.triggers:
            if isinstance(node.spec, TriggerSpec):
                kind = node.spec.resolved_kind
                if kind in catalog.trigger_kinds:
                    kinds.add(kind)
    return kinds


def coverage_pct(observed: int, total: int) -> int:
    """``observed / total * 100`` rounded half up; 0 for an empty catalog."""
    if total <= 0:
        return 0
    return min(100, (observed * 200 + total) // (total * 2))


def score_pct(errors: int, warnings: int, scoring: ScoringConfig | None = None) -> int:
    """100 minus weighted finding counts, clamped to [0, 100]."""
    scoring = scoring or ScoringConfig()
    raw = 100 - scoring.error_weight * errors - scoring.warning_weight * warnings
    return max(0, min(100, int(raw)))


def quality_label(score: int, scoring: ScoringConfig | None = None) -> str:
    scoring = scoring or ScoringConfig()
    if score >= scoring.excellent:
        return "EXCELLENT"
    if score >= scoring.good:
        return "GOOD"
    if score >= scoring.fair:
        return "FAIR"
    return "POOR"


def analyze(
    graphs: Sequence[FlowGraph],
    results: Sequence[ValidationResult],
    catalog: NodeCatalog,
    scoring: ScoringConfig | None = None,
) -> CoverageReport:
    """Build the CoverageReport for one run.

    *results* must include parse-failure results and project-level
    findings so they count against the score.
    """
    node_types = observed_node_types(graphs)
    trigger_kinds = observed_trigger_kinds(graphs, catalog)
    errors = sum(len(r.errors) for r in results)
    warnings = sum(len(r.warnings) for r in results)
    score = score_pct(errors, warnings, scoring)

    return CoverageReport(
        node_types_observed=tuple(sorted(node_types)),
        trigger_types_observed=tuple(sorted(trigger_kinds)),
        node_type_total=len(catalog),
        trigger_type_total=len(catalog.trigger_kinds),
        node_coverage_pct=coverage_pct(len(node_types), len(catalog)),
        trigger_coverage_pct=coverage_pct(len(trigger_kinds), len(catalog.trigger_kinds)),
        error_count=errors,
        warning_count=warnings,
        score_pct=score,
        quality_label=quality_label(score, scoring),
    )
