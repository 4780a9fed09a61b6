"""StructuralValidator: decide whether one FlowGraph is well-formed.

Pure: never mutates the graph, never performs I/O. External artifacts are
resolved through the injected :class:`ReferenceTables`. Every check runs
on every call (no early exit) so one pass surfaces every problem; the
combined findings are sorted by flow id, node id, code, message.

Checks, in order:

1. Trigger cardinality: exactly one ``trigger`` node.
2. Reachability: nodes not reachable from the trigger are orphans.
3. Terminal reachability: reachable nodes must have a path to a terminal.
4. Port completeness: every contract port wired, no unknown ports.
5. Duplicate wiring: each contract port sources at most one connection.
6. Reference integrity: spec references resolve in the lookup tables.

Plus dangling connections, unknown trigger kinds and cyclic components
with no loop node (one warning per component).
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from dddcheck.domain.catalog import LOOP_TYPES, NodeCatalog
from dddcheck.domain.findings import Finding, ValidationResult, error, warning
from dddcheck.domain.references import ReferenceTables
from dddcheck.domain.specs import TriggerSpec
from dddcheck.domain.types import FindingCode, NodeType
from dddcheck.infrastructure.graph.engine import GraphEngine

if TYPE_CHECKING:
    from dddcheck.domain.errors import ParseError
    from dddcheck.domain.graph import FlowGraph

logger = logging.getLogger(__name__)


class StructuralValidator:
    """Validate FlowGraphs against a catalog and a set of lookup tables.

    One instance is safe to share across threads: it holds only frozen
    inputs and keeps no per-call state on ``self``.
    """

    def __init__(
        self,
        catalog: NodeCatalog,
        references: ReferenceTables | None = None,
    ) -> None:
        self._catalog = catalog
        self._refs = references or ReferenceTables()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate(self, graph: FlowGraph) -> ValidationResult:
        """Run every structural and reference check against *graph*."""
        if graph is None:
            raise TypeError("validate() requires a FlowGraph, got None")

        engine = GraphEngine(graph)
        findings: list[Finding] = []

        findings.extend(self._check_trigger_cardinality(graph))
        # No trigger, nothing visited: skip orphan, dead-end and cycle checks.
        if graph.triggers:
            reachable = engine.reachable_from_trigger()
            findings.extend(self._check_orphans(graph, reachable))
            findings.extend(self._check_dead_ends(graph, engine, reachable))
            findings.extend(self._check_cycles(graph, engine, reachable))
        findings.extend(self._check_dangling_connections(graph))
        findings.extend(self._check_ports(graph))
        findings.extend(self._check_trigger_kinds(graph))
        findings.extend(self._check_references(graph))

        result = ValidationResult.from_findings(graph.id, findings)
        logger.debug(
            "Validated flow %s: %d errors, %d warnings",
            graph.id,
            len(result.errors),
            len(result.warnings),
        )
        return result

    @staticmethod
    def parse_failure(flow_id: str, exc: ParseError) -> ValidationResult:
        """The single top-level finding for a flow that could not be built."""
        return ValidationResult.from_findings(
            flow_id, [error(exc.code, flow_id, exc.message, node_id=exc.node_id)]
        )

    # ------------------------------------------------------------------
    # 1-3: trigger, reachability, terminals
    # ------------------------------------------------------------------

    def _check_trigger_cardinality(self, graph: FlowGraph) -> list[Finding]:
        count = len(graph.triggers)
        if count == 1:
            return []
        return [
            error(
                FindingCode.TRIGGER_CARDINALITY,
                graph.id,
                f"Flow must have exactly one trigger node, found {count}",
            )
        ]

    def _check_orphans(self, graph: FlowGraph, reachable: set[str]) -> list[Finding]:
        return [
            error(
                FindingCode.ORPHAN_NODE,
                graph.id,
                f"Node '{node.id}' ({node.type}) is not reachable from the trigger",
                node_id=node.id,
            )
            for node in graph.nodes
            if node.id not in reachable
        ]

    def _check_dead_ends(
        self, graph: FlowGraph, engine: GraphEngine, reachable: set[str]
    ) -> list[Finding]:
        terminals = {n.id for n in graph.nodes_of_type(NodeType.TERMINAL)}
        finishing = engine.can_reach_any(terminals)
        return [
            error(
                FindingCode.DEAD_END,
                graph.id,
                f"Node '{node.id}' ({node.type}) has no path to a terminal node",
                node_id=node.id,
            )
            for node in graph.nodes
            if node.id in reachable and node.id not in finishing
        ]

    def _check_cycles(
        self, graph: FlowGraph, engine: GraphEngine, reachable: set[str]
    ) -> list[Finding]:
        types = {n.id: n.type for n in graph.nodes}
        findings: list[Finding] = []
        for component in engine.cyclic_components(reachable):
            if any(types[n] in LOOP_TYPES for n in component):
                continue
            findings.append(
                warning(
                    FindingCode.UNGUARDED_CYCLE,
                    graph.id,
                    f"Cycle through {', '.join(component)} has no loop node",
                    node_id=component[0],
                )
            )
        return findings

    # ------------------------------------------------------------------
    # 4-5: ports
    # ------------------------------------------------------------------

    def _check_dangling_connections(self, graph: FlowGraph) -> list[Finding]:
        findings: list[Finding] = []
        for conn in graph.connections:
            for end, node_id in (("source", conn.source), ("target", conn.target)):
                if not graph.has_node(node_id):
                    findings.append(
                        error(
                            FindingCode.DANGLING_CONNECTION,
                            graph.id,
                            (
                                f"Connection {conn.source}.{conn.port} -> {conn.target}: "
                                f"{end} node '{node_id}' does not exist"
                            ),
                            node_id=conn.source if graph.has_node(conn.source) else None,
                        )
                    )
        return findings

    def _check_ports(self, graph: FlowGraph) -> list[Finding]:
        findings: list[Finding] = []
        for node in graph.nodes:
            contract = graph.outgoing_ports(node.id)
            wired = Counter(c.port for c in graph.outgoing(node.id))

            for port in sorted(contract - set(wired)):
                findings.append(
                    error(
                        FindingCode.UNWIRED_PORT,
                        graph.id,
                        f"Port '{port}' of {node.type} node '{node.id}' is not connected",
                        node_id=node.id,
                    )
                )
            for port in sorted(set(wired) - contract):
                findings.append(
                    error(
                        FindingCode.UNKNOWN_PORT,
                        graph.id,
                        f"Port '{port}' is not declared for {node.type} node '{node.id}'",
                        node_id=node.id,
                    )
                )
            for port in sorted(p for p in contract if wired[p] > 1):
                findings.append(
                    error(
                        FindingCode.AMBIGUOUS_PORT,
                        graph.id,
                        (
                            f"Port '{port}' of {node.type} node '{node.id}' "
                            f"is wired {wired[port]} times"
                        ),
                        node_id=node.id,
                    )
                )
        return findings

    # ------------------------------------------------------------------
    # 6: references and trigger kinds
    # ------------------------------------------------------------------

    def _check_trigger_kinds(self, graph: FlowGraph) -> list[Finding]:
        findings: list[Finding] = []
        for node in graph.triggers:
            if not isinstance(node.spec, TriggerSpec):
                continue
            kind = node.spec.resolved_kind
            if kind is not None and kind not in self._catalog.trigger_kinds:
                findings.append(
                    warning(
                        FindingCode.UNKNOWN_TRIGGER_KIND,
                        graph.id,
                        f"Trigger '{node.id}' has unknown kind '{kind}'",
                        node_id=node.id,
                    )
                )
        return findings

    def _check_references(self, graph: FlowGraph) -> list[Finding]:
        findings: list[Finding] = []
        for node in graph.nodes:
            for kind, name in node.spec.references():
                if self._refs.lookup(kind, name):
                    continue
                make = warning if self._refs.is_optional(kind) else error
                findings.append(
                    make(
                        FindingCode.DANGLING_REFERENCE,
                        graph.id,
                        f"Node '{node.id}' references unknown {kind} '{name}'",
                        node_id=node.id,
                    )
                )
        return findings
