"""GraphEngine: lazy-built NetworkX view over one FlowGraph.

Built per flow, never cached across flows. Only connections whose both
endpoints exist become edges; dangling connections are the validator's
concern and are never traversed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from dddcheck.domain.graph import FlowGraph

type _Graph = nx.MultiDiGraph


class GraphEngine:
    """Read-only traversal helpers for a single flow."""

    def __init__(self, flow: FlowGraph) -> None:
        self._flow = flow
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the graph, building it on first access."""
        if self._graph is None:
            self._graph = self._build()
        return self._graph

    def _build(self) -> _Graph:
        """Add every node (so isolated nodes are visible), then valid edges.

        A MultiDiGraph keeps parallel edges from different ports of the
        same node to the same target.
        """
        g: _Graph = nx.MultiDiGraph()
        for node in self._flow.nodes:
            g.add_node(node.id, type=node.type)
        for conn in self._flow.connections:
            if conn.source in g and conn.target in g:
                g.add_edge(conn.source, conn.target, key=conn.port, port=conn.port)
        return nx.freeze(g)

    def reachable_from(self, node_id: str) -> set[str]:
        """*node_id* plus every node reachable from it."""
        if node_id not in self.graph:
            return set()
        return {node_id} | nx.descendants(self.graph, node_id)

    def reachable_from_trigger(self) -> set[str]:
        """Nodes reachable from the first declared trigger.

        Empty when the flow has no trigger: nothing counts as visited, so
        coverage ignores the flow and no node is reported as an orphan.
        """
        triggers = self._flow.triggers
        if not triggers:
            return set()
        return self.reachable_from(triggers[0].id)

    def can_reach_any(self, targets: set[str]) -> set[str]:
        """Every node with a path to at least one of *targets* (targets included)."""
        reverse = self.graph.reverse(copy=False)
        found: set[str] = set()
        for target in targets:
            if target in reverse:
                found.add(target)
                found |= nx.descendants(reverse, target)
        return found

    def cyclic_components(self, nodes: set[str]) -> list[list[str]]:
        """Cyclic strongly connected components of the subgraph induced by *nodes*.

        A component is cyclic when it has two or more nodes or a self-loop.
        One entry per component, never one per simple cycle.
        """
        sub = self.graph.subgraph(nodes)
        components = [
            sorted(c)
            for c in nx.strongly_connected_components(sub)
            if len(c) > 1 or any(sub.has_edge(n, n) for n in c)
        ]
        return sorted(components)
