"""FlowGraph: immutable in-memory model of one flow.

A FlowGraph is constructed once by :func:`build` from already-parsed node
and connection lists, then only queried. Construction fails fast with a
:class:`~dddcheck.domain.errors.ParseError` for problems that make the
graph meaningless (duplicate node ids, types outside the catalog, specs
with wrongly typed fields). Everything else, including connections that
point at missing nodes, is kept in the model for the validator to report.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field, SerializeAsAny, ValidationError

from dddcheck.domain.catalog import NodeCatalog
from dddcheck.domain.errors import (
    DuplicateNodeIdError,
    InvalidNodeSpecError,
    ParseError,
    UnknownNodeTypeError,
)
from dddcheck.domain.specs import NodeSpec, spec_model_for
from dddcheck.domain.types import NodeType


class Node(BaseModel):
    """A typed step within a flow."""

    model_config = {"frozen": True}

    id: str
    type: str
    label: str | None = None
    spec: SerializeAsAny[NodeSpec] = Field(default_factory=NodeSpec)


class Connection(BaseModel):
    """Directed edge from ``(source, port)`` to ``target``."""

    model_config = {"frozen": True}

    source: str
    port: str
    target: str


class FlowGraph(BaseModel):
    """One unit of validation: ordered nodes plus their connections.

    Attributes:
        id: Flow id, unique within a project.
        nodes: Nodes in declaration order.
        connections: Connections in declaration order.
        ports: Resolved contract ports per node id (catalog ports plus
            the node's dynamic ports), computed at build time.
    """

    model_config = {"frozen": True}

    id: str
    nodes: tuple[Node, ...] = ()
    connections: tuple[Connection, ...] = ()
    ports: dict[str, frozenset[str]] = Field(default_factory=dict)

    def node(self, node_id: str) -> Node:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise KeyError(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self.ports

    @property
    def node_ids(self) -> tuple[str, ...]:
        return tuple(n.id for n in self.nodes)

    def nodes_of_type(self, node_type: str) -> list[Node]:
        return [n for n in self.nodes if n.type == node_type]

    @property
    def triggers(self) -> list[Node]:
        return self.nodes_of_type(NodeType.TRIGGER)

    def outgoing_ports(self, node_id: str) -> frozenset[str]:
        """Contract ports declared for *node_id*'s type.

        Raises:
            KeyError: *node_id* is not in this graph.
        """
        return self.ports[node_id]

    def outgoing(self, node_id: str) -> list[Connection]:
        """Connections sourced at *node_id*, in declaration order."""
        return [c for c in self.connections if c.source == node_id]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def _coerce_node(raw: Node | Mapping[str, Any], catalog: NodeCatalog) -> Node:
    """Turn a raw node mapping into a Node with its typed spec variant."""
    if isinstance(raw, Node):
        node_id, node_type = raw.id, raw.type
        spec_data: Any = raw.spec.model_dump(by_alias=True, exclude_none=True)
        label = raw.label
    else:
        node_id = str(raw.get("id", "")).strip()
        node_type = str(raw.get("type", "")).strip()
        spec_data = raw.get("spec") or {}
        label = raw.get("label") or raw.get("name")

    if not node_id:
        raise ParseError("Node is missing an 'id'")
    if node_type not in catalog:
        raise UnknownNodeTypeError(
            f"Node '{node_id}' has unknown type '{node_type}'", node_id=node_id
        )
    if not isinstance(spec_data, Mapping):
        raise InvalidNodeSpecError(
            f"Node '{node_id}': spec must be a mapping, got {type(spec_data).__name__}",
            node_id=node_id,
        )

    model = spec_model_for(node_type)
    try:
        spec = model.model_validate(dict(spec_data))
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise InvalidNodeSpecError(
            f"Node '{node_id}' ({node_type}): invalid spec field(s): {fields}",
            node_id=node_id,
        ) from exc

    return Node(id=node_id, type=node_type, label=str(label) if label else None, spec=spec)


def _coerce_connection(
    raw: Connection | Mapping[str, Any],
    ports: Mapping[str, frozenset[str]],
) -> Connection:
    """Normalize a raw connection; a missing port resolves to the source's only port."""
    if isinstance(raw, Connection):
        return raw
    source = raw.get("from", raw.get("source"))
    target = raw.get("to", raw.get("target", raw.get("targetNodeId")))
    if source is None or target is None:
        raise ParseError(f"Connection requires 'from' and 'to': {dict(raw)!r}")
    port = raw.get("port", raw.get("sourceHandle"))
    if port is None:
        declared = ports.get(str(source), frozenset())
        port = next(iter(declared)) if len(declared) == 1 else "default"
    return Connection(source=str(source), port=str(port), target=str(target))


def build(
    flow_id: str,
    nodes_list: Iterable[Node | Mapping[str, Any]],
    connections_list: Iterable[Connection | Mapping[str, Any]],
    catalog: NodeCatalog,
) -> FlowGraph:
    """Build an immutable FlowGraph.

    Raises:
        DuplicateNodeIdError: two nodes share an id.
        UnknownNodeTypeError: a node's type is not in *catalog*.
        InvalidNodeSpecError: a node's spec does not fit its type's variant.
        ParseError: a node or connection is missing required keys.

    Connections given without a port take the source node's only contract
    port, or ``default`` when the source has zero or several ports.
    """
    nodes: list[Node] = []
    ports: dict[str, frozenset[str]] = {}
    for raw in nodes_list:
        node = _coerce_node(raw, catalog)
        if node.id in ports:
            raise DuplicateNodeIdError(
                f"Duplicate node id '{node.id}' in flow '{flow_id}'", node_id=node.id
            )
        contract = catalog.contract(node.type)
        declared = set(contract.ports)
        if contract.dynamic:
            declared.update(node.spec.extra_ports())
        ports[node.id] = frozenset(declared)
        nodes.append(node)

    connections = tuple(_coerce_connection(c, ports) for c in connections_list)
    return FlowGraph(id=flow_id, nodes=tuple(nodes), connections=connections, ports=ports)
