"""Node type catalog: the type -> output port contract table.

The catalog is data, not code: the built-in table below is only the
default, and callers may load or extend it from a mapping (YAML file,
plugin hook). Adding a node type never requires changes to the
validator or the coverage analyzer.

Mapping shape accepted by :meth:`NodeCatalog.from_mapping`::

    approval_step:
      extends: human_gate
      ports: [escalated]
    webhook_out:
      ports: [delivered, failed]
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, Field

from dddcheck.domain.errors import CatalogError
from dddcheck.domain.types import NodeType, TriggerKind

# --- Built-in port contracts ---

DEFAULT_PORTS: dict[str, tuple[str, ...]] = {
    NodeType.TRIGGER: ("default",),
    NodeType.INPUT: ("valid", "invalid"),
    NodeType.PROCESS: ("default",),
    NodeType.DECISION: ("true", "false"),
    NodeType.TERMINAL: (),
    NodeType.DATA_STORE: ("success", "error"),
    NodeType.SERVICE_CALL: ("success", "error"),
    NodeType.EVENT: ("default",),
    NodeType.LOOP: ("body", "done"),
    NodeType.PARALLEL: ("done",),
    NodeType.COLLECTION: ("result", "empty"),
    NodeType.PARSE: ("success", "error"),
    NodeType.CRYPTO: ("success", "error"),
    NodeType.BATCH: ("done", "error"),
    NodeType.TRANSACTION: ("committed", "rolled_back"),
    NodeType.CACHE: ("hit", "miss"),
    NodeType.DELAY: ("default",),
    NodeType.TRANSFORM: ("default",),
    NodeType.SUB_FLOW: ("success", "error"),
    NodeType.LLM_CALL: ("success", "error"),
    NodeType.AGENT_LOOP: ("done", "error"),
    NodeType.GUARDRAIL: ("pass", "block"),
    NodeType.HUMAN_GATE: ("approved", "rejected"),
    NodeType.ORCHESTRATOR: ("done", "error"),
    NodeType.SMART_ROUTER: ("fallback",),
    NodeType.HANDOFF: ("default",),
    NodeType.AGENT_GROUP: ("done", "error"),
    NodeType.IPC_CALL: ("success", "error"),
}

# Types whose nodes declare additional ports in their spec.
DYNAMIC_TYPES: frozenset[str] = frozenset({NodeType.PARALLEL, NodeType.SMART_ROUTER})

# Types that legitimately close a cycle in a flow.
LOOP_TYPES: frozenset[str] = frozenset({NodeType.LOOP, NodeType.AGENT_LOOP})

DEFAULT_TRIGGER_KINDS: tuple[str, ...] = tuple(k.value for k in TriggerKind)


class NodeContract(BaseModel):
    """Resolved output-port contract for one node type."""

    model_config = {"frozen": True}

    type: str
    ports: tuple[str, ...] = ()
    dynamic: bool = False


class NodeCatalog(BaseModel):
    """Frozen lookup table of node contracts plus the trigger-kind catalog."""

    model_config = {"frozen": True}

    contracts: dict[str, NodeContract] = Field(default_factory=dict)
    trigger_kinds: tuple[str, ...] = DEFAULT_TRIGGER_KINDS

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> NodeCatalog:
        """The built-in 28-type catalog."""
        return cls(
            contracts={
                str(t): NodeContract(type=str(t), ports=ports, dynamic=t in DYNAMIC_TYPES)
                for t, ports in DEFAULT_PORTS.items()
            }
        )

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        base: NodeCatalog | None = None,
        trigger_kinds: Iterable[str] | None = None,
    ) -> NodeCatalog:
        """Build a catalog from a ``type -> {ports, extends, dynamic}`` mapping.

        Entries in *data* are layered on top of *base* (when given); an entry
        whose name already exists in *base* replaces it.

        Raises:
            CatalogError: an entry is malformed, extends an unknown type,
                or participates in an ``extends`` cycle.
        """
        raw: dict[str, dict[str, Any]] = {}
        if base is not None:
            for name, contract in base.contracts.items():
                raw[name] = {"ports": list(contract.ports), "dynamic": contract.dynamic}
        for name, entry in data.items():
            if entry is None:
                entry = {}
            if not isinstance(entry, Mapping):
                msg = f"Catalog entry '{name}' must be a mapping, got {type(entry).__name__}"
                raise CatalogError(msg)
            raw[str(name)] = dict(entry)

        resolved: dict[str, NodeContract] = {}
        for name in raw:
            _resolve(name, raw, resolved, chain=())

        kinds = tuple(trigger_kinds) if trigger_kinds is not None else None
        if kinds is None:
            kinds = base.trigger_kinds if base is not None else DEFAULT_TRIGGER_KINDS
        return cls(contracts=resolved, trigger_kinds=tuple(k.lower() for k in kinds))

    def extend(self, data: Mapping[str, Any]) -> NodeCatalog:
        """Return a new catalog with *data* layered on top of this one."""
        return NodeCatalog.from_mapping(data, base=self)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __contains__(self, node_type: object) -> bool:
        return node_type in self.contracts

    def __len__(self) -> int:
        return len(self.contracts)

    def contract(self, node_type: str) -> NodeContract:
        return self.contracts[node_type]

    def ports_for(self, node_type: str) -> frozenset[str]:
        """Fixed contract ports for *node_type* (excludes per-node dynamic ports)."""
        return frozenset(self.contracts[node_type].ports)

    @property
    def node_types(self) -> tuple[str, ...]:
        return tuple(self.contracts)


def _resolve(
    name: str,
    raw: dict[str, dict[str, Any]],
    resolved: dict[str, NodeContract],
    *,
    chain: tuple[str, ...],
) -> NodeContract:
    """Depth-first resolution of ``extends`` with cycle detection."""
    if name in resolved:
        return resolved[name]
    if name in chain:
        cycle = " -> ".join((*chain, name))
        raise CatalogError(f"Catalog extends cycle: {cycle}")

    entry = raw[name]
    ports_value = entry.get("ports", [])
    if isinstance(ports_value, str) or not isinstance(ports_value, Iterable):
        raise CatalogError(f"Catalog entry '{name}': 'ports' must be a list")
    own_ports = [str(p) for p in ports_value]

    ports: list[str] = []
    dynamic = bool(entry.get("dynamic", False))
    parent_name = entry.get("extends")
    if parent_name is not None:
        parent_name = str(parent_name)
        if parent_name not in raw:
            raise CatalogError(f"Catalog entry '{name}' extends unknown type '{parent_name}'")
        parent = _resolve(parent_name, raw, resolved, chain=(*chain, name))
        ports.extend(parent.ports)
        dynamic = dynamic or parent.dynamic

    for port in own_ports:
        if port not in ports:
            ports.append(port)

    contract = NodeContract(type=name, ports=tuple(ports), dynamic=dynamic)
    resolved[name] = contract
    return contract
