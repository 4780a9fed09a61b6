"""Per-type node spec variants.

Every node carries a ``spec`` whose fields depend on its type. Rather than
an untyped mapping, each type registers a pydantic model in
:data:`SPEC_MODELS`; types without a dedicated model fall back to
:class:`NodeSpec`. Unknown keys are kept (``extra="allow"``) so specs
written for newer catalogs still load.

Each variant answers two questions for the validator:

- ``references()``: which external artifacts (schema, error code, event,
  flow, integration) the node names.
- ``extra_ports()``: which per-node output ports it adds to its type's
  fixed contract (dynamic types only).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from dddcheck.domain.types import NodeType, ReferenceKind

type Reference = tuple[ReferenceKind, str]


class NodeSpec(BaseModel):
    """Base spec: no references, no dynamic ports."""

    model_config = ConfigDict(frozen=True, extra="allow")

    description: str | None = None

    def references(self) -> list[Reference]:
        return []

    def extra_ports(self) -> tuple[str, ...]:
        return ()


class TriggerSpec(NodeSpec):
    """Trigger sub-kind plus optional event/route detail.

    ``kind`` may be omitted when ``event`` starts with it, as in
    ``event: "HTTP POST /api/users"``.
    """

    kind: str | None = None
    event: str | None = None
    method: str | None = None
    path: str | None = None
    schedule: str | None = None

    @property
    def resolved_kind(self) -> str | None:
        if self.kind:
            return self.kind.strip().lower()
        if self.event:
            head = self.event.strip().split(maxsplit=1)
            return head[0].lower() if head else None
        return None

    def references(self) -> list[Reference]:
        if self.resolved_kind == "event" and self.event_name:
            return [(ReferenceKind.EVENT, self.event_name)]
        return []

    @property
    def event_name(self) -> str | None:
        """Event consumed by an event-kind trigger."""
        if self.event is None:
            return None
        parts = self.event.strip().split(maxsplit=1)
        if not self.kind and len(parts) == 2 and parts[0].lower() == "event":
            return parts[1].strip()
        return self.event.strip() or None


class InputSpec(NodeSpec):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    schema_ref: str | None = Field(default=None, alias="schema")
    fields: list[Any] = Field(default_factory=list)

    def references(self) -> list[Reference]:
        return [(ReferenceKind.SCHEMA, self.schema_ref)] if self.schema_ref else []


class DecisionSpec(NodeSpec):
    condition: str | None = None


class DataStoreSpec(NodeSpec):
    operation: str | None = None
    model: str | None = None

    def references(self) -> list[Reference]:
        return [(ReferenceKind.SCHEMA, self.model)] if self.model else []


class ServiceCallSpec(NodeSpec):
    integration: str | None = None
    method: str | None = None

    def references(self) -> list[Reference]:
        return [(ReferenceKind.INTEGRATION, self.integration)] if self.integration else []


class EventSpec(NodeSpec):
    event: str | None = None
    direction: Literal["emit", "consume"] = "emit"

    def references(self) -> list[Reference]:
        return [(ReferenceKind.EVENT, self.event)] if self.event else []


class SubFlowSpec(NodeSpec):
    flow_ref: str | None = None

    def references(self) -> list[Reference]:
        return [(ReferenceKind.FLOW, self.flow_ref)] if self.flow_ref else []


class TerminalSpec(NodeSpec):
    status: int | None = None
    error_code: str | None = None

    def references(self) -> list[Reference]:
        return [(ReferenceKind.ERROR, self.error_code)] if self.error_code else []


class ParallelSpec(NodeSpec):
    branches: list[str] = Field(default_factory=list)

    def extra_ports(self) -> tuple[str, ...]:
        return tuple(self.branches)


class SmartRouterSpec(NodeSpec):
    routes: list[str] = Field(default_factory=list)

    def extra_ports(self) -> tuple[str, ...]:
        return tuple(self.routes)


class LlmCallSpec(NodeSpec):
    model: str | None = None
    prompt: str | None = None


class IpcCallSpec(NodeSpec):
    command: str | None = None


SPEC_MODELS: dict[str, type[NodeSpec]] = {
    NodeType.TRIGGER: TriggerSpec,
    NodeType.INPUT: InputSpec,
    NodeType.DECISION: DecisionSpec,
    NodeType.DATA_STORE: DataStoreSpec,
    NodeType.SERVICE_CALL: ServiceCallSpec,
    NodeType.EVENT: EventSpec,
    NodeType.SUB_FLOW: SubFlowSpec,
    NodeType.TERMINAL: TerminalSpec,
    NodeType.PARALLEL: ParallelSpec,
    NodeType.SMART_ROUTER: SmartRouterSpec,
    NodeType.LLM_CALL: LlmCallSpec,
    NodeType.IPC_CALL: IpcCallSpec,
}


def spec_model_for(node_type: str) -> type[NodeSpec]:
    """Return the spec model registered for *node_type* (``NodeSpec`` fallback)."""
    return SPEC_MODELS.get(node_type, NodeSpec)
