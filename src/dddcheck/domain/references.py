"""Reference lookup tables injected into the validator.

The validator never reads files. Whatever loads a project resolves the
names of every schema, error code, event, integration and flow up front
and hands them over as :class:`ReferenceTables`. Building the tables is
the one synchronization point before flows are validated in parallel:
the flow-id table must be complete before any ``sub_flow`` is checked.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from pydantic import BaseModel, Field

from dddcheck.domain.types import ReferenceKind

type ReferenceLookup = Callable[[ReferenceKind, str], bool]


class ReferenceTables(BaseModel):
    """Known artifact names per reference kind."""

    model_config = {"frozen": True}

    schemas: frozenset[str] = frozenset()
    errors: frozenset[str] = frozenset()
    events: frozenset[str] = frozenset()
    integrations: frozenset[str] = frozenset()
    flows: frozenset[str] = frozenset()
    optional: frozenset[ReferenceKind] = Field(default_factory=frozenset)

    def table(self, kind: ReferenceKind) -> frozenset[str]:
        return {
            ReferenceKind.SCHEMA: self.schemas,
            ReferenceKind.ERROR: self.errors,
            ReferenceKind.EVENT: self.events,
            ReferenceKind.INTEGRATION: self.integrations,
            ReferenceKind.FLOW: self.flows,
        }[kind]

    def lookup(self, kind: ReferenceKind, name: str) -> bool:
        """Whether *name* resolves for *kind*."""
        return name in self.table(kind)

    def is_optional(self, kind: ReferenceKind) -> bool:
        return kind in self.optional

    def with_flows(self, flow_ids: Iterable[str]) -> ReferenceTables:
        return self.model_copy(update={"flows": frozenset(flow_ids)})
