"""Exceptions raised while building catalogs and flow graphs.

Only construction raises. Once a FlowGraph exists, every problem is
reported as a Finding rather than an exception.
"""

from __future__ import annotations

from dddcheck.domain.types import FindingCode


class ParseError(ValueError):
    """A flow description cannot be turned into a FlowGraph.

    Fatal for the one flow being built; other flows continue.
    """

    code: FindingCode = FindingCode.MALFORMED_FLOW

    def __init__(self, message: str, *, node_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.node_id = node_id


class DuplicateNodeIdError(ParseError):
    code = FindingCode.DUPLICATE_NODE_ID


class UnknownNodeTypeError(ParseError):
    code = FindingCode.UNKNOWN_NODE_TYPE


class InvalidNodeSpecError(ParseError):
    code = FindingCode.INVALID_NODE_SPEC


class CatalogError(ValueError):
    """The node catalog itself is inconsistent (missing parent, extends cycle)."""
