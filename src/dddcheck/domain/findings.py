"""Finding and ValidationResult: validator output as plain data.

Findings are never raised. Both reports share the Finding shape::

    {severity, code, flowId, nodeId, message}

Ordering is stable: findings sort by flow id, then node id (flow-level
findings first), then code, then message.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field

from dddcheck.domain.types import FindingCode, Severity


class Finding(BaseModel):
    """A single validator-produced error or warning."""

    model_config = {"frozen": True}

    severity: Severity
    code: FindingCode
    flow_id: str
    node_id: str | None = None
    message: str

    @property
    def sort_key(self) -> tuple[str, str, str, str]:
        return (self.flow_id, self.node_id or "", str(self.code), self.message)

    def to_report(self) -> dict[str, Any]:
        """Camel-cased mapping used by both report shapes."""
        return {
            "severity": str(self.severity),
            "code": str(self.code),
            "flowId": self.flow_id,
            "nodeId": self.node_id,
            "message": self.message,
        }


def error(code: FindingCode, flow_id: str, message: str, node_id: str | None = None) -> Finding:
    return Finding(
        severity=Severity.ERROR, code=code, flow_id=flow_id, node_id=node_id, message=message
    )


def warning(code: FindingCode, flow_id: str, message: str, node_id: str | None = None) -> Finding:
    return Finding(
        severity=Severity.WARNING, code=code, flow_id=flow_id, node_id=node_id, message=message
    )


def sort_findings(findings: Iterable[Finding], *, dedupe: bool = True) -> list[Finding]:
    """Stable documented order; exact duplicates collapse to one unless *dedupe* is off."""
    if not dedupe:
        return sorted(findings, key=lambda f: f.sort_key + (str(f.severity),))
    unique = {f.sort_key + (str(f.severity),): f for f in findings}
    return [unique[k] for k in sorted(unique)]


class ValidationResult(BaseModel):
    """Errors block use; warnings do not."""

    model_config = {"frozen": True}

    flow_id: str
    errors: list[Finding] = Field(default_factory=list)
    warnings: list[Finding] = Field(default_factory=list)

    @classmethod
    def from_findings(cls, flow_id: str, findings: Iterable[Finding]) -> ValidationResult:
        ordered = sort_findings(findings)
        return cls(
            flow_id=flow_id,
            errors=[f for f in ordered if f.severity == Severity.ERROR],
            warnings=[f for f in ordered if f.severity == Severity.WARNING],
        )

    @property
    def ok(self) -> bool:
        return not self.errors

    def codes(self) -> list[str]:
        """All finding codes, errors first (handy in tests and logs)."""
        return [str(f.code) for f in (*self.errors, *self.warnings)]
