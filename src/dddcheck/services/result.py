"""ServiceResult and ServiceError: what every service operation returns.

INVARIANT: Project-level operations (validate, report, catalog) return a
ServiceResult. Malformed specs are findings inside ``data``; only
conditions that stop the whole run (no ``specs/`` directory, broken
catalog) set ``ok=False``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Why an operation could not run at all."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Envelope consumed by the CLI renderers and ``--json`` output.

    Attributes:
        ok: Whether the operation ran (not whether the specs are clean).
        op: Operation name (``"validate"``, ``"report"``, ``"catalog"``).
        data: Operation payload.
        warnings: Run-level notes (plugin failures, skipped files).
        error: Set when ``ok`` is False.
        meta: Timing spans in verbose mode.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
