"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, dddcheck.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dddcheck.domain.catalog import DEFAULT_TRIGGER_KINDS
from dddcheck.domain.types import ReferenceKind


class ValidatorConfig(BaseModel):
    """[validator] section."""

    model_config = {"frozen": True}

    max_workers: int = Field(default=4, ge=1)
    sync: bool = False


class ScoringConfig(BaseModel):
    """[scoring] section.

    Deduction weights and label thresholds are illustrative defaults,
    not load-bearing constants.
    """

    model_config = {"frozen": True}

    error_weight: int = Field(default=2, ge=0)
    warning_weight: int = Field(default=1, ge=0)
    excellent: int = 95
    good: int = 80
    fair: int = 60


class CatalogConfig(BaseModel):
    """[catalog] section.

    ``path`` points at a YAML file of extra or replacement node types,
    resolved relative to the project root.
    """

    model_config = {"frozen": True}

    path: str | None = None
    trigger_kinds: list[str] = Field(default_factory=lambda: list(DEFAULT_TRIGGER_KINDS))


class ReferencesConfig(BaseModel):
    """[references] section: reference kinds whose misses are only warnings."""

    model_config = {"frozen": True}

    optional: list[ReferenceKind] = Field(default_factory=list)


class ReportsConfig(BaseModel):
    """[reports] section."""

    model_config = {"frozen": True}

    output_dir: str = "reports"
    compatibility_file: str = "tool-compatibility-report.yaml"
    quality_file: str = "spec-quality-report.yaml"


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True

