"""Unified settings: CLI flags, env vars and ``dddcheck.toml`` in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``DDDCHECK_*`` prefix, ``__`` for nested sections
  3. TOML file: ``dddcheck.toml`` found by walk-up discovery or ``--config``
  4. Code defaults baked into the section models
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    TomlConfigSettingsSource,
)

from dddcheck.config.discovery import find_config
from dddcheck.config.models import (
    CatalogConfig,
    PluginsConfig,
    ReferencesConfig,
    ReportsConfig,
    ScoringConfig,
    ValidatorConfig,
)

# pydantic calls settings_customise_sources as a classmethod while
# constructing, so the chosen TOML file travels through a context var.
_toml_file: ContextVar[Path | None] = ContextVar("dddcheck_toml_file", default=None)


class DddSettings(BaseSettings):
    """Frozen settings for one dddcheck invocation.

    Attributes:
        project_root: Directory holding ``specs/`` (parent of the config
            file, or CWD when no config is found).
        config_path: The TOML file actually used, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DDDCHECK_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    sync: bool = False

    # --- TOML sections ---
    validator: ValidatorConfig = Field(default_factory=ValidatorConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    references: ReferencesConfig = Field(default_factory=ReferencesConfig)
    reports: ReportsConfig = Field(default_factory=ReportsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        toml_file = _toml_file.get()
        if toml_file is not None:
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_file))
        return tuple(sources)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> DddSettings:
        """Build settings from CLI flags plus discovered config.

        An explicit *config_path* that does not exist is ignored, the same
        as walk-up discovery finding nothing.

        Raises:
            click.ClickException: the TOML file does not parse.
        """
        if config_path:
            candidate = Path(config_path)
            toml_path = candidate if candidate.is_file() else None
        else:
            toml_path = find_config(project_root)

        if project_root is None:
            project_root = toml_path.parent if toml_path else Path.cwd()

        token = _toml_file.set(toml_path)
        try:
            return cls(project_root=project_root, config_path=toml_path, **cli_flags)
        except tomllib.TOMLDecodeError as exc:
            raise click.ClickException(f"Invalid TOML in {toml_path}: {exc}") from exc
        finally:
            _toml_file.reset(token)

    @property
    def effective_sync(self) -> bool:
        """``--sync`` or ``[validator] sync`` forces sequential validation."""
        return self.sync or self.validator.sync
