"""Project loading: flow documents and lookup tables from ``specs/``.

INVARIANT: The loader only reads. It never builds graphs or judges them;
it hands raw node/connection mappings and name tables to the service
layer.

Layout::

    <project>/specs/
      **/flows/**/*.yaml      one flow per file
      schemas/*.yaml          schema names (``name:`` or file stem)
      shared/errors.yaml      ``errors:`` list of {code} / names, or a mapping
      shared/events.yaml      ``events:`` list of {name} / names, or a mapping
      integrations/*.yaml     integration names (``name:`` or file stem)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

SPECS_DIRNAME = "specs"
_YAML_SUFFIXES = (".yaml", ".yml")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlowSource:
    """One flow file after YAML parsing (before graph construction).

    ``error`` is set when the file could not be parsed into a flow
    document; ``nodes`` and ``connections`` are then empty.
    """

    path: Path
    flow_id: str
    nodes: list[dict[str, Any]] = field(default_factory=list)
    connections: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @property
    def parsed(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ProjectSource:
    """Everything read from a project's ``specs/`` directory."""

    root: Path
    flows: list[FlowSource]
    schemas: frozenset[str] = frozenset()
    errors: frozenset[str] = frozenset()
    events: frozenset[str] = frozenset()
    integrations: frozenset[str] = frozenset()


# ---------------------------------------------------------------------------
# YAML helpers
# ---------------------------------------------------------------------------


def load_yaml(path: Path) -> Any:
    """Parse one YAML file with the safe loader.

    Raises:
        YAMLError: the file is not valid YAML.
        OSError, UnicodeError: the file cannot be read.
    """
    return YAML(typ="safe").load(path.read_text(encoding="utf-8"))


def _yaml_files(directory: Path, pattern: str) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(
        {p for p in directory.glob(pattern) if p.suffix in _YAML_SUFFIXES and p.is_file()}
    )


# ---------------------------------------------------------------------------
# Flows
# ---------------------------------------------------------------------------


def find_flow_files(specs_dir: Path) -> list[Path]:
    """All flow files under any ``flows/`` directory, sorted by path."""
    return _yaml_files(specs_dir, "**/flows/**/*")


def read_flow(path: Path) -> FlowSource:
    """Read one flow document, flattening node-level connections.

    Node-level ``connections: [{targetNodeId, sourceHandle}]`` entries are
    lifted to top-level ``{from, port, to}`` mappings and appended after any
    top-level ``connections:`` the document already declares.
    """
    stem = path.stem
    try:
        doc = load_yaml(path)
    except (OSError, UnicodeError, YAMLError) as exc:
        logger.debug("Failed to parse flow %s", path, exc_info=True)
        return FlowSource(path=path, flow_id=stem, error=f"Invalid YAML: {exc}")

    if not isinstance(doc, dict):
        return FlowSource(path=path, flow_id=stem, error="Flow document must be a mapping")

    meta = doc.get("flow") or {}
    if not isinstance(meta, dict):
        return FlowSource(path=path, flow_id=stem, error="'flow' must be a mapping")
    flow_id = str(meta.get("id") or stem)

    raw_nodes = doc.get("nodes")
    if not isinstance(raw_nodes, list) or not all(isinstance(n, dict) for n in raw_nodes):
        return FlowSource(path=path, flow_id=flow_id, error="'nodes' must be a list of mappings")

    raw_connections = doc.get("connections") or []
    if not isinstance(raw_connections, list) or not all(
        isinstance(c, dict) for c in raw_connections
    ):
        return FlowSource(
            path=path, flow_id=flow_id, error="'connections' must be a list of mappings"
        )

    nodes: list[dict[str, Any]] = []
    connections: list[dict[str, Any]] = [dict(c) for c in raw_connections]
    for raw in raw_nodes:
        node = {k: v for k, v in raw.items() if k != "connections"}
        nodes.append(node)
        node_conns = raw.get("connections") or []
        if not isinstance(node_conns, list):
            return FlowSource(
                path=path,
                flow_id=flow_id,
                error=f"Node '{raw.get('id')}': 'connections' must be a list",
            )
        for conn in node_conns:
            if not isinstance(conn, dict):
                return FlowSource(
                    path=path,
                    flow_id=flow_id,
                    error=f"Node '{raw.get('id')}': connection entries must be mappings",
                )
            lifted: dict[str, Any] = {
                "from": raw.get("id"),
                "to": conn.get("targetNodeId", conn.get("to")),
            }
            handle = conn.get("sourceHandle", conn.get("port"))
            if handle is not None:
                lifted["port"] = handle
            connections.append(lifted)

    return FlowSource(path=path, flow_id=flow_id, nodes=nodes, connections=connections)


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------


def _names_from_entries(entries: Any, key: str) -> set[str]:
    """Accept a list of names, a list of ``{key: name}`` mappings, or a mapping."""
    if isinstance(entries, dict):
        return {str(k) for k in entries}
    names: set[str] = set()
    if isinstance(entries, list):
        for entry in entries:
            if isinstance(entry, dict):
                if entry.get(key) is not None:
                    names.add(str(entry[key]))
            elif entry is not None:
                names.add(str(entry))
    return names


def _read_table(path: Path, section: str, key: str) -> frozenset[str]:
    if not path.is_file():
        return frozenset()
    try:
        doc = load_yaml(path)
    except (OSError, UnicodeError, YAMLError):
        logger.warning("Skipping unreadable lookup table %s", path)
        return frozenset()
    if isinstance(doc, dict) and section in doc:
        doc = doc[section]
    return frozenset(_names_from_entries(doc, key))


def _read_named_files(paths: Iterable[Path]) -> frozenset[str]:
    """Artifact name per file: top-level ``name:`` when present, else the stem."""
    names: set[str] = set()
    for path in paths:
        name = path.stem
        try:
            doc = load_yaml(path)
        except (OSError, UnicodeError, YAMLError):
            logger.warning("Using file name for unreadable artifact %s", path)
            doc = None
        if isinstance(doc, dict) and doc.get("name"):
            name = str(doc["name"])
        names.add(name)
    return frozenset(names)


def load_project(root: Path) -> ProjectSource:
    """Read every flow and lookup table under ``root/specs``.

    Raises:
        FileNotFoundError: ``root/specs`` does not exist.
    """
    specs_dir = root / SPECS_DIRNAME
    if not specs_dir.is_dir():
        raise FileNotFoundError(f"No '{SPECS_DIRNAME}' directory under {root}")

    flows = [read_flow(p) for p in find_flow_files(specs_dir)]
    logger.debug("Loaded %d flow files from %s", len(flows), specs_dir)

    return ProjectSource(
        root=root,
        flows=flows,
        schemas=_read_named_files(_yaml_files(specs_dir / "schemas", "*")),
        errors=_read_table(specs_dir / "shared" / "errors.yaml", "errors", "code"),
        events=_read_table(specs_dir / "shared" / "events.yaml", "events", "name"),
        integrations=_read_named_files(_yaml_files(specs_dir / "integrations", "*")),
    )


def load_catalog_file(path: Path) -> dict[str, Any]:
    """Read a catalog override file (``type -> {ports, extends, dynamic}``).

    A top-level ``node_types:`` section is unwrapped when present.

    Raises:
        ValueError: the file is not valid YAML or not a mapping.
        OSError: the file cannot be read.
    """
    try:
        doc = load_yaml(path) or {}
    except YAMLError as exc:
        raise ValueError(f"Catalog file {path} is not valid YAML: {exc}") from exc
    if isinstance(doc, dict) and "node_types" in doc:
        doc = doc["node_types"] or {}
    if not isinstance(doc, dict):
        raise ValueError(f"Catalog file {path} must contain a mapping")
    return doc
