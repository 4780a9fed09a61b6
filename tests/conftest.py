"""Shared pytest fixtures and test helpers for dddcheck tests."""

from __future__ import annotations

import os
import textwrap
from collections.abc import Generator, Iterable, Mapping
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from dddcheck.config.settings import DddSettings
from dddcheck.domain.catalog import NodeCatalog
from dddcheck.domain.graph import FlowGraph, build
from dddcheck.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Drop DDDCHECK_* env vars and reset telemetry around every test."""
    for key in list(os.environ):
        if key.startswith("DDDCHECK_"):
            monkeypatch.delenv(key)
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def catalog() -> NodeCatalog:
    return NodeCatalog.default()


# ---------------------------------------------------------------------------
# Sample project on disk
# ---------------------------------------------------------------------------

CREATE_USER_FLOW = """\
flow:
  id: create-user
  name: Create user
  domain: users
nodes:
  - id: t1
    type: trigger
    spec:
      event: HTTP POST /api/users
    connections:
      - targetNodeId: in1
        sourceHandle: default
  - id: in1
    type: input
    spec:
      schema: User
    connections:
      - {targetNodeId: save, sourceHandle: valid}
      - {targetNodeId: bad, sourceHandle: invalid}
  - id: save
    type: data_store
    spec: {operation: create, model: User}
    connections:
      - {targetNodeId: emit, sourceHandle: success}
      - {targetNodeId: fail, sourceHandle: error}
  - id: emit
    type: event
    spec: {event: UserCreated}
    connections:
      - {targetNodeId: done}
  - id: done
    type: terminal
    spec: {status: 201}
  - id: bad
    type: terminal
    spec: {status: 400, error_code: VALIDATION_ERROR}
  - id: fail
    type: terminal
    spec: {status: 500, error_code: DB_ERROR}
"""

WELCOME_EMAIL_FLOW = """\
flow:
  id: welcome-email
  domain: users
nodes:
  - id: t1
    type: trigger
    spec: {kind: event, event: UserCreated}
    connections:
      - {targetNodeId: send}
  - id: send
    type: service_call
    spec: {integration: mailer, method: send}
    connections:
      - {targetNodeId: ok, sourceHandle: success}
      - {targetNodeId: ko, sourceHandle: error}
  - id: ok
    type: terminal
  - id: ko
    type: terminal
"""


def write_file(root: Path, relative: str, content: str) -> Path:
    """Write *content* (dedented) under *root*, creating parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def write_flow(root: Path, name: str, content: str, *, domain: str = "users") -> Path:
    return write_file(root, f"specs/domains/{domain}/flows/{name}.yaml", content)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A clean two-flow project with every referenced artifact declared."""
    write_flow(tmp_path, "create-user", CREATE_USER_FLOW)
    write_flow(tmp_path, "welcome-email", WELCOME_EMAIL_FLOW)
    write_file(tmp_path, "specs/schemas/User.yaml", "name: User\nfields: []\n")
    write_file(
        tmp_path,
        "specs/shared/errors.yaml",
        "errors:\n  - code: VALIDATION_ERROR\n  - code: DB_ERROR\n",
    )
    write_file(tmp_path, "specs/shared/events.yaml", "events:\n  - name: UserCreated\n")
    write_file(tmp_path, "specs/integrations/mailer.yaml", "name: mailer\n")
    return tmp_path


@pytest.fixture
def _in_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the sample project so the CLI discovers it.

    Use via ``@pytest.mark.usefixtures("_in_project")`` on command test
    classes.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def settings(project_root: Path) -> DddSettings:
    return DddSettings.from_cli(project_root=project_root, sync=True)


# ---------------------------------------------------------------------------
# Shared test helpers (used across domain and service test modules)
# ---------------------------------------------------------------------------


def node(node_id: str, node_type: str, **spec: Any) -> dict[str, Any]:
    """Raw node mapping as the loader would produce it."""
    raw: dict[str, Any] = {"id": node_id, "type": node_type}
    if spec:
        raw["spec"] = spec
    return raw


def conn(source: str, port: str | None, target: str) -> dict[str, Any]:
    raw: dict[str, Any] = {"from": source, "to": target}
    if port is not None:
        raw["port"] = port
    return raw


def make_graph(
    nodes: Iterable[Mapping[str, Any]],
    connections: Iterable[Mapping[str, Any]] = (),
    *,
    flow_id: str = "flow",
    catalog: NodeCatalog | None = None,
) -> FlowGraph:
    """Build a FlowGraph against the default catalog."""
    return build(flow_id, list(nodes), list(connections), catalog or NodeCatalog.default())


def linear_flow(flow_id: str, *middle: str) -> FlowGraph:
    """``trigger -> middle... -> terminal`` wired through arbitrary ports.

    Ports are not checked for coverage purposes, so each hop uses the
    first contract port of its source type (or ``default``).
    """
    catalog = NodeCatalog.default()
    ids = ["t", *(f"n{i}" for i in range(len(middle))), "end"]
    types = ["trigger", *middle, "terminal"]
    nodes = [node(i, t) for i, t in zip(ids, types, strict=True)]
    nodes[0]["spec"] = {"kind": "http"}
    connections = []
    for i in range(len(ids) - 1):
        ports = catalog.contract(types[i]).ports
        connections.append(conn(ids[i], ports[0] if ports else "default", ids[i + 1]))
    return make_graph(nodes, connections, flow_id=flow_id)


def ladder_flow(levels: int, *, flow_id: str = "ladder") -> FlowGraph:
    """Decision ladder whose last level jumps back to the top.

    Level 0 holds ``a00``; every later level holds ``a<i>`` and ``b<i>``.
    Both ports of each decision feed both nodes of the next level, so the
    back edge closes ``2 ** (levels - 1)`` distinct simple cycles, all in
    one strongly connected component.
    """
    nodes = [node("t", "trigger", kind="http"), node("a00", "decision"), node("end", "terminal")]
    connections = [conn("t", "default", "a00")]
    previous = ["a00"]
    for level in range(1, levels):
        current = [f"a{level:02d}", f"b{level:02d}"]
        nodes.extend(node(n, "decision") for n in current)
        for source in previous:
            connections.append(conn(source, "true", current[0]))
            connections.append(conn(source, "false", current[1]))
        previous = current
    for source in previous:
        connections.append(conn(source, "true", "a00"))
        connections.append(conn(source, "false", "end"))
    return make_graph(nodes, connections, flow_id=flow_id)
