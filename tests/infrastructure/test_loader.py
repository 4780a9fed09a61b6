"""Tests for project loading: flow documents, lookup tables, catalog files."""

from pathlib import Path

import pytest

from dddcheck.infrastructure.loader import (
    find_flow_files,
    load_catalog_file,
    load_project,
    read_flow,
)
from tests.conftest import write_file, write_flow


class TestReadFlow:
    def test_lifts_node_connections(self, project_root: Path) -> None:
        source = read_flow(project_root / "specs/domains/users/flows/create-user.yaml")
        assert source.parsed
        assert source.flow_id == "create-user"
        ids = [n["id"] for n in source.nodes]
        assert ids == ["t1", "in1", "save", "emit", "done", "bad", "fail"]
        assert all("connections" not in n for n in source.nodes)
        assert source.connections[0] == {"from": "t1", "to": "in1", "port": "default"}
        # no sourceHandle -> no port key
        assert {"from": "emit", "to": "done"} in source.connections

    def test_top_level_connections_come_first(self, tmp_path: Path) -> None:
        path = write_file(
            tmp_path,
            "f.yaml",
            """\
            flow: {id: f}
            nodes:
              - id: a
                type: trigger
                connections: [{targetNodeId: c}]
              - id: b
                type: terminal
              - id: c
                type: terminal
            connections:
              - {from: a, port: default, to: b}
            """,
        )
        source = read_flow(path)
        assert source.connections == [
            {"from": "a", "port": "default", "to": "b"},
            {"from": "a", "to": "c"},
        ]

    def test_flow_id_falls_back_to_stem(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, "unnamed.yaml", "nodes: []\n")
        source = read_flow(path)
        assert source.parsed
        assert source.flow_id == "unnamed"

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, "bad.yaml", "nodes: [\n")
        source = read_flow(path)
        assert not source.parsed
        assert source.flow_id == "bad"
        assert source.error is not None
        assert source.error.startswith("Invalid YAML")
        assert source.nodes == []

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ("- a\n- b\n", "Flow document must be a mapping"),
            ("flow: [x]\nnodes: []\n", "'flow' must be a mapping"),
            ("flow: {id: x}\nnodes: {a: 1}\n", "'nodes' must be a list of mappings"),
            ("flow: {id: x}\nnodes: []\nconnections: [1]\n", "'connections' must be a list"),
            (
                "flow: {id: x}\nnodes:\n  - {id: a, type: trigger, connections: 3}\n",
                "Node 'a': 'connections' must be a list",
            ),
        ],
    )
    def test_shape_errors(self, tmp_path: Path, content: str, message: str) -> None:
        source = read_flow(write_file(tmp_path, "x.yaml", content))
        assert not source.parsed
        assert source.error is not None
        assert source.error.startswith(message)


class TestLoadProject:
    def test_missing_specs_dir(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="specs"):
            load_project(tmp_path)

    def test_lookup_tables(self, project_root: Path) -> None:
        project = load_project(project_root)
        assert project.root == project_root
        assert [f.flow_id for f in project.flows] == ["create-user", "welcome-email"]
        assert project.schemas == frozenset({"User"})
        assert project.errors == frozenset({"VALIDATION_ERROR", "DB_ERROR"})
        assert project.events == frozenset({"UserCreated"})
        assert project.integrations == frozenset({"mailer"})

    def test_table_shapes(self, tmp_path: Path) -> None:
        write_file(
            tmp_path, "specs/shared/errors.yaml", "errors:\n  NOT_FOUND: {}\n  CONFLICT: {}\n"
        )
        write_file(tmp_path, "specs/shared/events.yaml", "- OrderPlaced\n- name: OrderShipped\n")
        write_file(tmp_path, "specs/schemas/Order.yaml", "fields: []\n")
        project = load_project(tmp_path)
        assert project.errors == frozenset({"NOT_FOUND", "CONFLICT"})
        assert project.events == frozenset({"OrderPlaced", "OrderShipped"})
        assert project.schemas == frozenset({"Order"})
        assert project.flows == []

    def test_unreadable_table_is_skipped(self, tmp_path: Path) -> None:
        write_file(tmp_path, "specs/shared/events.yaml", "events: [\n")
        project = load_project(tmp_path)
        assert project.events == frozenset()

    def test_flow_discovery(self, tmp_path: Path) -> None:
        write_flow(tmp_path, "b", "nodes: []\n", domain="zeta")
        write_flow(tmp_path, "a", "nodes: []\n", domain="alpha")
        write_file(tmp_path, "specs/domains/alpha/flows/nested/c.yml", "nodes: []\n")
        write_file(tmp_path, "specs/domains/alpha/flows/readme.md", "not a flow\n")
        write_file(tmp_path, "specs/domains/alpha/domain.yaml", "name: alpha\n")
        files = find_flow_files(tmp_path / "specs")
        assert [p.relative_to(tmp_path / "specs").as_posix() for p in files] == [
            "domains/alpha/flows/a.yaml",
            "domains/alpha/flows/nested/c.yml",
            "domains/zeta/flows/b.yaml",
        ]


class TestLoadCatalogFile:
    def test_plain_mapping(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, "catalog.yaml", "webhook_out:\n  ports: [delivered, failed]\n")
        assert load_catalog_file(path) == {"webhook_out": {"ports": ["delivered", "failed"]}}

    def test_node_types_section_unwrapped(self, tmp_path: Path) -> None:
        path = write_file(
            tmp_path, "catalog.yaml", "node_types:\n  approval: {extends: human_gate}\n"
        )
        assert load_catalog_file(path) == {"approval": {"extends": "human_gate"}}

    def test_empty_file(self, tmp_path: Path) -> None:
        assert load_catalog_file(write_file(tmp_path, "catalog.yaml", "")) == {}

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, "catalog.yaml", "- a\n- b\n")
        with pytest.raises(ValueError, match="must contain a mapping"):
            load_catalog_file(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = write_file(tmp_path, "catalog.yaml", "a: [\n")
        with pytest.raises(ValueError, match="not valid YAML"):
            load_catalog_file(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            load_catalog_file(tmp_path / "nope.yaml")
