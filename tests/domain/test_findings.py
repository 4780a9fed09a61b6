"""Tests for Finding ordering and ValidationResult."""

from __future__ import annotations

import pytest

from dddcheck.domain.findings import Finding, ValidationResult, error, sort_findings, warning
from dddcheck.domain.types import FindingCode, Severity


def test_to_report_shape() -> None:
    f = error(FindingCode.UNWIRED_PORT, "flow-a", "Port 'x' is not connected", node_id="n1")
    assert f.to_report() == {
        "severity": "error",
        "code": "UNWIRED_PORT",
        "flowId": "flow-a",
        "nodeId": "n1",
        "message": "Port 'x' is not connected",
    }


def test_flow_level_finding_has_null_node() -> None:
    f = warning(FindingCode.DUPLICATE_FLOW_ID, "flow-a", "dup")
    assert f.severity == Severity.WARNING
    assert f.to_report()["nodeId"] is None


def test_sort_by_flow_node_code_message() -> None:
    findings = [
        error(FindingCode.UNWIRED_PORT, "b", "m", node_id="n1"),
        error(FindingCode.ORPHAN_NODE, "a", "m", node_id="n2"),
        error(FindingCode.DEAD_END, "a", "m", node_id="n2"),
        error(FindingCode.TRIGGER_CARDINALITY, "a", "m"),
    ]
    ordered = sort_findings(findings)
    assert [(f.flow_id, f.node_id, str(f.code)) for f in ordered] == [
        ("a", None, "TRIGGER_CARDINALITY"),
        ("a", "n2", "DEAD_END"),
        ("a", "n2", "ORPHAN_NODE"),
        ("b", "n1", "UNWIRED_PORT"),
    ]


def test_sort_is_input_order_independent() -> None:
    findings = [
        error(FindingCode.UNKNOWN_PORT, "f", "port b", node_id="x"),
        error(FindingCode.UNKNOWN_PORT, "f", "port a", node_id="x"),
        warning(FindingCode.UNGUARDED_CYCLE, "f", "cycle", node_id="a"),
    ]
    assert sort_findings(findings) == sort_findings(reversed(findings))


def test_exact_duplicates_collapse() -> None:
    f = error(FindingCode.ORPHAN_NODE, "f", "m", node_id="n")
    assert sort_findings([f, f]) == [f]


def test_duplicates_kept_when_not_deduping() -> None:
    f = error(FindingCode.ORPHAN_NODE, "f", "m", node_id="n")
    g = error(FindingCode.ORPHAN_NODE, "e", "m", node_id="n")
    assert sort_findings([f, g, f], dedupe=False) == [g, f, f]


class TestValidationResult:
    def test_splits_by_severity(self) -> None:
        result = ValidationResult.from_findings(
            "f",
            [
                warning(FindingCode.UNKNOWN_TRIGGER_KIND, "f", "w", node_id="t"),
                error(FindingCode.ORPHAN_NODE, "f", "e", node_id="n"),
            ],
        )
        assert [f.code for f in result.errors] == [FindingCode.ORPHAN_NODE]
        assert [f.code for f in result.warnings] == [FindingCode.UNKNOWN_TRIGGER_KIND]
        assert not result.ok
        assert result.codes() == ["ORPHAN_NODE", "UNKNOWN_TRIGGER_KIND"]

    def test_empty_is_ok(self) -> None:
        assert ValidationResult(flow_id="f").ok

    def test_findings_are_frozen(self) -> None:
        f: Finding = error(FindingCode.ORPHAN_NODE, "f", "m")
        with pytest.raises(Exception):
            f.message = "changed"  # type: ignore[misc]
