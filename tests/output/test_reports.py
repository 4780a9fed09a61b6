"""Tests for the YAML report emitter."""

from pathlib import Path

import pytest
from ruamel.yaml import YAML

from dddcheck.config.models import ReportsConfig
from dddcheck.output.reports import (
    FULLY_COMPATIBLE,
    INCOMPATIBLE,
    PARTIALLY_COMPATIBLE,
    compatibility_report,
    compatibility_status,
    dump_yaml,
    quality_report,
    write_reports,
)


def _payload(**overrides: object) -> dict:
    data: dict = {
        "files": {
            "total": 3,
            "parsed_ok": 2,
            "parsed_failed": 1,
            "normalized_ok": 2,
            "normalized_failed": 0,
        },
        "coverage": {
            "node_type_coverage": "15/28",
            "node_coverage_pct": 54,
            "trigger_type_coverage": "2/8",
            "trigger_coverage_pct": 25,
        },
        "score_pct": 97,
        "quality_label": "EXCELLENT",
        "errors": [
            {
                "severity": "error",
                "code": "MALFORMED_FLOW",
                "flowId": "broken",
                "nodeId": None,
                "message": "Invalid YAML",
            }
        ],
        "warnings": [
            {
                "severity": "warning",
                "code": "UNCONSUMED_EVENT",
                "flowId": "checkout",
                "nodeId": "emit",
                "message": "Event OrderPlaced is emitted but no flow consumes it",
            }
        ],
    }
    data.update(overrides)
    return data


def _load(text: str) -> dict:
    return YAML(typ="safe").load(text)


class TestCompatibilityStatus:
    @pytest.mark.parametrize(
        ("total", "normalized_ok", "expected"),
        [
            (3, 3, FULLY_COMPATIBLE),
            (3, 2, PARTIALLY_COMPATIBLE),
            (3, 0, INCOMPATIBLE),
            (0, 0, INCOMPATIBLE),
        ],
    )
    def test_status(self, total: int, normalized_ok: int, expected: str) -> None:
        assert compatibility_status(total, normalized_ok) == expected


class TestCompatibilityReport:
    def test_keys_in_order(self) -> None:
        report = compatibility_report(_payload())
        assert list(report) == [
            "totalFiles",
            "parsedOk",
            "parsedFailed",
            "normalizedOk",
            "normalizedFailed",
            "nodeTypeCoverage",
            "compatibility",
        ]

    def test_values(self) -> None:
        report = compatibility_report(_payload())
        assert report["totalFiles"] == 3
        assert report["parsedFailed"] == 1
        assert report["nodeTypeCoverage"] == "15/28"
        assert report["compatibility"] == PARTIALLY_COMPATIBLE

    def test_empty_payload(self) -> None:
        report = compatibility_report({})
        assert report["totalFiles"] == 0
        assert report["nodeTypeCoverage"] == "0/0"
        assert report["compatibility"] == INCOMPATIBLE


class TestQualityReport:
    def test_keys_in_order(self) -> None:
        assert list(quality_report(_payload())) == [
            "scorePct",
            "qualityLabel",
            "nodeTypeCoveragePct",
            "triggerTypeCoveragePct",
            "errors",
            "warnings",
        ]

    def test_values(self) -> None:
        report = quality_report(_payload())
        assert report["scorePct"] == 97
        assert report["qualityLabel"] == "EXCELLENT"
        assert report["nodeTypeCoveragePct"] == 54
        assert report["triggerTypeCoveragePct"] == 25
        assert [f["code"] for f in report["errors"]] == ["MALFORMED_FLOW"]
        assert report["warnings"][0]["nodeId"] == "emit"

    def test_findings_are_copies(self) -> None:
        payload = _payload()
        report = quality_report(payload)
        report["errors"][0]["message"] = "changed"
        assert payload["errors"][0]["message"] == "Invalid YAML"


class TestDumpYaml:
    def test_key_order_preserved(self) -> None:
        text = dump_yaml(compatibility_report(_payload()))
        keys = [line.split(":")[0] for line in text.splitlines()]
        assert keys == list(compatibility_report(_payload()))

    def test_null_node_id(self) -> None:
        text = dump_yaml(quality_report(_payload()))
        assert "nodeId: null" in text
        assert _load(text)["errors"][0]["nodeId"] is None

    def test_finding_layout(self) -> None:
        text = dump_yaml(quality_report(_payload()))
        assert "errors:\n  - severity: error\n    code: MALFORMED_FLOW\n" in text

    def test_round_trips_through_safe_loader(self) -> None:
        report = quality_report(_payload())
        assert _load(dump_yaml(report)) == report

    def test_deterministic(self) -> None:
        assert dump_yaml(quality_report(_payload())) == dump_yaml(quality_report(_payload()))


class TestWriteReports:
    def test_writes_both_files(self, tmp_path: Path) -> None:
        out = tmp_path / "nested" / "reports"
        written = write_reports(_payload(), out, ReportsConfig())
        assert [p.name for p in written] == [
            "tool-compatibility-report.yaml",
            "spec-quality-report.yaml",
        ]
        assert all(p.parent == out for p in written)
        compat = _load(written[0].read_text(encoding="utf-8"))
        assert compat["compatibility"] == PARTIALLY_COMPATIBLE
        quality = _load(written[1].read_text(encoding="utf-8"))
        assert quality["scorePct"] == 97

    def test_custom_file_names(self, tmp_path: Path) -> None:
        config = ReportsConfig(compatibility_file="compat.yml", quality_file="quality.yml")
        written = write_reports(_payload(), tmp_path, config)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["compat.yml", "quality.yml"]
        assert len(written) == 2

    def test_rewrite_is_byte_identical(self, tmp_path: Path) -> None:
        first = [p.read_bytes() for p in write_reports(_payload(), tmp_path, ReportsConfig())]
        second = [p.read_bytes() for p in write_reports(_payload(), tmp_path, ReportsConfig())]
        assert first == second
