"""
Tests for the vulnerability and report models
"""

import json
from datetime import datetime, timezone

import pytest

from conftest import make_report, make_vulnerability
from secscan.core.config import ScanConfig
from secscan.core.errors import ReportParseError
from secscan.core.statistics import generate_summary_statistics, trend
from secscan.core.vulnerability import (
    ScanReport,
    ScanStatus,
    ScanSummary,
    Severity,
    Vulnerability,
    VulnerabilityType,
    aggregate,
    new_scan_id,
)


class TestSeverity:
    """Tests for Severity enum."""

    def test_severity_ordering(self):
        """Test severity comparison operators."""
        assert Severity.CRITICAL > Severity.HIGH
        assert Severity.HIGH > Severity.MEDIUM
        assert Severity.MEDIUM > Severity.LOW
        assert Severity.LOW > Severity.INFO
        assert Severity.LOW >= Severity.LOW
        assert Severity.INFO < Severity.CRITICAL

    def test_severity_from_string(self):
        """Test parsing severity from string."""
        assert Severity.from_string("critical") == Severity.CRITICAL
        assert Severity.from_string("HIGH") == Severity.HIGH
        assert Severity.from_string("Medium") == Severity.MEDIUM

    def test_severity_from_unknown_string(self):
        with pytest.raises(KeyError):
            Severity.from_string("urgent")


class TestAggregate:
    def test_empty(self):
        assert aggregate([]) == ScanSummary()

    def test_counts_each_severity(self):
        vulns = [
            make_vulnerability(Severity.CRITICAL),
            make_vulnerability(Severity.CRITICAL),
            make_vulnerability(Severity.HIGH),
            make_vulnerability(Severity.LOW),
            make_vulnerability(Severity.INFO),
        ]

        summary = aggregate(vulns)

        assert summary == ScanSummary(critical=2, high=1, medium=0, low=1, info=1, total=5)

    def test_at_or_above(self):
        summary = ScanSummary(critical=1, high=2, medium=3, low=4, info=5, total=15)

        assert summary.at_or_above(Severity.CRITICAL) == 1
        assert summary.at_or_above(Severity.HIGH) == 3
        assert summary.at_or_above(Severity.LOW) == 10
        assert summary.at_or_above(Severity.INFO) == 15


class TestVulnerability:
    def test_to_dict_omits_missing_references(self):
        vuln = make_vulnerability(cwe=None, owasp=None)
        data = vuln.to_dict()

        assert "cwe" not in data
        assert "owasp" not in data
        assert data["type"] == "xss"
        assert data["severity"] == "high"

    def test_from_dict(self, sample_vulnerability: Vulnerability):
        assert Vulnerability.from_dict(sample_vulnerability.to_dict()) == sample_vulnerability

    def test_display(self, sample_vulnerability: Vulnerability):
        text = sample_vulnerability.display()

        assert "[HIGH] Cross-Site Scripting (XSS)" in text
        assert "src/components/UserProfile.tsx:42:15" in text
        assert "CWE: CWE-79" in text


class TestScanReport:
    """Tests for ScanReport."""

    def test_completed_report_cannot_carry_error(self):
        with pytest.raises(ValueError):
            make_report(error="boom")

    def test_failed_report_needs_error(self):
        with pytest.raises(ValueError):
            make_report(status=ScanStatus.FAILED)

    def test_terminal_report(self):
        report = ScanReport.terminal("/test/project", ScanStatus.TIMEOUT, "Scan timeout exceeded after 1s", duration=1000)

        assert report.status is ScanStatus.TIMEOUT
        assert report.vulnerabilities == ()
        assert report.summary == ScanSummary()
        assert report.scanned_files == 0
        assert report.incremental_scan is None
        assert report.target_files is None

    def test_terminal_incremental_report(self):
        report = ScanReport.terminal("/p", ScanStatus.FAILED, "boom", target_files=["/a.ts"])

        assert report.incremental_scan is True
        assert report.target_files == ("/a.ts",)

    def test_scan_ids_unique(self):
        ids = {new_scan_id() for _ in range(100)}
        assert len(ids) == 100
        assert all(scan_id.startswith("scan-") for scan_id in ids)

    def test_json_roundtrip_with_all_fields(self, sample_report: ScanReport):
        report = make_report(
            vulnerabilities=sample_report.vulnerabilities,
            incremental_scan=True,
            target_files=("/a.ts",),
            config=ScanConfig(severity_threshold="high", enabled_checks=["xss"]),
        )

        assert ScanReport.from_json(report.to_json()) == report

    def test_reads_javascript_timestamps(self):
        data = json.loads(make_report().to_json())
        data["timestamp"] = "2024-01-15T10:30:00.000Z"

        report = ScanReport.from_dict(data)

        assert report.timestamp == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "text",
        [
            "{ invalid json",
            "[]",
            '{"scanId": "scan-1"}',
            '{"scanId": "s", "timestamp": "yesterday", "projectPath": "/p", "status": "completed"}',
            '{"scanId": "s", "timestamp": "2024-01-01T00:00:00", "projectPath": "/p", "status": "paused"}',
            '{"scanId": "s", "timestamp": 1717243200, "projectPath": "/p", "status": "completed"}',
            '{"scanId": "s", "timestamp": "2024-01-01T00:00:00", "projectPath": "/p", "status": "completed", "summary": null}',
        ],
    )
    def test_malformed_json(self, text: str):
        with pytest.raises(ReportParseError):
            ScanReport.from_json(text)


class TestStatistics:
    def test_empty(self):
        stats = generate_summary_statistics([])

        assert stats.total_scans == 0
        assert stats.total_vulnerabilities == 0
        assert stats.average_vulnerabilities_per_scan == 0.0

    def test_trend(self):
        newer = [make_report(summary=ScanSummary(low=1, total=1)) for _ in range(10)]
        older = [make_report(summary=ScanSummary(low=3, total=3)) for _ in range(10)]

        assert trend(newer + older) == -2
        assert trend(newer) is None
