"""
Tests for Reporting Module
"""

import json
from pathlib import Path

import pytest

from conftest import make_report
from secscan.core.vulnerability import ScanReport, ScanStatus
from secscan.reporting.console import ConsoleReporter, format_duration
from secscan.reporting.formats import REPORT_FORMATS, get_renderer
from secscan.reporting.html import to_html
from secscan.reporting.json_reporter import to_json
from secscan.reporting.markdown import to_markdown


class TestMarkdownReport:
    """Tests for the markdown renderer."""

    def test_summary_section(self, sample_report: ScanReport):
        content = to_markdown(sample_report)

        assert content.startswith("# Security Scan Report")
        assert "- **Scan ID:** scan-456" in content
        assert "- **Status:** completed" in content
        assert "- **Duration:** 1.23s" in content
        assert "- **Files Scanned:** 100" in content
        assert "- Critical: 1" in content
        assert "- High: 1" in content
        assert "- **Total Vulnerabilities:** 2" in content

    def test_groups_critical_first(self, sample_report: ScanReport):
        """Test vulnerabilities are grouped by severity, most severe first."""
        content = to_markdown(sample_report)

        assert content.index("### CRITICAL (1)") < content.index("### HIGH (1)")
        assert "#### SQL Injection" in content
        assert "- **File:** src/api/users.ts" in content
        assert "- **Line:** 87:23" in content
        assert "- **CWE:** CWE-89" in content
        assert "**Remediation:** Use parameterized queries" in content

    def test_no_vulnerabilities(self):
        content = to_markdown(make_report())

        assert "## No vulnerabilities found" in content
        assert "## Vulnerabilities" not in content

    def test_failed_report_shows_error(self):
        report = make_report(status=ScanStatus.FAILED, error="Scan engine failed", scanned_files=0)

        content = to_markdown(report)

        assert "- **Status:** failed" in content
        assert "- **Error:** Scan engine failed" in content
        assert "No vulnerabilities found" not in content

    def test_incremental_scan_marked(self):
        report = make_report(incremental_scan=True, target_files=("/a.ts", "/b.ts"))

        content = to_markdown(report)

        assert "- **Type:** Incremental Scan" in content
        assert "- **Target Files:** 2" in content

    def test_configuration_block(self, sample_report: ScanReport):
        content = to_markdown(sample_report)

        assert "## Configuration" in content
        assert '"excludePaths"' in content


class TestJSONReport:
    """Tests for the JSON renderer."""

    def test_wire_keys(self, sample_report: ScanReport):
        data = json.loads(to_json(sample_report))

        assert data["scanId"] == "scan-456"
        assert data["projectPath"] == "/test/project"
        assert data["scannedFiles"] == 100
        assert data["duration"] == 1234
        assert data["status"] == "completed"
        assert data["summary"] == {"critical": 1, "high": 1, "medium": 0, "low": 0, "info": 0, "total": 2}
        assert {v["type"] for v in data["vulnerabilities"]} == {"xss", "sql-injection"}
        assert "error" not in data
        assert "incrementalScan" not in data

    def test_parses_back(self, sample_report: ScanReport):
        assert ScanReport.from_json(to_json(sample_report)) == sample_report


class TestHTMLReport:
    """Tests for the Jinja2 HTML renderer."""

    def test_renders_report(self, sample_report: ScanReport):
        content = to_html(sample_report)

        assert "<title>Security Scan Report - scan-456</title>" in content
        assert "Total Vulnerabilities:</strong> 2" in content
        assert "SQL Injection" in content
        assert "CWE-79" in content
        assert "severity-critical" in content

    def test_escapes_code(self, sample_report: ScanReport):
        """Test source snippets are HTML-escaped."""
        content = to_html(sample_report)

        assert "&lt;div dangerouslySetInnerHTML" in content
        assert "<div dangerouslySetInnerHTML" not in content

    def test_empty_report(self):
        content = to_html(make_report())
        assert "No vulnerabilities found." in content

    def test_error_shown(self):
        report = make_report(status=ScanStatus.TIMEOUT, error="Scan timeout exceeded after 5s")
        content = to_html(report)
        assert "Scan timeout exceeded after 5s" in content


class TestFormats:
    def test_known_formats(self):
        assert {fmt: ext for fmt, (ext, _) in REPORT_FORMATS.items()} == {
            "markdown": "md",
            "json": "json",
            "html": "html",
        }

    def test_unsupported_format(self):
        with pytest.raises(ValueError, match="Unsupported report format"):
            get_renderer("pdf")


class TestSaveReport:
    """Tests for SecurityScanner.save_report."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fmt,extension", [("markdown", "md"), ("json", "json"), ("html", "html")])
    async def test_writes_file(self, scanner, sample_report: ScanReport, fmt: str, extension: str):
        path = await scanner.save_report(sample_report, fmt)

        assert path.parent == scanner.output_dir
        assert path.name.startswith("scan-456_")
        assert path.suffix == f".{extension}"
        assert path.read_text(encoding="utf-8") == get_renderer(fmt)[1](sample_report)

    @pytest.mark.asyncio
    async def test_unsupported_format_writes_nothing(self, scanner, sample_report: ScanReport):
        with pytest.raises(ValueError):
            await scanner.save_report(sample_report, "pdf")
        assert not Path(scanner.output_dir).exists()


class TestConsoleReporter:
    """Tests for ConsoleReporter."""

    def test_report_summary(self, capsys, sample_report: ScanReport):
        ConsoleReporter().report(sample_report)
        output = capsys.readouterr().out

        assert "scan-456" in output
        assert "CRITICAL" in output
        assert "TOTAL" in output
        assert "Detailed Findings" not in output

    def test_verbose_report(self, capsys, sample_report: ScanReport):
        ConsoleReporter(verbose=True).report(sample_report)
        output = capsys.readouterr().out

        assert "Detailed Findings" in output
        assert "src/api/users.ts:87:23" in output

    def test_empty_scan_list(self, capsys):
        ConsoleReporter().scan_list([])
        output = capsys.readouterr().out
        assert "No recent scans found" in output

    @pytest.mark.parametrize("ms,expected", [(450, "450ms"), (1234, "1.2s"), (125000, "2m 5s")])
    def test_format_duration(self, ms: int, expected: str):
        assert format_duration(ms) == expected
