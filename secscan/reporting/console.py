"""
SecScan Console Reporter

Colored terminal output for scan reports, scan listings and statistics.
"""

from __future__ import annotations

import sys
from typing import Optional, Sequence

import click

from secscan import __version__
from secscan.core.statistics import SummaryStatistics
from secscan.core.vulnerability import SEVERITIES_DESC, ScanReport, Severity
from secscan.storage.reports import StorageStatistics


def _safe_echo(text: str = "", **kwargs) -> None:
    """Echo text, handling Unicode issues on Windows consoles."""
    try:
        click.echo(text, **kwargs)
    except UnicodeEncodeError:
        safe = text.encode(sys.stdout.encoding or "utf-8", errors="replace").decode(
            sys.stdout.encoding or "utf-8", errors="replace"
        )
        click.echo(safe, **kwargs)


# Severity colors
SEVERITY_COLORS = {
    Severity.CRITICAL: "bright_red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
    Severity.INFO: "white",
}


def format_duration(ms: int) -> str:
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60000:
        return f"{ms / 1000:.1f}s"
    return f"{ms // 60000}m {(ms % 60000) // 1000}s"


class ConsoleReporter:
    """Prints scan reports and history to the console."""

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    def report(self, report: ScanReport) -> None:
        self._print_header(report)
        self._print_severity_summary(report)

        if self.verbose and report.vulnerabilities:
            self._print_detailed_findings(report)

    def _print_header(self, report: ScanReport) -> None:
        _safe_echo("")
        _safe_echo(click.style("=" * 55, fg="bright_blue"))
        _safe_echo(click.style("  SecScan Security Scan Report", fg="bright_white", bold=True))
        _safe_echo(click.style(f"  Version: {__version__}", fg="white"))
        _safe_echo(click.style(f"  Target: {report.project_path}", fg="white"))
        _safe_echo(click.style("=" * 55, fg="bright_blue"))
        _safe_echo(click.style(f"  Scan ID: {report.scan_id}", fg="bright_black"))
        _safe_echo(click.style(f"  Timestamp: {report.timestamp:%Y-%m-%d %H:%M:%S %Z}", fg="bright_black"))
        _safe_echo(click.style(f"  Duration: {format_duration(report.duration)}", fg="bright_black"))
        _safe_echo(click.style(f"  Files Scanned: {report.scanned_files}", fg="bright_black"))

        if not report.completed:
            _safe_echo(click.style(f"  Status: {report.status.value}", fg="red"))
            _safe_echo(click.style(f"  Error: {report.error}", fg="red"))

    def _print_severity_summary(self, report: ScanReport) -> None:
        _safe_echo("")
        _safe_echo(click.style("  Vulnerability Summary:", fg="bright_white", bold=True))
        for sev in SEVERITIES_DESC:
            _safe_echo(
                click.style(f"     {sev.value.upper():10s}: ", fg=SEVERITY_COLORS[sev])
                + click.style(str(report.summary.count(sev)), fg="white")
            )
        _safe_echo(click.style(f"     {'TOTAL':10s}: {report.summary.total}", bold=True))

    def _print_detailed_findings(self, report: ScanReport) -> None:
        _safe_echo("")
        _safe_echo(click.style("  Detailed Findings:", fg="bright_white", bold=True))
        _safe_echo(click.style("-" * 55, fg="bright_black"))

        for sev in SEVERITIES_DESC:
            vulns = [v for v in report.vulnerabilities if v.severity is sev]
            if not vulns:
                continue
            color = SEVERITY_COLORS[sev]
            _safe_echo("")
            _safe_echo(click.style(f"  {sev.value.upper()} ({len(vulns)})", fg=color, bold=True))

            for idx, vuln in enumerate(vulns, start=1):
                _safe_echo("")
                _safe_echo(click.style(f"  {idx}. ", fg="white") + click.style(vuln.title, fg="bright_white"))
                _safe_echo(click.style(f"      Type: {vuln.type.value}", fg="bright_black"))
                _safe_echo(click.style(f"      Location: {vuln.file}:{vuln.line}:{vuln.column}", fg="bright_black"))
                _safe_echo(click.style(f"      {vuln.description}", fg="white"))
                if vuln.cwe:
                    _safe_echo(click.style(f"      CWE: {vuln.cwe}", fg="bright_black"))
                if vuln.owasp:
                    _safe_echo(click.style(f"      OWASP: {vuln.owasp}", fg="bright_black"))
                _safe_echo(click.style(f"      Code: {vuln.code[:80]}", dim=True))
                _safe_echo(click.style(f"      Fix: {vuln.remediation}", fg="green"))

    def scan_list(self, reports: Sequence[ScanReport]) -> None:
        if not reports:
            _safe_echo(click.style("  No recent scans found", fg="yellow"))
            return

        _safe_echo(click.style(f"  Recent Security Scans ({len(reports)}):", bold=True))
        for report in reports:
            status_color = "green" if report.completed else "red"
            _safe_echo("")
            _safe_echo(click.style(f"  {report.scan_id}", fg="cyan"))
            _safe_echo(f"    Date: {report.timestamp:%Y-%m-%d %H:%M:%S %Z}")
            _safe_echo("    Status: " + click.style(report.status.value, fg=status_color))
            _safe_echo(f"    Files: {report.scanned_files}")
            _safe_echo(
                "    Vulnerabilities: "
                + click.style(f"{report.summary.critical} critical", fg=SEVERITY_COLORS[Severity.CRITICAL])
                + ", "
                + click.style(f"{report.summary.high} high", fg=SEVERITY_COLORS[Severity.HIGH])
                + ", "
                + click.style(f"{report.summary.medium} medium", fg=SEVERITY_COLORS[Severity.MEDIUM])
            )

    def statistics(
        self,
        stats: SummaryStatistics,
        storage: Optional[StorageStatistics] = None,
        trend: Optional[float] = None,
    ) -> None:
        _safe_echo(click.style("  Security Scan Statistics", bold=True))
        _safe_echo("")
        _safe_echo(f"  Total Scans: {stats.total_scans}")
        _safe_echo(f"  Total Vulnerabilities: {stats.total_vulnerabilities}")
        _safe_echo(f"  Average per Scan: {stats.average_vulnerabilities_per_scan:.1f}")
        _safe_echo("")
        _safe_echo("  Severity Breakdown:")
        for sev in SEVERITIES_DESC:
            _safe_echo(
                click.style(
                    f"    {sev.value.capitalize()}: {stats.severity_breakdown[sev.value]}",
                    fg=SEVERITY_COLORS[sev],
                )
            )

        if storage is not None and storage.total_scans:
            _safe_echo("")
            _safe_echo("  Storage:")
            _safe_echo(f"    Stored Reports: {storage.total_scans}")
            _safe_echo(f"    Last 24h: {storage.recent_scans}")
            if storage.oldest_scan:
                _safe_echo(f"    Oldest: {storage.oldest_scan:%Y-%m-%d %H:%M:%S %Z}")
            if storage.newest_scan:
                _safe_echo(f"    Newest: {storage.newest_scan:%Y-%m-%d %H:%M:%S %Z}")

        if trend is not None:
            _safe_echo("")
            _safe_echo("  Trend Analysis:")
            if trend < 0:
                _safe_echo(click.style(f"    Vulnerabilities decreasing ({abs(trend):.1f} per scan)", fg="green"))
            elif trend > 0:
                _safe_echo(click.style(f"    Vulnerabilities increasing ({trend:.1f} per scan)", fg="red"))
            else:
                _safe_echo(click.style("    Vulnerabilities stable", fg="bright_black"))
