"""
SecScan Markdown Reporter

Human-readable report for pull requests and wikis, vulnerabilities
grouped by severity (critical first).
"""

from __future__ import annotations

import json

from secscan.core.vulnerability import SEVERITIES_DESC, ScanReport, Vulnerability


def _vulnerability_section(vuln: Vulnerability) -> list[str]:
    lines = [
        f"#### {vuln.title}",
        "",
        f"- **ID:** {vuln.id}",
        f"- **Type:** {vuln.type.value}",
        f"- **Severity:** {vuln.severity.value}",
        f"- **File:** {vuln.file}",
        f"- **Line:** {vuln.line}:{vuln.column}",
    ]
    if vuln.cwe:
        lines.append(f"- **CWE:** {vuln.cwe}")
    if vuln.owasp:
        lines.append(f"- **OWASP:** {vuln.owasp}")
    lines += [
        "",
        f"**Description:** {vuln.description}",
        "",
        "**Code:**",
        "```",
        vuln.code,
        "```",
        "",
        f"**Remediation:** {vuln.remediation}",
        "",
        "---",
        "",
    ]
    return lines


def to_markdown(report: ScanReport) -> str:
    summary = report.summary
    lines = [
        "# Security Scan Report",
        "",
        "## Summary",
        "",
        f"- **Scan ID:** {report.scan_id}",
        f"- **Timestamp:** {report.timestamp.isoformat()}",
        f"- **Project Path:** {report.project_path}",
        f"- **Status:** {report.status.value}",
        f"- **Duration:** {report.duration / 1000:.2f}s",
        f"- **Files Scanned:** {report.scanned_files}",
    ]
    if report.incremental_scan:
        lines.append("- **Type:** Incremental Scan")
        if report.target_files is not None:
            lines.append(f"- **Target Files:** {len(report.target_files)}")
    if report.error:
        lines.append(f"- **Error:** {report.error}")

    lines += [
        "",
        "## Vulnerability Summary",
        "",
        f"- Critical: {summary.critical}",
        f"- High: {summary.high}",
        f"- Medium: {summary.medium}",
        f"- Low: {summary.low}",
        f"- Info: {summary.info}",
        f"- **Total Vulnerabilities:** {summary.total}",
        "",
    ]

    if report.vulnerabilities:
        lines += ["## Vulnerabilities", ""]
        for severity in SEVERITIES_DESC:
            vulns = [v for v in report.vulnerabilities if v.severity is severity]
            if not vulns:
                continue
            lines += [f"### {severity.value.upper()} ({len(vulns)})", ""]
            for vuln in vulns:
                lines += _vulnerability_section(vuln)
    elif report.completed:
        lines += ["## No vulnerabilities found", ""]

    if report.config is not None:
        lines += [
            "## Configuration",
            "",
            "```json",
            json.dumps(report.config.to_dict(), indent=2),
            "```",
            "",
        ]

    return "\n".join(lines)
