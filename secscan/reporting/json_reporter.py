"""
SecScan JSON Reporter

Renders a scan report in the stored wire format:
{
    "scanId": "...",
    "summary": {"critical": n, ..., "total": N},
    "vulnerabilities": [...],
    ...
}
"""

from __future__ import annotations

from secscan.core.vulnerability import ScanReport


def to_json(report: ScanReport) -> str:
    return report.to_json(indent=2)
