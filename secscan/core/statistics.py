"""
SecScan Statistics

Aggregates over a collection of scan reports. Pure functions, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from secscan.core.vulnerability import ScanReport, Severity


@dataclass
class SummaryStatistics:
    total_scans: int = 0
    total_vulnerabilities: int = 0
    average_vulnerabilities_per_scan: float = 0.0
    severity_breakdown: dict[str, int] = field(
        default_factory=lambda: {sev.value: 0 for sev in Severity}
    )


def generate_summary_statistics(reports: Sequence[ScanReport]) -> SummaryStatistics:
    stats = SummaryStatistics(total_scans=len(reports))
    for report in reports:
        stats.total_vulnerabilities += report.summary.total
        for sev in Severity:
            stats.severity_breakdown[sev.value] += report.summary.count(sev)

    if reports:
        stats.average_vulnerabilities_per_scan = stats.total_vulnerabilities / len(reports)
    return stats


def trend(reports: Sequence[ScanReport], window: int = 10) -> Optional[float]:
    """
    Change in average vulnerabilities per scan between the newest ``window``
    reports and the ``window`` before them. Reports must be newest first.

    Returns None when there is nothing older to compare against. A negative
    value means vulnerabilities are going down.
    """
    recent = reports[:window]
    older = reports[window:2 * window]
    if not recent or not older:
        return None
    recent_avg = sum(r.summary.total for r in recent) / len(recent)
    older_avg = sum(r.summary.total for r in older) / len(older)
    return recent_avg - older_avg
