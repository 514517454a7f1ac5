"""
SecScan Vulnerability and Report Models

A Vulnerability is one issue found by a detector in one file.
A ScanReport is the immutable record of one scan execution.

Reports serialize with the camelCase keys used by the stored
``security:scan:*`` records, so JSON written by other tools reads back.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional

from secscan.core.errors import ReportParseError


class Severity(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @classmethod
    def from_string(cls, value: str) -> "Severity":
        """Parse a severity from a string (case-insensitive)."""
        return cls[value.upper()]

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __ge__(self, other: "Severity") -> bool:
        return self.rank >= other.rank

    def __gt__(self, other: "Severity") -> bool:
        return self.rank > other.rank

    def __le__(self, other: "Severity") -> bool:
        return not self.__gt__(other)

    def __lt__(self, other: "Severity") -> bool:
        return not self.__ge__(other)


_SEVERITY_ORDER = [Severity.INFO, Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]

# Most severe first, used wherever vulnerabilities are grouped for display
SEVERITIES_DESC = list(reversed(_SEVERITY_ORDER))


class VulnerabilityType(Enum):
    XSS = "xss"
    SQL_INJECTION = "sql-injection"
    CSRF = "csrf"
    INSECURE_AUTH = "insecure-auth"
    HARDCODED_SECRET = "hardcoded-secret"
    PATH_TRAVERSAL = "path-traversal"


class ScanStatus(Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    TIMEOUT = "timeout"


def new_scan_id() -> str:
    return f"scan-{uuid.uuid4()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str) -> datetime:
    # Python < 3.11 does not accept the trailing "Z" written by JavaScript clients
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Vulnerability:
    id: str
    type: VulnerabilityType
    severity: Severity
    title: str
    description: str
    file: str
    line: int
    column: int
    code: str
    remediation: str
    cwe: Optional[str] = None
    owasp: Optional[str] = None

    def display(self) -> str:
        """Human-readable output for console printing."""
        parts = [
            f"[{self.severity.value.upper()}] {self.title}",
            f"  Type: {self.type.value}",
            f"  Location: {self.file}:{self.line}:{self.column}",
            f"  {self.description}",
        ]
        if self.cwe:
            parts.append(f"  CWE: {self.cwe}")
        parts.append(f"  Fix: {self.remediation}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "code": self.code,
            "remediation": self.remediation,
        }
        if self.cwe:
            result["cwe"] = self.cwe
        if self.owasp:
            result["owasp"] = self.owasp
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Vulnerability":
        return cls(
            id=data["id"],
            type=VulnerabilityType(data["type"]),
            severity=Severity(data["severity"]),
            title=data["title"],
            description=data["description"],
            file=data["file"],
            line=int(data["line"]),
            column=int(data["column"]),
            code=data["code"],
            remediation=data["remediation"],
            cwe=data.get("cwe"),
            owasp=data.get("owasp"),
        )


@dataclass(frozen=True)
class ScanSummary:
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0
    total: int = 0

    def count(self, severity: Severity) -> int:
        return getattr(self, severity.value)

    def at_or_above(self, threshold: Severity) -> int:
        """Number of vulnerabilities at or above a severity."""
        return sum(self.count(sev) for sev in Severity if sev >= threshold)

    def to_dict(self) -> dict[str, int]:
        return {
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "info": self.info,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScanSummary":
        return cls(**{key: int(data.get(key, 0)) for key in cls().to_dict()})


def aggregate(vulnerabilities: Iterable[Vulnerability]) -> ScanSummary:
    """Reduce a vulnerability list into severity counts."""
    counts = {sev.value: 0 for sev in Severity}
    total = 0
    for vuln in vulnerabilities:
        counts[vuln.severity.value] += 1
        total += 1
    return ScanSummary(total=total, **counts)


@dataclass(frozen=True)
class ScanReport:
    """
    Record of one scan execution.

    ``error`` is set exactly when ``status`` is not COMPLETED. A report that
    did not complete always has no vulnerabilities and an all-zero summary.
    """

    scan_id: str
    timestamp: datetime
    project_path: str
    status: ScanStatus
    vulnerabilities: tuple[Vulnerability, ...] = ()
    summary: ScanSummary = field(default_factory=ScanSummary)
    duration: int = 0
    scanned_files: int = 0
    error: Optional[str] = None
    incremental_scan: Optional[bool] = None
    target_files: Optional[tuple[str, ...]] = None
    # ScanConfig, kept untyped here to avoid an import cycle with core.config
    config: Optional[Any] = None

    def __post_init__(self) -> None:
        if (self.status is ScanStatus.COMPLETED) == (self.error is not None):
            raise ValueError(
                f"report {self.scan_id}: error must be set exactly when status is not completed"
            )
        if not isinstance(self.vulnerabilities, tuple):
            object.__setattr__(self, "vulnerabilities", tuple(self.vulnerabilities))
        if self.target_files is not None and not isinstance(self.target_files, tuple):
            object.__setattr__(self, "target_files", tuple(self.target_files))

    @classmethod
    def terminal(
        cls,
        project_path: str,
        status: ScanStatus,
        error: str,
        duration: int = 0,
        target_files: Optional[Iterable[str]] = None,
    ) -> "ScanReport":
        """Build a failed or timed-out report with no results."""
        return cls(
            scan_id=new_scan_id(),
            timestamp=utcnow(),
            project_path=project_path,
            status=status,
            error=error,
            duration=duration,
            incremental_scan=True if target_files is not None else None,
            target_files=tuple(target_files) if target_files is not None else None,
        )

    @property
    def completed(self) -> bool:
        return self.status is ScanStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "scanId": self.scan_id,
            "timestamp": self.timestamp.isoformat(),
            "projectPath": self.project_path,
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
            "summary": self.summary.to_dict(),
            "duration": self.duration,
            "scannedFiles": self.scanned_files,
            "status": self.status.value,
        }
        if self.error is not None:
            result["error"] = self.error
        if self.incremental_scan is not None:
            result["incrementalScan"] = self.incremental_scan
        if self.target_files is not None:
            result["targetFiles"] = list(self.target_files)
        if self.config is not None:
            result["config"] = self.config.to_dict()
        return result

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScanReport":
        from secscan.core.config import ScanConfig

        target_files = data.get("targetFiles")
        config = data.get("config")
        return cls(
            scan_id=data["scanId"],
            timestamp=_parse_timestamp(data["timestamp"]),
            project_path=data["projectPath"],
            status=ScanStatus(data["status"]),
            vulnerabilities=tuple(Vulnerability.from_dict(v) for v in data.get("vulnerabilities", [])),
            summary=ScanSummary.from_dict(data.get("summary", {})),
            duration=int(data.get("duration", 0)),
            scanned_files=int(data.get("scannedFiles", 0)),
            error=data.get("error"),
            incremental_scan=data.get("incrementalScan"),
            target_files=tuple(target_files) if target_files is not None else None,
            config=ScanConfig.from_dict(config) if config is not None else None,
        )

    @classmethod
    def from_json(cls, text: str) -> "ScanReport":
        """Parse stored report text, raising ReportParseError on any defect."""
        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise TypeError(f"expected a JSON object, got {type(data).__name__}")
            return cls.from_dict(data)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise ReportParseError(f"Malformed scan report: {exc}") from exc
