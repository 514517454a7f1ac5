"""
Pytest Configuration and Fixtures

Shared fixtures for SecScan tests.
"""

import asyncio
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest

from secscan.core.config import ScanConfig
from secscan.core.scanner import SecurityScanner
from secscan.core.vulnerability import (
    ScanReport,
    ScanStatus,
    Severity,
    Vulnerability,
    VulnerabilityType,
    aggregate,
)
from secscan.storage.store import MemoryStore


class FakeReader:
    """File reader serving in-memory contents and counting reads."""

    def __init__(self, files=None, delay: float = 0.0) -> None:
        self.files = dict(files or {})
        self.delay = delay
        self.reads = []

    async def __call__(self, file_path: str) -> str:
        self.reads.append(file_path)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.files.get(file_path, "")


class CountingDetector:
    """Detector collaborator that records every call and finds nothing."""

    def __init__(self) -> None:
        self.calls = []

    def __call__(self, content, file_path, vuln_type):
        self.calls.append((file_path, vuln_type))
        return []


def make_vulnerability(severity: Severity = Severity.HIGH, **overrides) -> Vulnerability:
    values = dict(
        id="vuln-001",
        type=VulnerabilityType.XSS,
        severity=severity,
        title="Cross-Site Scripting (XSS)",
        description="Unescaped user input in HTML output",
        file="src/components/UserProfile.tsx",
        line=42,
        column=15,
        code="<div dangerouslySetInnerHTML={{ __html: userInput }} />",
        remediation="Use proper HTML escaping or React text content",
        cwe="CWE-79",
        owasp="A03:2021",
    )
    values.update(overrides)
    return Vulnerability(**values)


def make_report(
    scan_id: str = "scan-123",
    timestamp: datetime = None,
    vulnerabilities=(),
    **overrides,
) -> ScanReport:
    values = dict(
        scan_id=scan_id,
        timestamp=timestamp or datetime.now(timezone.utc),
        project_path="/test/project",
        status=ScanStatus.COMPLETED,
        vulnerabilities=tuple(vulnerabilities),
        summary=aggregate(vulnerabilities),
        duration=1234,
        scanned_files=100,
    )
    values.update(overrides)
    return ScanReport(**values)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sample_vulnerability() -> Vulnerability:
    return make_vulnerability()


@pytest.fixture
def sample_report() -> ScanReport:
    """A completed report with one vulnerability of each of two severities."""
    return make_report(
        scan_id="scan-456",
        vulnerabilities=[
            make_vulnerability(),
            make_vulnerability(
                Severity.CRITICAL,
                id="vuln-002",
                type=VulnerabilityType.SQL_INJECTION,
                title="SQL Injection",
                description="Direct string concatenation in SQL query",
                file="src/api/users.ts",
                line=87,
                column=23,
                code="const query = `SELECT * FROM users WHERE id = ${userId}`;",
                remediation="Use parameterized queries",
                cwe="CWE-89",
            ),
        ],
        config=ScanConfig().resolve(),
    )


@pytest.fixture
def scanner(temp_dir: Path, store: MemoryStore) -> SecurityScanner:
    return SecurityScanner(
        project_root=temp_dir,
        output_dir=temp_dir / "output",
        store=store,
    )


@pytest.fixture
def vulnerable_project(temp_dir: Path) -> Path:
    """A small project with known issues and an excluded dependency dir."""
    src = temp_dir / "src"
    src.mkdir()
    (src / "profile.tsx").write_text(
        "export function Profile({ bio }) {\n"
        "  return <div dangerouslySetInnerHTML={{ __html: bio }} />;\n"
        "}\n"
    )
    (src / "users.ts").write_text(
        "export async function find(db, id) {\n"
        "  return db.query(`SELECT * FROM users WHERE id = ${id}`);\n"
        "}\n"
    )
    (src / "clean.ts").write_text("export const add = (a: number, b: number) => a + b;\n")

    deps = temp_dir / "node_modules" / "lib"
    deps.mkdir(parents=True)
    (deps / "index.js").write_text("document.write(location.hash);\n")
    return temp_dir
