"""
SecScan Detector Catalog

One PatternDetector per VulnerabilityType. The table must cover every
type; importing this module fails otherwise.
"""

from __future__ import annotations

import re
from typing import List

from secscan.core.vulnerability import Severity, Vulnerability, VulnerabilityType
from secscan.detectors.pattern import PatternDetector


def _compile(*patterns: str, flags: int = 0) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, flags) for p in patterns)


DETECTORS: dict[VulnerabilityType, PatternDetector] = {
    VulnerabilityType.XSS: PatternDetector(
        type=VulnerabilityType.XSS,
        title="Cross-Site Scripting (XSS)",
        description="Potential XSS vulnerability detected",
        severity=Severity.HIGH,
        remediation="Use proper output encoding or React text content",
        patterns=_compile(
            r"dangerouslySetInnerHTML\s*=\s*\{[^}]*__html:",
            r"innerHTML\s*=\s*[^;]+",
            r"document\.write\s*\([^)]*\)",
            r"eval\s*\([^)]*\)",
            r"\.html\s*\([^)]*\)",  # jQuery html()
        ),
        cwe="CWE-79",
        owasp="A03:2021",
    ),
    VulnerabilityType.SQL_INJECTION: PatternDetector(
        type=VulnerabilityType.SQL_INJECTION,
        title="SQL Injection",
        description="Potential SQL injection vulnerability detected",
        severity=Severity.CRITICAL,
        remediation="Use parameterized queries or prepared statements",
        patterns=_compile(
            r"query\s*\(\s*[`\"'].*\$\{[^}]+\}",
            r"execute\s*\(\s*[`\"'].*\+",
            r"db\.[a-zA-Z]+\s*\(\s*[`\"'].*\$\{",
        )
        + _compile(r"SELECT.*FROM.*WHERE.*\+", flags=re.IGNORECASE),
        cwe="CWE-89",
        owasp="A03:2021",
    ),
    VulnerabilityType.INSECURE_AUTH: PatternDetector(
        type=VulnerabilityType.INSECURE_AUTH,
        title="Insecure Authentication",
        description="Weak or hardcoded authentication detected",
        severity=Severity.HIGH,
        remediation="Implement proper authentication with secure token management",
        patterns=_compile(
            r"token\s*===?\s*[\"'][^\"']+[\"']",
            r"password\s*===?\s*[\"'][^\"']+[\"']",
        )
        + _compile(r"admin\s*===?\s*true", r"auth.*bypass", flags=re.IGNORECASE),
        cwe="CWE-287",
        owasp="A07:2021",
    ),
    VulnerabilityType.HARDCODED_SECRET: PatternDetector(
        type=VulnerabilityType.HARDCODED_SECRET,
        title="Hardcoded Secret",
        description="Sensitive information found in source code",
        severity=Severity.CRITICAL,
        remediation="Use environment variables or secure key management",
        patterns=_compile(
            r"(?:api[_-]?key|apikey)\s*[:=]\s*[\"'][^\"']{20,}",
            r"(?:secret|password|pwd)\s*[:=]\s*[\"'][^\"']+",
            r"bearer\s+[a-zA-Z0-9._-]{20,}",
            flags=re.IGNORECASE,
        )
        + _compile(r"sk_live_[a-zA-Z0-9]+", r"pk_live_[a-zA-Z0-9]+"),
        cwe="CWE-798",
        owasp="A02:2021",
        snippet_limit=50,
    ),
    VulnerabilityType.CSRF: PatternDetector(
        type=VulnerabilityType.CSRF,
        title="Cross-Site Request Forgery (CSRF)",
        description="Missing CSRF protection on state-changing operation",
        severity=Severity.MEDIUM,
        remediation="Implement CSRF token validation",
        patterns=_compile(
            r"router\.(?:post|put|delete|patch)\s*\([^)]*\)\s*\{(?!.*csrf)",
            r"app\.(?:post|put|delete|patch)\s*\([^)]*\)\s*\{(?!.*csrf)",
            flags=re.IGNORECASE,
        ),
        cwe="CWE-352",
        owasp="A01:2021",
    ),
    VulnerabilityType.PATH_TRAVERSAL: PatternDetector(
        type=VulnerabilityType.PATH_TRAVERSAL,
        title="Path Traversal",
        description="File system path built from request input",
        severity=Severity.HIGH,
        remediation="Resolve the path and check it stays inside an allowed base directory",
        patterns=_compile(
            r"path\.join\s*\([^)]*req\.",
            r"readFile(?:Sync)?\s*\([^)]*req\.",
            r"open\s*\([^)]*request\.(?:args|form|GET|POST)",
        ),
        cwe="CWE-22",
        owasp="A01:2021",
    ),
}

_missing = set(VulnerabilityType) - set(DETECTORS)
if _missing:
    raise RuntimeError(f"No detector registered for: {sorted(t.value for t in _missing)}")


def detect(content: str, file_path: str, vuln_type: VulnerabilityType) -> List[Vulnerability]:
    """Run the detector for one vulnerability type over a file's text."""
    return DETECTORS[vuln_type].detect(content, file_path)
