"""
SecScan Pattern Detector

A detector is a fixed set of regular expressions for one vulnerability
type. Every match becomes one Vulnerability located at the match start.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from typing import List, Optional, Sequence

from secscan.core.vulnerability import Severity, Vulnerability, VulnerabilityType


@dataclass(frozen=True)
class PatternDetector:
    type: VulnerabilityType
    title: str
    description: str
    severity: Severity
    remediation: str
    patterns: Sequence[re.Pattern]
    cwe: Optional[str] = None
    owasp: Optional[str] = None
    # Truncate the reported source line, for types whose snippet leaks data
    snippet_limit: Optional[int] = None

    def detect(self, content: str, file_path: str) -> List[Vulnerability]:
        lines = content.split("\n")
        vulnerabilities: List[Vulnerability] = []

        for pattern in self.patterns:
            for match in pattern.finditer(content):
                start = match.start()
                line_no = content.count("\n", 0, start) + 1
                column = start - content.rfind("\n", 0, start)

                vulnerabilities.append(
                    Vulnerability(
                        id=str(uuid.uuid4()),
                        type=self.type,
                        severity=self.severity,
                        title=self.title,
                        description=self.description,
                        file=file_path,
                        line=line_no,
                        column=column,
                        code=self._snippet(lines[line_no - 1]),
                        remediation=self.remediation,
                        cwe=self.cwe,
                        owasp=self.owasp,
                    )
                )

        return vulnerabilities

    def _snippet(self, line: str) -> str:
        line = line.strip()
        if self.snippet_limit is None:
            return line
        return line[:self.snippet_limit] + "..."
