"""
SecScan Path Handling

Validation of caller-supplied file paths (incremental scans) and
discovery of files under a project root (full scans).
"""

from __future__ import annotations

import fnmatch
import re
from pathlib import Path, PurePath
from typing import Iterable

from secscan.core.errors import PathValidationError

# (rule, pattern) checked in order; the first match names the rejection
_FORBIDDEN_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("path traversal", re.compile(r"(?:^|[\\/])\.\.(?:[\\/]|$)")),
    ("system directory", re.compile(r"^/(?:etc|usr|var)(?:/|$)")),
    ("windows system path", re.compile(r"[\\/]Windows[\\/]|System32", re.IGNORECASE)),
    ("windows drive path", re.compile(r"^[A-Za-z]:(?:[\\/]|$)")),
]


def validate_file_path(path: str) -> None:
    """Raise PathValidationError if the path may escape the project."""
    for rule, pattern in _FORBIDDEN_PATTERNS:
        if pattern.search(path):
            raise PathValidationError(path, rule)


def is_valid_file_path(path: str) -> bool:
    try:
        validate_file_path(path)
    except PathValidationError:
        return False
    return True


def _is_excluded(relative: PurePath, exclude_paths: Iterable[str]) -> bool:
    rel_str = relative.as_posix()
    for ex in exclude_paths:
        ex = ex.strip("/")
        if rel_str == ex or rel_str.startswith(ex + "/"):
            return True
        if any(fnmatch.fnmatch(part, ex) for part in relative.parts):
            return True
    return False


def discover_files(
    root: Path,
    include_patterns: Iterable[str],
    exclude_paths: Iterable[str],
) -> list[str]:
    """
    Resolve include patterns under root into absolute file paths.

    Paths appear once, in pattern order and sorted within each pattern.
    """
    root = Path(root).resolve()
    exclude_paths = list(exclude_paths)
    seen: set[str] = set()
    files: list[str] = []

    for pattern in include_patterns:
        for match in sorted(root.glob(pattern)):
            if not match.is_file():
                continue
            if _is_excluded(match.relative_to(root), exclude_paths):
                continue
            path_str = str(match)
            if path_str not in seen:
                seen.add(path_str)
                files.append(path_str)

    return files
