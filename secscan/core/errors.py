"""
SecScan Errors

Only ConstructionError and raw store write failures leave the public
scanner surface. The rest are raised internally and folded into reports.
"""

from __future__ import annotations


class SecScanError(Exception):
    """Base class for all SecScan errors."""


class ConstructionError(SecScanError, ValueError):
    """The scanner was configured with an empty project root or output dir."""


class PathValidationError(SecScanError):
    """A caller-supplied file path matched a forbidden pattern."""

    def __init__(self, path: str, rule: str) -> None:
        self.path = path
        self.rule = rule
        super().__init__(f"Invalid file path detected: {path!r} ({rule})")


class ScanTimeoutError(SecScanError):
    """The scan timer fired before the pipeline finished."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Scan timeout exceeded after {timeout:g}s")


class ReportParseError(SecScanError):
    """Stored report text could not be turned back into a ScanReport."""
