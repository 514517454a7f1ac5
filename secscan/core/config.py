"""
SecScan Configuration Management

Holds the per-scan ScanConfig (with its default table) and loads the
project-level settings from .secscan.yaml files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from secscan.core.vulnerability import Severity, VulnerabilityType

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".secscan.yaml"

DEFAULT_INCLUDE_PATTERNS = (
    "**/*.ts",
    "**/*.tsx",
    "**/*.js",
    "**/*.jsx",
    "**/*.py",
)

DEFAULT_EXCLUDE_PATHS = (
    "node_modules",
    "dist",
    "build",
    "coverage",
    ".next",
    ".git",
)

DEFAULT_TIMEOUT = 120.0
DEFAULT_OUTPUT_DIR = "security/scans"
DEFAULT_STORE_DIR = ".secscan/store"
DEFAULT_FORMATS = ("json", "markdown")
DEFAULT_MONITOR_INTERVAL = 3600.0


def _as_tuple(values: Optional[Iterable[Any]]) -> Optional[tuple]:
    return tuple(values) if values is not None else None


@dataclass(frozen=True)
class ScanConfig:
    """
    What a scan looks at.

    Every field may be left unset; resolve() applies the defaults:

        include_patterns    DEFAULT_INCLUDE_PATTERNS
        exclude_paths       DEFAULT_EXCLUDE_PATHS
        severity_threshold  unset (no threshold)
        enabled_checks      every VulnerabilityType
    """

    exclude_paths: Optional[tuple[str, ...]] = None
    include_patterns: Optional[tuple[str, ...]] = None
    severity_threshold: Optional[Severity] = None
    enabled_checks: Optional[tuple[VulnerabilityType, ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "exclude_paths", _as_tuple(self.exclude_paths))
        object.__setattr__(self, "include_patterns", _as_tuple(self.include_patterns))
        if isinstance(self.severity_threshold, str):
            object.__setattr__(self, "severity_threshold", Severity.from_string(self.severity_threshold))
        if self.enabled_checks is not None:
            object.__setattr__(
                self,
                "enabled_checks",
                tuple(VulnerabilityType(c) if isinstance(c, str) else c for c in self.enabled_checks),
            )

    def resolve(self) -> "ScanConfig":
        return replace(
            self,
            exclude_paths=self.exclude_paths if self.exclude_paths is not None else DEFAULT_EXCLUDE_PATHS,
            include_patterns=(
                self.include_patterns if self.include_patterns is not None else DEFAULT_INCLUDE_PATTERNS
            ),
            enabled_checks=(
                self.enabled_checks if self.enabled_checks is not None else tuple(VulnerabilityType)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.exclude_paths is not None:
            result["excludePaths"] = list(self.exclude_paths)
        if self.include_patterns is not None:
            result["includePatterns"] = list(self.include_patterns)
        if self.severity_threshold is not None:
            result["severityThreshold"] = self.severity_threshold.value
        if self.enabled_checks is not None:
            result["enabledChecks"] = [c.value for c in self.enabled_checks]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScanConfig":
        """Accepts both the stored camelCase keys and the YAML snake_case keys."""

        def pick(camel: str, snake: str) -> Any:
            return data.get(camel, data.get(snake))

        return cls(
            exclude_paths=pick("excludePaths", "exclude_paths"),
            include_patterns=pick("includePatterns", "include_patterns"),
            severity_threshold=pick("severityThreshold", "severity_threshold"),
            enabled_checks=pick("enabledChecks", "enabled_checks"),
        )


@dataclass
class OutputConfig:
    dir: str = DEFAULT_OUTPUT_DIR
    formats: list[str] = field(default_factory=lambda: list(DEFAULT_FORMATS))


@dataclass
class StoreConfig:
    dir: str = DEFAULT_STORE_DIR


@dataclass
class MonitorConfig:
    interval: float = DEFAULT_MONITOR_INTERVAL


@dataclass
class SecScanConfig:
    """Root configuration object for SecScan."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    timeout: Optional[float] = DEFAULT_TIMEOUT
    output: OutputConfig = field(default_factory=OutputConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "SecScanConfig":
        """Load configuration from a YAML file, falling back to defaults."""
        if config_path is None:
            # Search in current directory
            config_path = Path.cwd() / CONFIG_FILENAME

        if not config_path.exists():
            return cls()

        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Could not read %s, using defaults: %s", config_path, exc)
            return cls()

        return cls._from_dict(raw)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SecScanConfig":
        """Build config from a parsed YAML dictionary."""
        output_data = data.get("output", {})
        output = OutputConfig(
            dir=output_data.get("dir", DEFAULT_OUTPUT_DIR),
            formats=list(output_data.get("formats", DEFAULT_FORMATS)),
        )

        store = StoreConfig(dir=data.get("store", {}).get("dir", DEFAULT_STORE_DIR))
        monitor = MonitorConfig(
            interval=float(data.get("monitor", {}).get("interval", DEFAULT_MONITOR_INTERVAL))
        )

        timeout = data.get("timeout", DEFAULT_TIMEOUT)

        return cls(
            scan=ScanConfig.from_dict(data.get("scan", {})),
            timeout=float(timeout) if timeout else None,
            output=output,
            store=store,
            monitor=monitor,
        )


def generate_default_config() -> str:
    """Generate a default .secscan.yaml configuration file content."""
    return """\
# SecScan Configuration

# What to scan
scan:
  include_patterns:
    - "**/*.ts"
    - "**/*.tsx"
    - "**/*.js"
    - "**/*.jsx"
    - "**/*.py"
  exclude_paths:
    - node_modules
    - dist
    - build
    - coverage
    - .next
    - .git
  severity_threshold: low
  # enabled_checks:
  #   - xss
  #   - sql-injection
  #   - csrf
  #   - insecure-auth
  #   - hardcoded-secret
  #   - path-traversal

# Seconds before a scan is reported as timed out (0 disables)
timeout: 120

# Rendered reports
output:
  dir: security/scans
  formats:
    - json
    - markdown

# Where scan reports are kept between runs
store:
  dir: .secscan/store

# Continuous monitoring
monitor:
  interval: 3600
"""
