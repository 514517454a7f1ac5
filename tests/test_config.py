"""
Tests for configuration loading
"""

from pathlib import Path

import yaml

from secscan.core.config import (
    DEFAULT_EXCLUDE_PATHS,
    DEFAULT_INCLUDE_PATTERNS,
    ScanConfig,
    SecScanConfig,
    generate_default_config,
)
from secscan.core.vulnerability import Severity, VulnerabilityType


class TestScanConfig:
    def test_resolve_applies_defaults(self):
        config = ScanConfig().resolve()

        assert config.include_patterns == DEFAULT_INCLUDE_PATTERNS
        assert config.exclude_paths == DEFAULT_EXCLUDE_PATHS
        assert config.enabled_checks == tuple(VulnerabilityType)
        assert config.severity_threshold is None

    def test_resolve_keeps_explicit_values(self):
        config = ScanConfig(exclude_paths=[], enabled_checks=["csrf"]).resolve()

        assert config.exclude_paths == ()
        assert config.enabled_checks == (VulnerabilityType.CSRF,)

    def test_string_values_coerced(self):
        config = ScanConfig(severity_threshold="HIGH", enabled_checks=["xss", "path-traversal"])

        assert config.severity_threshold is Severity.HIGH
        assert config.enabled_checks == (VulnerabilityType.XSS, VulnerabilityType.PATH_TRAVERSAL)

    def test_camel_and_snake_keys(self):
        camel = ScanConfig.from_dict({"excludePaths": ["dist"], "severityThreshold": "low"})
        snake = ScanConfig.from_dict({"exclude_paths": ["dist"], "severity_threshold": "low"})

        assert camel == snake
        assert camel.to_dict() == {"excludePaths": ["dist"], "severityThreshold": "low"}


class TestSecScanConfig:
    """Tests for .secscan.yaml loading."""

    def test_missing_file_gives_defaults(self, temp_dir: Path):
        config = SecScanConfig.load(temp_dir / ".secscan.yaml")

        assert config.timeout == 120.0
        assert config.output.dir == "security/scans"
        assert config.output.formats == ["json", "markdown"]
        assert config.store.dir == ".secscan/store"
        assert config.monitor.interval == 3600.0

    def test_load_file(self, temp_dir: Path):
        path = temp_dir / ".secscan.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "scan": {"exclude_paths": ["vendor"], "enabled_checks": ["xss"]},
                    "timeout": 0,
                    "output": {"dir": "reports", "formats": ["html"]},
                    "monitor": {"interval": 60},
                }
            )
        )

        config = SecScanConfig.load(path)

        assert config.scan.exclude_paths == ("vendor",)
        assert config.scan.enabled_checks == (VulnerabilityType.XSS,)
        assert config.timeout is None
        assert config.output.dir == "reports"
        assert config.output.formats == ["html"]
        assert config.monitor.interval == 60.0

    def test_invalid_yaml_falls_back(self, temp_dir: Path, caplog):
        path = temp_dir / ".secscan.yaml"
        path.write_text("scan: [unclosed")

        config = SecScanConfig.load(path)

        assert config.output.dir == "security/scans"
        assert "using defaults" in caplog.text

    def test_generated_config_loads(self, temp_dir: Path):
        path = temp_dir / ".secscan.yaml"
        path.write_text(generate_default_config())

        config = SecScanConfig.load(path)

        assert config.scan.include_patterns == DEFAULT_INCLUDE_PATTERNS
        assert config.scan.exclude_paths == DEFAULT_EXCLUDE_PATHS
        assert config.scan.severity_threshold is Severity.LOW
        assert config.timeout == 120.0
