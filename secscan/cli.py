"""
SecScan CLI

Command-line interface for running security scans.

Commands:
    secscan scan [PATH]             - Full scan of a project
    secscan scan-files FILE...      - Incremental scan of specific files
    secscan monitor [PATH]          - Re-scan on an interval until interrupted
    secscan list                    - List recent scans
    secscan report SCAN_ID          - Show a stored scan report
    secscan cleanup DAYS            - Delete stored scans older than DAYS
    secscan stats                   - Statistics over recent scans
    secscan init                    - Create a default config file
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from secscan import __version__
from secscan.core.config import CONFIG_FILENAME, ScanConfig, SecScanConfig, generate_default_config
from secscan.core.scanner import SecurityScanner
from secscan.core.statistics import trend
from secscan.core.vulnerability import ScanReport, Severity, VulnerabilityType
from secscan.reporting.console import ConsoleReporter, _safe_echo
from secscan.reporting.formats import REPORT_FORMATS
from secscan.storage.store import FileStore

SEVERITY_CHOICE = click.Choice([s.value for s in Severity], case_sensitive=False)


@click.group()
@click.version_option(version=__version__, prog_name="SecScan")
@click.option("--verbose", "-v", is_flag=True, help="Detailed output and info logging.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """
    SecScan - Static security scanner

    Detect XSS, injection, request forgery, insecure authentication,
    path traversal and hardcoded secrets in a source tree.
    """
    level = logging.INFO if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


def _load_config(project: Path, config_path: Optional[str]) -> SecScanConfig:
    cfg_path = Path(config_path) if config_path else project / CONFIG_FILENAME
    return SecScanConfig.load(cfg_path)


def _under(project: Path, directory: str) -> Path:
    path = Path(directory)
    return path if path.is_absolute() else project / path


def _build_scanner(
    project: Path,
    config: SecScanConfig,
    output_dir: Optional[str] = None,
    scan_config: Optional[ScanConfig] = None,
    timeout: Optional[float] = None,
) -> SecurityScanner:
    return SecurityScanner(
        project_root=project,
        output_dir=_under(project, output_dir or config.output.dir),
        store=FileStore(_under(project, config.store.dir)),
        config=scan_config or config.scan,
        timeout=timeout if timeout is not None else config.timeout,
    )


def _scan_config(
    base: ScanConfig,
    exclude: tuple,
    include: tuple,
    severity: Optional[str],
    checks: tuple,
) -> ScanConfig:
    # CLI flags override config
    return ScanConfig(
        exclude_paths=list(exclude) if exclude else base.exclude_paths,
        include_patterns=list(include) if include else base.include_patterns,
        severity_threshold=severity or base.severity_threshold,
        enabled_checks=list(checks) if checks else base.enabled_checks,
    )


def _finish(
    ctx: click.Context,
    scanner: SecurityScanner,
    report: ScanReport,
    formats: tuple,
    default_formats: list[str],
) -> None:
    """Print, save and exit with the CI status for a finished scan."""
    quiet = ctx.obj["quiet"]
    if not quiet:
        ConsoleReporter(verbose=ctx.obj["verbose"]).report(report)

    saved = [asyncio.run(scanner.save_report(report, fmt)) for fmt in (formats or default_formats)]
    if not quiet and saved:
        _safe_echo("")
        _safe_echo(click.style("  Reports saved:", fg="green"))
        for path in saved:
            _safe_echo(click.style(f"    - {path}", fg="bright_black"))

    if not report.completed:
        _safe_echo(click.style(f"  [X] Scan {report.status.value}: {report.error}", fg="red"), err=True)
        sys.exit(1)

    threshold = scanner.config.severity_threshold or Severity.LOW
    if report.summary.at_or_above(threshold):
        _safe_echo(
            click.style(f"  [X] Security vulnerabilities found at or above {threshold.value}", fg="bright_red", bold=True)
        )
        sys.exit(1)

    if not quiet:
        _safe_echo(click.style(f"  [OK] No vulnerabilities at or above {threshold.value}", fg="green", bold=True))


# ═══════════════════════════════════════════════════════
#  secscan scan
# ═══════════════════════════════════════════════════════
@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--output", "-o", "output_dir", type=click.Path(), default=None,
              help="Directory for rendered reports.")
@click.option("--format", "-f", "formats", multiple=True, type=click.Choice(list(REPORT_FORMATS)),
              help="Report format to save (repeatable).")
@click.option("--exclude", "-e", multiple=True, help="Paths or patterns to exclude.")
@click.option("--include", "-i", multiple=True, help="Glob patterns of files to scan.")
@click.option("--severity", "-s", type=SEVERITY_CHOICE, default=None,
              help="Minimum severity that causes a non-zero exit code.")
@click.option("--check", "checks", multiple=True, type=click.Choice([t.value for t in VulnerabilityType]),
              help="Only run these detectors (repeatable).")
@click.option("--timeout", type=float, default=None, help="Scan timeout in seconds (0 disables).")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to .secscan.yaml configuration file.")
@click.pass_context
def scan(
    ctx: click.Context,
    path: str,
    output_dir: Optional[str],
    formats: tuple,
    exclude: tuple,
    include: tuple,
    severity: Optional[str],
    checks: tuple,
    timeout: Optional[float],
    config_path: Optional[str],
) -> None:
    """Scan a directory for security issues.

    Examples:

        secscan scan

        secscan scan ./src --format html --severity high
    """
    project = Path(path).resolve()
    config = _load_config(project, config_path)
    scanner = _build_scanner(
        project,
        config,
        output_dir=output_dir,
        scan_config=_scan_config(config.scan, exclude, include, severity, checks),
        timeout=timeout,
    )

    report = asyncio.run(scanner.scan())
    _finish(ctx, scanner, report, formats, config.output.formats)


# ═══════════════════════════════════════════════════════
#  secscan scan-files
# ═══════════════════════════════════════════════════════
@cli.command("scan-files")
@click.argument("files", nargs=-1, required=True)
@click.option("--project", "-p", type=click.Path(exists=True, file_okay=False), default=".",
              help="Project root the files belong to.")
@click.option("--format", "-f", "formats", multiple=True, type=click.Choice(list(REPORT_FORMATS)),
              help="Report format to save (repeatable).")
@click.option("--severity", "-s", type=SEVERITY_CHOICE, default=None,
              help="Minimum severity that causes a non-zero exit code.")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to .secscan.yaml configuration file.")
@click.pass_context
def scan_files(
    ctx: click.Context,
    files: tuple,
    project: str,
    formats: tuple,
    severity: Optional[str],
    config_path: Optional[str],
) -> None:
    """Scan only the given files (e.g. the files changed in a commit)."""
    root = Path(project).resolve()
    config = _load_config(root, config_path)
    scanner = _build_scanner(
        root,
        config,
        scan_config=_scan_config(config.scan, (), (), severity, ()),
    )

    report = asyncio.run(scanner.scan_files(list(files)))
    _finish(ctx, scanner, report, formats, config.output.formats)


# ═══════════════════════════════════════════════════════
#  secscan monitor
# ═══════════════════════════════════════════════════════
@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--interval", type=float, default=None, help="Seconds between scans.")
@click.option("--config", "config_path", type=click.Path(), default=None,
              help="Path to .secscan.yaml configuration file.")
def monitor(path: str, interval: Optional[float], config_path: Optional[str]) -> None:
    """Re-scan a project on an interval until interrupted (Ctrl+C)."""
    project = Path(path).resolve()
    config = _load_config(project, config_path)
    scanner = _build_scanner(project, config)
    every = interval or config.monitor.interval

    async def _run() -> None:
        handle = scanner.start_continuous_monitoring(every, paths=[str(project)])
        try:
            await asyncio.Event().wait()
        finally:
            handle.stop()

    _safe_echo(click.style("  Starting continuous security monitoring...", fg="blue"))
    _safe_echo(click.style(f"  Scan interval: {every:g}s", fg="bright_black"))
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        _safe_echo(click.style("  Stopping continuous monitoring...", fg="yellow"))


# ═══════════════════════════════════════════════════════
#  secscan list / report / cleanup / stats
# ═══════════════════════════════════════════════════════
project_option = click.option(
    "--project", "-p", type=click.Path(exists=True, file_okay=False), default=".",
    help="Project whose scan history to use.",
)


@cli.command("list")
@project_option
@click.option("--limit", "-n", type=int, default=20, show_default=True)
def list_scans(project: str, limit: int) -> None:
    """List recent scans, newest first."""
    root = Path(project).resolve()
    scanner = _build_scanner(root, _load_config(root, None))
    ConsoleReporter().scan_list(asyncio.run(scanner.list_recent_scans(limit)))


@cli.command()
@click.argument("scan_id")
@project_option
@click.pass_context
def report(ctx: click.Context, scan_id: str, project: str) -> None:
    """Show a stored scan report."""
    root = Path(project).resolve()
    scanner = _build_scanner(root, _load_config(root, None))
    found = asyncio.run(scanner.get_scan_result(scan_id))
    if found is None:
        _safe_echo(click.style(f"  [X] Scan report not found: {scan_id}", fg="red"))
        sys.exit(1)
    ConsoleReporter(verbose=ctx.obj["verbose"]).report(found)


@cli.command()
@click.argument("days", type=float)
@project_option
@click.option("--purge-corrupted", is_flag=True, help="Also delete entries that fail to parse.")
def cleanup(days: float, project: str, purge_corrupted: bool) -> None:
    """Delete stored scans older than DAYS days."""
    root = Path(project).resolve()
    scanner = _build_scanner(root, _load_config(root, None))
    deleted = asyncio.run(scanner.cleanup_old_scans(days))
    _safe_echo(click.style(f"  [+] Cleaned up {deleted} old scan(s)", fg="green"))
    if purge_corrupted:
        purged = asyncio.run(scanner.purge_corrupted_scans())
        _safe_echo(click.style(f"  [+] Purged {purged} corrupted scan(s)", fg="green"))


@cli.command()
@project_option
@click.option("--limit", "-n", type=int, default=100, show_default=True)
def stats(project: str, limit: int) -> None:
    """Show statistics over recent scans."""
    root = Path(project).resolve()
    scanner = _build_scanner(root, _load_config(root, None))

    reports = asyncio.run(scanner.list_recent_scans(limit))
    if not reports:
        _safe_echo(click.style("  No scans found for statistics", fg="yellow"))
        return

    storage = asyncio.run(scanner.get_storage_statistics())
    ConsoleReporter().statistics(
        scanner.generate_summary_statistics(reports),
        storage=storage,
        trend=trend(reports),
    )


# ═══════════════════════════════════════════════════════
#  secscan init
# ═══════════════════════════════════════════════════════
@cli.command()
@click.option("--path", "-p", "target_path", type=click.Path(), default=".",
              help="Directory to create the config file in.")
def init(target_path: str) -> None:
    """Create a default .secscan.yaml."""
    target = Path(target_path).resolve()
    target.mkdir(parents=True, exist_ok=True)

    config_file = target / CONFIG_FILENAME
    if config_file.exists():
        _safe_echo(click.style(f"  [!] {config_file} already exists, skipping.", fg="yellow"))
        return

    config_file.write_text(generate_default_config(), encoding="utf-8")
    _safe_echo(click.style(f"  [+] Created {config_file}", fg="green"))
    _safe_echo("")
    _safe_echo("  Edit this file to customize what gets scanned.")
    _safe_echo("  Run 'secscan scan' to start scanning.")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
