"""
SecScan Security Scanner

The orchestrator: discovers files (or takes a caller's list), runs the
enabled detectors over each file in batches, aggregates the results into
a ScanReport and persists it.

scan() and scan_files() always return a report. Pipeline errors become
FAILED reports, an expired timer becomes a TIMEOUT report. The only
exceptions that escape are ConstructionError from __init__ and a failed
write to the report store.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Union

from secscan.core.batch import run_in_batches
from secscan.core.config import DEFAULT_TIMEOUT, ScanConfig
from secscan.core.errors import ConstructionError, PathValidationError, ScanTimeoutError
from secscan.core.monitor import ContinuousMonitor
from secscan.core.paths import discover_files, validate_file_path
from secscan.core.statistics import SummaryStatistics, generate_summary_statistics
from secscan.core.vulnerability import (
    ScanReport,
    ScanStatus,
    Vulnerability,
    VulnerabilityType,
    aggregate,
    new_scan_id,
    utcnow,
)
from secscan.detectors.catalog import detect
from secscan.reporting.formats import get_renderer
from secscan.storage.reports import ReportRepository, StorageStatistics
from secscan.storage.store import KeyValueStore

logger = logging.getLogger(__name__)

# (content, file_path, type) -> vulnerabilities, sync or async
Detector = Callable[[str, str, VulnerabilityType], Union[List[Vulnerability], Awaitable[List[Vulnerability]]]]
Reader = Callable[[str], Awaitable[str]]


async def read_text(file_path: str) -> str:
    return await asyncio.to_thread(Path(file_path).read_text, encoding="utf-8", errors="ignore")


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class SecurityScanner:
    """
    Scans one project root.

    Args:
        project_root: Directory that full scans walk.
        output_dir: Where save_report() writes rendered reports.
        store: Key-value store for reports. Without one nothing is persisted
            and the read operations return nothing.
        config: What to scan; defaults are applied once, here.
        timeout: Seconds before a scan is reported as timed out. None or 0
            disables the timer.
        detector: Replaces the built-in detector catalog.
        reader: Replaces the file reader.
        cancel_on_timeout: Cancel the pipeline when the timer wins. By
            default it keeps running in the background and its result is
            discarded.
    """

    def __init__(
        self,
        project_root: Union[str, Path],
        output_dir: Union[str, Path],
        store: Optional[KeyValueStore] = None,
        config: Optional[ScanConfig] = None,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        detector: Optional[Detector] = None,
        reader: Optional[Reader] = None,
        cancel_on_timeout: bool = False,
    ) -> None:
        if not project_root:
            raise ConstructionError("Invalid project root")
        if not output_dir:
            raise ConstructionError("Invalid output directory")

        self.project_root = Path(project_root)
        self.output_dir = Path(output_dir)
        self.repository = ReportRepository(store) if store is not None else None
        self.config = (config or ScanConfig()).resolve()
        self.timeout = timeout or None
        self.cancel_on_timeout = cancel_on_timeout
        self._detector: Detector = detector or detect
        self._reader: Reader = reader or read_text

        # file path -> vulnerabilities. Never invalidated or evicted, so it
        # grows with every distinct file this instance scans.
        self._detection_cache: dict[str, tuple[Vulnerability, ...]] = {}
        self._abandoned: set[asyncio.Task] = set()

    @property
    def project_path(self) -> str:
        return str(self.project_root)

    @property
    def detection_cache_size(self) -> int:
        return len(self._detection_cache)

    # ── Scanning ──

    async def scan(self) -> ScanReport:
        """Scan every discovered file under the project root."""
        logger.info("Starting full scan of %s", self.project_path)
        report = await self._run_guarded(None)
        await self._store_scan_result(report)
        return report

    async def scan_files(self, paths: Iterable[str]) -> ScanReport:
        """
        Scan exactly the given files.

        Every path is validated first; a single bad path fails the whole
        scan before any file is read, and that report is not stored.
        """
        paths = list(paths)
        try:
            for path in paths:
                validate_file_path(path)
        except PathValidationError as exc:
            logger.warning("Rejected incremental scan: %s", exc)
            return ScanReport.terminal(self.project_path, ScanStatus.FAILED, str(exc))

        logger.info("Starting incremental scan of %d file(s)", len(paths))
        report = await self._run_guarded(paths)
        await self._store_scan_result(report)
        return report

    async def detect_vulnerabilities(self, file_path: str) -> List[Vulnerability]:
        cached = self._detection_cache.get(file_path)
        if cached is not None:
            return list(cached)

        content = await self._reader(file_path)
        display_path = self._display_path(file_path)

        vulnerabilities: List[Vulnerability] = []
        for vuln_type in self.config.enabled_checks:
            found = self._detector(content, display_path, vuln_type)
            if inspect.isawaitable(found):
                found = await found
            vulnerabilities.extend(found)

        self._detection_cache[file_path] = tuple(vulnerabilities)
        return vulnerabilities

    async def scan_files_parallel(self, files: Sequence[str]) -> List[List[Vulnerability]]:
        """Detect over files in batches, one result list per file, in file order."""
        return await run_in_batches(files, self.detect_vulnerabilities)

    def _display_path(self, file_path: str) -> str:
        path = Path(file_path)
        if not path.is_absolute():
            return file_path
        try:
            return path.relative_to(self.project_root.resolve()).as_posix()
        except ValueError:
            return file_path

    async def _discover(self) -> List[str]:
        return await asyncio.to_thread(
            discover_files,
            self.project_root,
            self.config.include_patterns,
            self.config.exclude_paths,
        )

    async def _perform_scan(self, target_files: Optional[List[str]]) -> ScanReport:
        started = time.monotonic()
        files = target_files if target_files is not None else await self._discover()

        results = await self.scan_files_parallel(files)
        vulnerabilities = [vuln for file_vulns in results for vuln in file_vulns]

        report = ScanReport(
            scan_id=new_scan_id(),
            timestamp=utcnow(),
            project_path=self.project_path,
            status=ScanStatus.COMPLETED,
            vulnerabilities=tuple(vulnerabilities),
            summary=aggregate(vulnerabilities),
            duration=_elapsed_ms(started),
            scanned_files=len(files),
            incremental_scan=True if target_files is not None else None,
            target_files=tuple(target_files) if target_files is not None else None,
            config=self.config,
        )
        logger.info(
            "Scan %s completed: %d file(s), %d vulnerabilit%s in %dms",
            report.scan_id,
            report.scanned_files,
            report.summary.total,
            "y" if report.summary.total == 1 else "ies",
            report.duration,
        )
        return report

    async def _run_guarded(self, target_files: Optional[List[str]]) -> ScanReport:
        """Run the pipeline under the timeout, folding any failure into a report."""
        started = time.monotonic()
        try:
            return await self._with_timeout(self._perform_scan(target_files))
        except ScanTimeoutError as exc:
            logger.warning("%s (%s)", exc, self.project_path)
            status, error = ScanStatus.TIMEOUT, str(exc)
        except Exception as exc:
            logger.exception("Scan of %s failed", self.project_path)
            status, error = ScanStatus.FAILED, str(exc) or type(exc).__name__

        return ScanReport.terminal(
            self.project_path,
            status,
            error,
            duration=_elapsed_ms(started),
            target_files=target_files,
        )

    async def _with_timeout(self, operation: Awaitable[ScanReport]) -> ScanReport:
        task = asyncio.ensure_future(operation)
        if self.timeout is None:
            return await task

        done, _ = await asyncio.wait({task}, timeout=self.timeout)
        if task in done:
            return task.result()

        if self.cancel_on_timeout:
            task.cancel()
        else:
            # Left running; hold a reference until it settles
            self._abandoned.add(task)
            task.add_done_callback(self._abandoned_done)
        raise ScanTimeoutError(self.timeout)

    def _abandoned_done(self, task: asyncio.Task) -> None:
        self._abandoned.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Timed-out scan failed in the background: %s", exc)
        else:
            logger.info("Timed-out scan finished in the background; result discarded")

    async def wait_for_abandoned(self) -> None:
        """Wait for pipelines left running by earlier timeouts."""
        while self._abandoned:
            await asyncio.wait(set(self._abandoned))

    # ── Persistence ──

    async def _store_scan_result(self, report: ScanReport) -> None:
        if self.repository is None:
            return
        await self.repository.store_report(report)

    async def get_scan_result(self, scan_id: str) -> Optional[ScanReport]:
        if self.repository is None:
            return None
        try:
            return await self.repository.get(scan_id)
        except Exception as exc:
            logger.warning("Could not load scan %s: %s", scan_id, exc)
            return None

    async def list_recent_scans(self, limit: int = 20) -> List[ScanReport]:
        if self.repository is None:
            return []
        try:
            return await self.repository.list_recent(limit)
        except Exception as exc:
            logger.warning("Could not list scans: %s", exc)
            return []

    async def cleanup_old_scans(self, days: float, now: Optional[datetime] = None) -> int:
        """Delete stored reports older than ``days``. Returns how many went."""
        if self.repository is None:
            return 0
        deleted = await self.repository.cleanup(days, now=now)
        logger.info("Deleted %d scan report(s) older than %g day(s)", deleted, days)
        return deleted

    async def purge_corrupted_scans(self) -> int:
        """Delete stored entries that no longer parse as reports."""
        if self.repository is None:
            return 0
        deleted = await self.repository.purge_corrupted()
        logger.info("Purged %d corrupted scan report(s)", deleted)
        return deleted

    async def delete_scan_result(self, scan_id: str) -> bool:
        if self.repository is None:
            return False
        return await self.repository.delete(scan_id)

    async def get_storage_statistics(self) -> StorageStatistics:
        if self.repository is None:
            return StorageStatistics()
        return await self.repository.statistics()

    # ── Reports ──

    async def save_report(self, report: ScanReport, fmt: str) -> Path:
        """Render a report as markdown, json or html into output_dir."""
        extension, render = get_renderer(fmt)
        stamp = utcnow().strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        path = self.output_dir / f"{report.scan_id}_{stamp}.{extension}"
        content = render(report)
        await asyncio.to_thread(self._write_report, path, content)
        logger.info("Saved %s report to %s", fmt, path)
        return path

    def _write_report(self, path: Path, content: str) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    @staticmethod
    def generate_summary_statistics(reports: Sequence[ScanReport]) -> SummaryStatistics:
        return generate_summary_statistics(reports)

    # ── Monitoring ──

    def start_continuous_monitoring(
        self,
        interval: float,
        paths: Optional[Sequence[str]] = None,
        auto_fix: bool = False,
    ) -> ContinuousMonitor:
        """Run scan() every ``interval`` seconds. Needs a running event loop."""
        return ContinuousMonitor(self.scan, interval, paths=paths, auto_fix=auto_fix).start()
