"""
SecScan Report Repository

Stores scan reports in a key-value store under ``security:scan:{scanId}``
as JSON, with a seven day TTL. Listing and cleanup walk the keys one
round trip at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from secscan.core.errors import ReportParseError
from secscan.core.vulnerability import ScanReport, utcnow
from secscan.storage.store import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "security:scan:"
KEY_PATTERN = KEY_PREFIX + "*"
REPORT_TTL_SECONDS = 7 * 24 * 60 * 60


def report_key(scan_id: str) -> str:
    return f"{KEY_PREFIX}{scan_id}"


@dataclass(frozen=True)
class StorageStatistics:
    total_scans: int = 0
    recent_scans: int = 0
    oldest_scan: Optional[datetime] = None
    newest_scan: Optional[datetime] = None


class ReportRepository:
    def __init__(self, store: KeyValueStore, ttl_seconds: int = REPORT_TTL_SECONDS) -> None:
        self.store = store
        self.ttl_seconds = ttl_seconds

    async def store_report(self, report: ScanReport) -> None:
        """Write a report. Store failures propagate to the caller."""
        await self.store.set(report_key(report.scan_id), report.to_json(), ttl_seconds=self.ttl_seconds)

    async def get(self, scan_id: str) -> Optional[ScanReport]:
        """Fetch one report; raises ReportParseError for a malformed entry."""
        data = await self.store.get(report_key(scan_id))
        if data is None:
            return None
        return ScanReport.from_json(data)

    async def _load_all(self) -> list[tuple[str, Optional[ScanReport]]]:
        """Every live key with its parsed report, or None where parsing failed."""
        entries: list[tuple[str, Optional[ScanReport]]] = []
        for key in await self.store.keys(KEY_PATTERN):
            data = await self.store.get(key)
            if data is None:
                continue
            try:
                entries.append((key, ScanReport.from_json(data)))
            except ReportParseError as exc:
                logger.warning("Skipping corrupted scan report %s: %s", key, exc)
                entries.append((key, None))
        return entries

    async def list_recent(self, limit: int) -> list[ScanReport]:
        reports = [report for _, report in await self._load_all() if report is not None]
        reports.sort(key=lambda r: r.timestamp, reverse=True)
        return reports[:max(limit, 0)]

    async def cleanup(self, days: float, now: Optional[datetime] = None) -> int:
        """Delete reports older than ``days``; corrupted entries are left alone."""
        cutoff = (now or utcnow()) - timedelta(days=days)
        deleted = 0
        for key, report in await self._load_all():
            if report is not None and report.timestamp < cutoff:
                deleted += await self.store.delete(key)
        return deleted

    async def purge_corrupted(self) -> int:
        deleted = 0
        for key, report in await self._load_all():
            if report is None:
                deleted += await self.store.delete(key)
        return deleted

    async def delete(self, scan_id: str) -> bool:
        return await self.store.delete(report_key(scan_id)) == 1

    async def statistics(self, now: Optional[datetime] = None) -> StorageStatistics:
        keys = await self.store.keys(KEY_PATTERN)
        if not keys:
            return StorageStatistics()

        one_day_ago = (now or utcnow()) - timedelta(days=1)
        timestamps = [r.timestamp for _, r in await self._load_all() if r is not None]

        return StorageStatistics(
            total_scans=len(keys),
            recent_scans=sum(1 for ts in timestamps if ts > one_day_ago),
            oldest_scan=min(timestamps) if timestamps else None,
            newest_scan=max(timestamps) if timestamps else None,
        )
