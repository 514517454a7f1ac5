"""
SecScan Continuous Monitor

Re-runs a full scan on a fixed interval until stopped. Each tick starts
its scan as a separate task, so a scan slower than the interval overlaps
with the next one. stop() ends the timer only; a scan already running is
left to finish and persist its report.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

logger = logging.getLogger(__name__)


class ContinuousMonitor:
    def __init__(
        self,
        scan: Callable[[], Awaitable[object]],
        interval: float,
        paths: Optional[Sequence[str]] = None,
        auto_fix: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._scan = scan
        self._interval = interval
        # Recorded for callers; scans always cover the scanner's project root
        self.paths = list(paths) if paths else []
        self.auto_fix = auto_fix
        self._running = False
        self._timer: Optional[asyncio.Task] = None
        self._scans: set[asyncio.Task] = set()

    def start(self) -> "ContinuousMonitor":
        """Schedule the timer on the running event loop."""
        if self._running:
            return self
        self._running = True
        self._timer = asyncio.get_running_loop().create_task(self._tick_forever())
        logger.info("Continuous monitoring started (every %gs)", self._interval)
        return self

    def is_running(self) -> bool:
        return self._running

    def get_interval(self) -> float:
        return self._interval

    @property
    def active_scans(self) -> int:
        return len(self._scans)

    def stop(self) -> None:
        self._running = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        logger.info("Continuous monitoring stopped")

    async def wait_for_scans(self) -> None:
        """Wait until every scan started by this monitor has finished."""
        while self._scans:
            await asyncio.wait(set(self._scans))

    async def _tick_forever(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if not self._running:
                return
            logger.info("Monitor tick: starting scan")
            task = asyncio.ensure_future(self._scan())
            self._scans.add(task)
            task.add_done_callback(self._scan_done)

    def _scan_done(self, task: asyncio.Task) -> None:
        self._scans.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Monitored scan raised: %s", exc, exc_info=exc)
