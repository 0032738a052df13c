"""Snapshot cache with periodic background refresh.

Holds at most one :class:`ScanSnapshot` and swaps it for a new one after
each successful scan.  Scans run in a worker thread so the event loop
keeps serving requests; the in-flight guard and the snapshot reference
are only touched from the event loop, so no lock is needed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from agent_dashboard.models import ScanSnapshot

logger = logging.getLogger(__name__)


class SnapshotCache:
    """Serve the latest snapshot immediately; refresh it on a timer."""

    def __init__(
        self,
        scan_fn: Callable[[], ScanSnapshot],
        interval_seconds: float = 30.0,
    ) -> None:
        self._scan_fn = scan_fn
        self.interval = interval_seconds
        self._snapshot: ScanSnapshot | None = None
        self._inflight: asyncio.Task | None = None
        self._running = False
        self._task: asyncio.Task | None = None
        self._ticks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def snapshot(self) -> ScanSnapshot | None:
        """The installed snapshot, or ``None`` before the first scan."""
        return self._snapshot

    @property
    def running(self) -> bool:
        """Whether the refresh timer is active."""
        return self._running

    @property
    def refreshing(self) -> bool:
        """Whether a scan is currently in flight."""
        return self._inflight is not None

    async def get(self) -> ScanSnapshot:
        """Return the cached snapshot, scanning first if there is none.

        On a cold cache this waits for the scan already in flight, or runs
        one.  Errors from that scan propagate to the caller.
        """
        if self._snapshot is not None:
            return self._snapshot
        if self._inflight is not None:
            return await asyncio.shield(self._inflight)
        return await self._scan()

    async def refresh(self) -> bool:
        """Run one background scan.

        Returns ``False`` without scanning if a scan is already in flight,
        and ``False`` if the scan failed (the previous snapshot stays).
        """
        if self._inflight is not None:
            logger.debug("Scan already in progress, skipping refresh")
            return False
        try:
            await self._scan()
        except Exception:
            logger.exception("Background scan failed; keeping previous snapshot")
            return False
        return True

    async def start(self) -> None:
        """Start the refresh timer; the first tick fires immediately."""
        if self._running:
            logger.warning("Snapshot refresh is already running")
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("Snapshot refresh started (interval=%.1fs)", self.interval)

    async def stop(self) -> None:
        """Stop the refresh timer and cancel any pending ticks."""
        self._running = False
        tasks = [t for t in (self._task, *self._ticks) if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._ticks.clear()
        logger.info("Snapshot refresh stopped")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _scan(self) -> ScanSnapshot:
        self._inflight = asyncio.ensure_future(asyncio.to_thread(self._timed_scan))
        try:
            snapshot = await self._inflight
        finally:
            self._inflight = None
        self._snapshot = snapshot
        return snapshot

    def _timed_scan(self) -> ScanSnapshot:
        started = time.monotonic()
        snapshot = self._scan_fn()
        elapsed = time.monotonic() - started
        if elapsed > self.interval:
            logger.warning(
                "Scan took %.1fs, longer than the %.1fs refresh interval; "
                "overlapping ticks will be skipped",
                elapsed,
                self.interval,
            )
        else:
            logger.debug("Scan took %.2fs", elapsed)
        return snapshot

    async def _loop(self) -> None:
        """Timer loop — each tick launches a refresh without waiting on it."""
        while self._running:
            tick = asyncio.create_task(self.refresh())
            self._ticks.add(tick)
            tick.add_done_callback(self._ticks.discard)
            await asyncio.sleep(self.interval)
