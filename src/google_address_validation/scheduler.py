"""Expired cache entry purge scheduler.

Expired entries are already ignored on read; this loop removes the ones
nobody looks up again so neither backend grows without bound. Uses asyncio
tasks, no external scheduler dependency.
"""

from __future__ import annotations

import asyncio
import logging

from .cache import ManagedCache
from .config import purge_interval_seconds

logger = logging.getLogger(__name__)


class CachePurgeScheduler:
    """Periodically deletes expired entries from a response cache."""

    def __init__(self, cache: ManagedCache, interval_seconds: int | None = None):
        self._cache = cache
        self._task: asyncio.Task | None = None
        self._running = False
        self._interval_seconds = interval_seconds if interval_seconds is not None else purge_interval_seconds()

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the background purge loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Cache purge scheduler started (interval: %d minutes)", self._interval_seconds // 60)

    async def stop(self):
        """Stop the background purge loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Cache purge scheduler stopped")

    async def purge_once(self) -> int:
        removed = await self._cache.purge_expired()
        if removed:
            logger.info("Purged %d expired cached responses", removed)
        return removed

    async def _run_loop(self):
        while self._running:
            try:
                await self.purge_once()
                await asyncio.sleep(self._interval_seconds)
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.error("Scheduled cache purge failed: %s", exc, exc_info=True)
                await asyncio.sleep(60)
