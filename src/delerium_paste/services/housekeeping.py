"""Background pruning of expired pastes and idle rate-limit buckets.

Expired rows are already invisible to readers; pruning only reclaims space.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from delerium_paste.core.errors import StorageError
from delerium_paste.repositories.paste_repo import PasteRepository
from delerium_paste.services.rate_limiter import TokenBucketRateLimiter

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 0.1


class HousekeepingWorker:
    """Periodically deletes expired pastes and sweeps idle rate-limit buckets."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        pepper: str,
        interval_seconds: float,
        rate_limiter: TokenBucketRateLimiter | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            session_factory: Creates a fresh session for each pruning pass.
            pepper: Deletion-token pepper, required to build a repository.
            interval_seconds: Delay between passes.
            rate_limiter: Limiter whose idle buckets should be swept, if any.
        """
        self._session_factory = session_factory
        self._pepper = pepper
        self.interval_seconds = max(MIN_INTERVAL_SECONDS, float(interval_seconds))
        self.rate_limiter = rate_limiter
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    async def start(self) -> None:
        """Start the background loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background loop and wait for it to finish."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    def prune_once(self) -> int:
        """Run one pruning pass synchronously. Returns the number of pastes removed."""
        session = self._session_factory()
        try:
            removed = PasteRepository(session, self._pepper).prune_expired()
        finally:
            session.close()
        if removed:
            logger.info("Pruned %d expired pastes", removed)
        if self.rate_limiter is not None:
            self.rate_limiter.sweep_idle()
        return removed

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.to_thread(self.prune_once)
            except StorageError as e:
                logger.warning("Housekeeping pass failed: %s", e)
            except Exception:
                # The loop outlives any single pass; the next one retries.
                logger.exception("Housekeeping pass failed")
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                continue
