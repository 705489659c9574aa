"""Token bucket rate limiting for paste creation.

Each key (typically ``"POST:<client address>"``) owns a bucket holding up to
``capacity`` tokens that refill continuously at ``refill_per_minute``. Every
allowed request consumes one token, so short bursts pass while the long-run
rate stays bounded.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass, field

from delerium_paste.db.time import Clock

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60.0
MIN_IDLE_TTL_SECONDS = 60.0
DEFAULT_SWEEP_INTERVAL = 1024


@dataclass
class RateBucket:
    """Mutable state for a single key."""

    tokens: float
    last: float
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    evicted: bool = False


class TokenBucketRateLimiter:
    """Thread-safe per-key token bucket.

    Refill and consume for one key happen under that bucket's lock, so two
    concurrent requests cannot both spend the last token. The key map has its
    own lock, taken only to insert new buckets and to sweep idle ones.
    """

    def __init__(
        self,
        capacity: int,
        refill_per_minute: float,
        *,
        idle_ttl_seconds: float | None = None,
        sweep_interval: int = DEFAULT_SWEEP_INTERVAL,
        clock: Clock = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if refill_per_minute < 0:
            raise ValueError("refill_per_minute must not be negative")
        self.capacity = capacity
        self.refill_per_minute = refill_per_minute
        self._clock = clock
        self._buckets: dict[str, RateBucket] = {}
        self._map_lock = threading.Lock()
        self._calls = itertools.count(1)
        self._sweep_interval = max(1, sweep_interval)
        if idle_ttl_seconds is None and refill_per_minute > 0:
            # A bucket idle this long has refilled completely, so dropping it is lossless.
            refill_seconds = capacity / refill_per_minute * SECONDS_PER_MINUTE
            idle_ttl_seconds = max(MIN_IDLE_TTL_SECONDS, refill_seconds)
        self.idle_ttl_seconds = idle_ttl_seconds

    def __len__(self) -> int:
        return len(self._buckets)

    def _bucket(self, key: str, now: float) -> RateBucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            with self._map_lock:
                bucket = self._buckets.setdefault(key, RateBucket(float(self.capacity), now))
        return bucket

    def allow(self, key: str) -> bool:
        """Consume one token for ``key`` if available.

        Returns:
            True if the request is allowed, False if rate limited.
        """
        now = self._clock()
        while True:
            bucket = self._bucket(key, now)
            with bucket.lock:
                if bucket.evicted:
                    continue
                # A clock that steps backwards yields no refill rather than a debit.
                elapsed = max(0.0, now - bucket.last)
                refill = elapsed / SECONDS_PER_MINUTE * self.refill_per_minute
                bucket.tokens = min(float(self.capacity), bucket.tokens + refill)
                bucket.last = max(bucket.last, now)
                allowed = bucket.tokens >= 1.0
                if allowed:
                    bucket.tokens -= 1.0
            break

        if next(self._calls) % self._sweep_interval == 0:
            self.sweep_idle(now)
        if not allowed:
            logger.debug("Rate limit exceeded for %s", key)
        return allowed

    def sweep_idle(self, now: float | None = None) -> int:
        """Drop buckets untouched for ``idle_ttl_seconds``.

        Returns:
            Number of buckets removed.
        """
        if self.idle_ttl_seconds is None:
            return 0
        cutoff = (self._clock() if now is None else now) - self.idle_ttl_seconds
        removed = 0
        with self._map_lock:
            for key, bucket in list(self._buckets.items()):
                with bucket.lock:
                    if bucket.last > cutoff:
                        continue
                    bucket.evicted = True
                del self._buckets[key]
                removed += 1
        if removed:
            logger.debug("Swept %d idle rate-limit buckets", removed)
        return removed
