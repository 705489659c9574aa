"""Proof-of-work challenge issuance and verification.

Difficulty guidelines (expected attempts ~ 2**difficulty):

- 8-10 bits: light, fast in a browser
- 12-14 bits: medium
- 16-18 bits: strong anti-spam, noticeably slow on phones
- 20+ bits: testing or extreme cases
"""

from __future__ import annotations

import base64
import heapq
import logging
import secrets
import threading
import time

from delerium_paste.core.pow import CHALLENGE_BYTES, PowChallenge, validate_solution
from delerium_paste.db.time import Clock, epoch_seconds

logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTSTANDING = 10_000


class PowService:
    """Issues single-use challenges and verifies their solutions.

    Outstanding challenges live only in memory, keyed by token, together with
    their expiry. Lookup and removal share one lock, so a solution cannot be
    redeemed twice even when submitted concurrently.
    """

    def __init__(
        self,
        difficulty: int,
        ttl_seconds: int,
        *,
        max_outstanding: int = DEFAULT_MAX_OUTSTANDING,
        clock: Clock = time.time,
    ) -> None:
        self.difficulty = difficulty
        self.ttl_seconds = ttl_seconds
        self.max_outstanding = max_outstanding
        self._clock = clock
        self._cache: dict[str, int] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._cache)

    def new_challenge(self) -> PowChallenge:
        """Generate and remember a fresh random challenge."""
        now = epoch_seconds(self._clock)
        token = base64.urlsafe_b64encode(secrets.token_bytes(CHALLENGE_BYTES)).decode().rstrip("=")
        expires_at = now + self.ttl_seconds
        with self._lock:
            self._purge_expired(now)
            self._enforce_capacity()
            self._cache[token] = expires_at
        return PowChallenge(challenge=token, difficulty=self.difficulty, expires_at=expires_at)

    def verify(self, challenge: str, nonce: int) -> bool:
        """Check a solution and consume the challenge if it is valid.

        Unknown and expired challenges fail. A wrong nonce fails but leaves the
        challenge usable until it expires.
        """
        now = epoch_seconds(self._clock)
        with self._lock:
            expires_at = self._cache.get(challenge)
            if expires_at is None:
                return False
            if now > expires_at:
                del self._cache[challenge]
                return False

        if not validate_solution(challenge, nonce, self.difficulty):
            return False

        # Only the request that removes the entry redeems the proof.
        with self._lock:
            return self._cache.pop(challenge, None) is not None

    def _purge_expired(self, now: int) -> None:
        expired = [token for token, expires_at in self._cache.items() if expires_at <= now]
        for token in expired:
            del self._cache[token]

    def _enforce_capacity(self) -> None:
        # Leave room for the challenge about to be inserted.
        overflow = len(self._cache) - self.max_outstanding + 1
        if overflow <= 0:
            return
        soonest = heapq.nsmallest(overflow, self._cache.items(), key=lambda item: item[1])
        for token, _ in soonest:
            del self._cache[token]
        logger.warning("PoW challenge cache full; evicted %d challenges", len(soonest))


def build_pow_service(
    enabled: bool,
    difficulty: int,
    ttl_seconds: int,
    max_outstanding: int = DEFAULT_MAX_OUTSTANDING,
) -> PowService | None:
    """Return a proof-of-work service, or None when proof-of-work is disabled."""
    if not enabled:
        return None
    return PowService(difficulty, ttl_seconds, max_outstanding=max_outstanding)
