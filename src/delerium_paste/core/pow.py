"""Proof-of-Work helpers.

A challenge is solved by finding a decimal nonce such that
``SHA-256(f"{challenge}:{nonce}")`` starts with at least ``difficulty`` zero
bits. Browser clients run the same computation, so the digest input and the
bit counting below must stay byte-for-byte stable.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass

MAX_DIFFICULTY_BITS = 256
CHALLENGE_BYTES = 16


@dataclass(frozen=True)
class PowChallenge:
    """A challenge issued to a client.

    Attributes:
        challenge: Random base64url token, unpadded.
        difficulty: Leading zero bits required in the solution digest.
        expires_at: Unix timestamp (seconds) after which the challenge is void.
    """

    challenge: str
    difficulty: int
    expires_at: int


def pow_digest(challenge: str, nonce: int) -> bytes:
    """Return the SHA-256 digest of ``challenge:nonce``."""
    return hashlib.sha256(f"{challenge}:{nonce}".encode()).digest()


def count_leading_zero_bits(digest: bytes) -> int:
    """Count the number of leading zero bits in a digest."""
    zeros = 0
    for byte in digest:
        if byte == 0:
            zeros += 8
            continue
        # First non-zero byte contributes its own leading zeros, then stop.
        zeros += 8 - byte.bit_length()
        break
    return zeros


def validate_solution(challenge: str, nonce: int, difficulty: int) -> bool:
    """Return True if ``nonce`` solves ``challenge`` at the given difficulty."""
    if not (0 <= difficulty <= MAX_DIFFICULTY_BITS):
        return False
    return count_leading_zero_bits(pow_digest(challenge, nonce)) >= difficulty
