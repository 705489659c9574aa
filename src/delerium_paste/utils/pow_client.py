"""Client-side proof-of-work utilities.

Mirrors what the browser client does so tests and scripts can obtain valid
solutions for server-issued challenges.
"""

from __future__ import annotations

from delerium_paste.core.pow import count_leading_zero_bits, pow_digest


def find_pow_solution(
    challenge: str,
    target_bits: int,
    max_attempts: int = 10_000_000,
    start: int = 0,
) -> tuple[int, bool]:
    """Find a proof-of-work solution by brute force.

    Args:
        challenge: Challenge string from the server
        target_bits: Required number of leading zero bits
        max_attempts: Maximum number of attempts before giving up
        start: First nonce to try

    Returns:
        Tuple of (nonce, success) where success indicates if a solution was found
    """
    for nonce in range(start, start + max_attempts):
        if count_leading_zero_bits(pow_digest(challenge, nonce)) >= target_bits:
            return nonce, True

    return 0, False


def find_failing_nonce(challenge: str, target_bits: int, max_attempts: int = 1_000) -> int:
    """Return a nonce that does *not* solve the challenge.

    Raises:
        ValueError: If every nonce tried happens to satisfy the target.
    """
    for nonce in range(max_attempts):
        if count_leading_zero_bits(pow_digest(challenge, nonce)) < target_bits:
            return nonce
    raise ValueError("No failing nonce found; target difficulty is too low")
