"""Deletion-token hashing built on a process-wide pepper."""
from __future__ import annotations

import hashlib
import hmac
import logging
import secrets

logger = logging.getLogger(__name__)

PEPPER_BYTES = 32


def generate_pepper(length_bytes: int = PEPPER_BYTES) -> str:
    """Return a hex-encoded random pepper."""
    return secrets.token_hex(length_bytes)


def resolve_pepper(configured: str | None) -> str:
    """Return the configured pepper, generating one if none is set.

    A generated pepper lives only as long as the process, so every deletion
    token issued before a restart stops working.
    """
    if configured and configured.strip():
        return configured
    logger.warning(
        "DELETION_TOKEN_PEPPER not set; generated a random pepper. Deletion tokens "
        "will not survive a restart. Set DELETION_TOKEN_PEPPER explicitly in production."
    )
    return generate_pepper()


def hash_delete_token(pepper: str, raw_token: str) -> str:
    """Return the hex HMAC-SHA256 of ``raw_token`` keyed with ``pepper``."""
    return hmac.new(pepper.encode("utf-8"), raw_token.encode("utf-8"), hashlib.sha256).hexdigest()


def delete_token_matches(pepper: str, raw_token: str, stored_hash: str) -> bool:
    """Compare a presented token against a stored hash in constant time."""
    candidate = hash_delete_token(pepper, raw_token)
    return hmac.compare_digest(candidate.encode("ascii"), stored_hash.encode("ascii"))
