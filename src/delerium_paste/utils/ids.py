"""Random identifier generation."""

from __future__ import annotations

import secrets
import string

ID_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
DELETE_TOKEN_LENGTH = 24


def random_id(length: int) -> str:
    """Return a cryptographically random ``[0-9a-zA-Z]`` string of ``length`` chars."""
    if length <= 0:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def new_delete_token() -> str:
    """Return a fresh raw deletion token."""
    return random_id(DELETE_TOKEN_LENGTH)
