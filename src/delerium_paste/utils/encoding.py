"""Helpers for the base64url transport encoding used by clients."""

from __future__ import annotations

import re

_BASE64URL_RE = re.compile(r"[A-Za-z0-9_-]*={0,2}")


def base64url_size(data: str) -> int:
    """Return the decoded byte length of a base64url string without decoding it.

    Padding is optional.

    Raises:
        ValueError: If ``data`` is not valid base64url.
    """
    if not _BASE64URL_RE.fullmatch(data):
        raise ValueError("Invalid base64url alphabet")
    stripped = data.rstrip("=")
    remainder = len(stripped) % 4
    if remainder == 1:
        raise ValueError("Invalid base64url length")
    # Each full quad yields 3 bytes; a trailing 2 or 3 chars yield 1 or 2.
    return (len(stripped) // 4) * 3 + max(0, remainder - 1)
