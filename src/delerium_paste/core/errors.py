"""Exceptions raised by the paste core and translated by the API layer."""

from __future__ import annotations


class PasteServiceError(RuntimeError):
    """Base exception for all failures reported to API callers.

    Attributes:
        code: Stable error string returned to clients as ``{"error": code}``.
        status_code: HTTP status used by the API layer.
    """

    code: str = "error"
    status_code: int = 500

    def __init__(self, code: str | None = None, message: str | None = None) -> None:
        if code is not None:
            self.code = code
        super().__init__(message or self.code)


class ValidationError(PasteServiceError):
    """Malformed or out-of-bounds input, rejected before touching the store."""

    code = "invalid_request"
    status_code = 400


class RateLimited(PasteServiceError):
    """The caller has exhausted its token bucket."""

    code = "rate_limited"
    status_code = 429


class ProofOfWorkRequired(PasteServiceError):
    code = "pow_required"
    status_code = 400


class ProofOfWorkInvalid(PasteServiceError):
    code = "pow_invalid"
    status_code = 400


class NotFound(PasteServiceError):
    """Paste is absent or expired; the two cases are indistinguishable."""

    code = "not_found"
    status_code = 404


class Forbidden(PasteServiceError):
    """Deletion token does not match."""

    code = "invalid_token"
    status_code = 403


class StorageError(PasteServiceError):
    """Persistence failure. Details are logged, never returned to clients."""

    code = "db_error"
    status_code = 500


class DuplicatePasteId(StorageError):
    """Raised when an insert collides with an existing paste id."""
