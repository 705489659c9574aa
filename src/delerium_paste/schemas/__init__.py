"""Pydantic schemas for the paste API."""

from .paste import (
    CreatePasteRequest,
    CreatePasteResponse,
    ErrorResponse,
    PasteMeta,
    PastePayload,
    PowSubmission,
)
from .pow import PowChallengeOut

__all__ = [
    "CreatePasteRequest",
    "CreatePasteResponse",
    "ErrorResponse",
    "PasteMeta",
    "PastePayload",
    "PowChallengeOut",
    "PowSubmission",
]
