# src/delerium_paste/services/__init__.py
"""Business logic services for the paste server."""

from .housekeeping import HousekeepingWorker
from .paste_service import PasteService
from .pow import PowService
from .rate_limiter import TokenBucketRateLimiter

__all__ = [
    "HousekeepingWorker",
    "PasteService",
    "PowService",
    "TokenBucketRateLimiter",
]
