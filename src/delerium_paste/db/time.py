# src/delerium_paste/db/time.py
"""Time utilities for database models."""

import time
from collections.abc import Callable

Clock = Callable[[], float]


def epoch_seconds(clock: Clock = time.time) -> int:
    """Return the current Unix time in whole seconds."""
    return int(clock())
