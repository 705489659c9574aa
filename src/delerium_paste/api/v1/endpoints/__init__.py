# src/delerium_paste/api/v1/endpoints/__init__.py
"""API endpoint modules."""

from .pastes import router as pastes_router
from .pow import router as pow_router
from .system import router as system_router

__all__ = [
    "pastes_router",
    "pow_router",
    "system_router",
]
