# src/delerium_paste/api/v1/__init__.py
"""Paste API endpoints."""

from .endpoints import pastes_router, pow_router, system_router

__all__ = [
    "pastes_router",
    "pow_router",
    "system_router",
]
