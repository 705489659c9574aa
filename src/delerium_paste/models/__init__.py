# src/delerium_paste/models/__init__.py
"""SQLAlchemy models for the paste server."""

from .paste import Paste

__all__ = ["Paste"]
