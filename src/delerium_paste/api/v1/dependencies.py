"""Shared API dependencies: sessions, settings, services and client identity."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from delerium_paste.core.settings import Settings
from delerium_paste.db.session import get_db
from delerium_paste.repositories.paste_repo import PasteRepository
from delerium_paste.services.paste_service import PasteService

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_settings(request: Request) -> Settings:
    """Return the settings the running application was built with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_paste_service(request: Request, db: SessionDep, settings: SettingsDep) -> PasteService:
    """Build a paste service bound to this request's session.

    The rate limiter and proof-of-work service are long-lived and shared by
    every request; only the repository is per request.
    """
    state = request.app.state
    return PasteService(
        PasteRepository(db, state.pepper),
        settings,
        rate_limiter=state.rate_limiter,
        pow_service=state.pow_service,
    )


PasteServiceDep = Annotated[PasteService, Depends(get_paste_service)]


def client_ip(request: Request, settings: SettingsDep) -> str:
    """Return the caller's address.

    ``X-Forwarded-For`` is honoured only when the direct peer is a trusted proxy;
    otherwise any client could pick its own rate-limit key.
    """
    remote = request.client.host if request.client else "unknown"
    if not settings.trusted_proxy_ips or remote not in settings.trusted_proxy_ips:
        return remote
    header = request.headers.get("x-forwarded-for")
    if not header:
        return remote
    for candidate in header.split(","):
        candidate = candidate.strip()
        if candidate:
            return candidate
    return remote


ClientIpDep = Annotated[str, Depends(client_ip)]
