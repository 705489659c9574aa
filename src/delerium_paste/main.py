# src/delerium_paste/main.py
"""Main entry point for the Delerium paste server."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from delerium_paste.api.v1 import pastes_router, pow_router, system_router
from delerium_paste.core.errors import PasteServiceError, StorageError
from delerium_paste.core.security import resolve_pepper
from delerium_paste.core.settings import Settings, settings as default_settings
from delerium_paste.db.session import SessionLocal, create_tables
from delerium_paste.services.housekeeping import HousekeepingWorker
from delerium_paste.services.pow import build_pow_service
from delerium_paste.services.rate_limiter import TokenBucketRateLimiter

logger = logging.getLogger(__name__)

SECURITY_HEADERS: dict[str, str] = {
    "Referrer-Policy": "no-referrer",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self'; style-src 'self' 'unsafe-inline'; "
        "base-uri 'none'; frame-ancestors 'none'; form-action 'self';"
    ),
    "Permissions-Policy": (
        "accelerometer=(), geolocation=(), camera=(), microphone=(), payment=(), usb=()"
    ),
    "Cross-Origin-Embedder-Policy": "require-corp",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application and its long-lived services.

    The rate limiter and challenge cache are owned by the app (``app.state``)
    and shared by all requests.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Delerium Paste API",
        description="Zero-knowledge encrypted paste storage",
        version=settings.app_version,
    )

    app.state.settings = settings
    app.state.pepper = resolve_pepper(settings.deletion_token_pepper)
    app.state.rate_limiter = (
        TokenBucketRateLimiter(
            settings.rate_limit_capacity,
            settings.rate_limit_refill_per_minute,
            idle_ttl_seconds=settings.rate_limit_idle_ttl_seconds,
        )
        if settings.rate_limit_enabled
        else None
    )
    app.state.pow_service = build_pow_service(
        settings.pow_enabled,
        settings.pow_difficulty,
        settings.pow_ttl_seconds,
        settings.pow_max_outstanding,
    )
    app.state.housekeeping = None

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=["Content-Type"],
    )

    # Add GZip middleware for compression
    app.add_middleware(GZipMiddleware)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):  # type: ignore[no-untyped-def]
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.exception_handler(PasteServiceError)
    async def handle_paste_error(request: Request, exc: PasteServiceError) -> JSONResponse:
        if isinstance(exc, StorageError):
            logger.error(
                "Storage failure during %s %s", request.method, request.url.path, exc_info=exc
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.code})

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected malformed request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "invalid_json"})

    # Include API routers
    app.include_router(pow_router, prefix="/api")
    app.include_router(pastes_router, prefix="/api")
    app.include_router(system_router, prefix="/api")

    @app.on_event("startup")
    async def on_startup() -> None:
        if settings.auto_create_tables:
            create_tables()
        if settings.housekeeping_interval_seconds > 0:
            worker = HousekeepingWorker(
                SessionLocal,
                app.state.pepper,
                settings.housekeeping_interval_seconds,
                rate_limiter=app.state.rate_limiter,
            )
            await worker.start()
            app.state.housekeeping = worker

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        worker: HousekeepingWorker | None = getattr(app.state, "housekeeping", None)
        if worker:
            await worker.stop()

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("delerium_paste.main:app", host="0.0.0.0", port=8080, reload=default_settings.debug)
