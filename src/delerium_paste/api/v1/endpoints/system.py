"""System endpoints exposing public runtime configuration."""

from __future__ import annotations

from fastapi import APIRouter

from delerium_paste.api.v1.dependencies import SettingsDep
from delerium_paste.services.paste_service import IV_MAX_BYTES, IV_MIN_BYTES

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
def get_public_config(settings: SettingsDep) -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes the pepper and connection strings; lets clients size their
    uploads and pick expiry options before posting.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "pow": {
            "enabled": settings.pow_enabled,
            "difficulty": settings.pow_difficulty,
            "ttlSeconds": settings.pow_ttl_seconds,
        },
        "rateLimit": {
            "enabled": settings.rate_limit_enabled,
            "capacity": settings.rate_limit_capacity,
            "refillPerMinute": settings.rate_limit_refill_per_minute,
        },
        "paste": {
            "maxSizeBytes": settings.paste_max_size_bytes,
            "idLength": settings.paste_id_length,
            "minExpirySeconds": settings.paste_min_expiry_seconds,
            "ivBytes": [IV_MIN_BYTES, IV_MAX_BYTES],
        },
    }
