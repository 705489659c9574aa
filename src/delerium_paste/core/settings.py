"""Application settings and configuration.

This module defines all configuration options for the Delerium paste server.
Settings are loaded from environment variables with sensible defaults.
"""

import json
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Delerium Paste", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./pastes.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=True, alias="AUTO_CREATE_TABLES")

    # Secret mixed into every deletion-token hash. When unset a random pepper is
    # generated at startup, which invalidates tokens issued before a restart.
    deletion_token_pepper: str | None = Field(default=None, alias="DELETION_TOKEN_PEPPER")

    # Proof-of-Work (leading zero bits required in SHA-256(challenge:nonce))
    pow_enabled: bool = Field(default=True, alias="POW_ENABLED")
    pow_difficulty: int = Field(default=10, ge=0, le=256, alias="POW_DIFFICULTY")
    pow_ttl_seconds: int = Field(default=180, gt=0, alias="POW_TTL_SECONDS")
    pow_max_outstanding: int = Field(default=10_000, gt=0, alias="POW_MAX_OUTSTANDING")

    # Token bucket rate limiting for paste creation
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_capacity: int = Field(default=10, gt=0, alias="RATE_LIMIT_CAPACITY")
    rate_limit_refill_per_minute: float = Field(
        default=10.0,
        ge=0,
        alias="RATE_LIMIT_REFILL_PER_MINUTE",
    )
    rate_limit_idle_ttl_seconds: float | None = Field(
        default=None,
        alias="RATE_LIMIT_IDLE_TTL_SECONDS",
    )

    # Paste limits
    paste_max_size_bytes: int = Field(default=1_048_576, gt=0, alias="PASTE_MAX_SIZE_BYTES")
    paste_id_length: int = Field(default=10, ge=6, le=32, alias="PASTE_ID_LENGTH")
    paste_min_expiry_seconds: int = Field(default=10, ge=0, alias="PASTE_MIN_EXPIRY_SECONDS")

    # Reverse proxies whose X-Forwarded-For header is trusted
    trusted_proxy_ips: Annotated[list[str], NoDecode] = Field(default=[], alias="TRUSTED_PROXY_IPS")

    # Background pruning of expired pastes and idle rate-limit buckets (0 disables)
    housekeeping_interval_seconds: float = Field(
        default=300.0,
        ge=0,
        alias="HOUSEKEEPING_INTERVAL_SECONDS",
    )

    # CORS configuration for the browser client
    cors_origins: Annotated[list[str], NoDecode] = Field(default=["*"], alias="CORS_ORIGINS")

    @field_validator("trusted_proxy_ips", "cors_origins", mode="before")
    @classmethod
    def split_comma_list(cls, v: object) -> object:
        """Accept ``a,b,c`` or a JSON array for list settings read from the environment."""
        if not isinstance(v, str):
            return v
        text = v.strip()
        if text.startswith("["):
            return json.loads(text)
        return [item.strip() for item in text.split(",") if item.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        populate_by_name=True,
        extra="ignore",
    )


settings = Settings()
