"""Paste-related Pydantic schemas.

Field names on the wire are camelCase to match the browser client.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PasteMeta(BaseModel):
    """Metadata stored alongside a paste and echoed back on retrieval."""

    model_config = ConfigDict(populate_by_name=True)

    expire_ts: int = Field(..., alias="expireTs", description="Unix timestamp of expiry")
    views_allowed: int | None = Field(
        None,
        alias="viewsAllowed",
        ge=1,
        description="Maximum number of views (null = unlimited)",
    )
    mime: str | None = Field(None, max_length=128, description="Content type hint")
    single_view: bool | None = Field(
        None,
        alias="singleView",
        description="Delete the paste after its first view",
    )


class PowSubmission(BaseModel):
    """Solution to a challenge obtained from ``GET /api/pow``."""

    challenge: str = Field(..., min_length=1, max_length=128)
    nonce: int


class CreatePasteRequest(BaseModel):
    """Schema for creating a new paste."""

    ct: str = Field(..., description="Ciphertext, base64url encoded")
    iv: str = Field(..., description="Encryption IV, base64url encoded")
    meta: PasteMeta
    pow: PowSubmission | None = None


class CreatePasteResponse(BaseModel):
    """Identifiers handed to the creator. The delete token is never shown again."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    delete_token: str = Field(..., alias="deleteToken")


class PastePayload(BaseModel):
    """Encrypted paste returned to readers."""

    model_config = ConfigDict(populate_by_name=True)

    ct: str
    iv: str
    meta: PasteMeta
    views_left: int | None = Field(None, alias="viewsLeft")


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    error: str
