"""Schemas related to proof-of-work challenges."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PowChallengeOut(BaseModel):
    """API response payload for issuing a proof-of-work challenge."""

    model_config = ConfigDict(populate_by_name=True)

    challenge: str
    difficulty: int
    expires_at: int = Field(..., alias="expiresAt")
