# src/delerium_paste/api/v1/endpoints/pow.py
"""Proof-of-work challenge endpoint."""

from fastapi import APIRouter, Response, status

from delerium_paste.api.v1.dependencies import PasteServiceDep
from delerium_paste.schemas.pow import PowChallengeOut

router = APIRouter(prefix="/pow", tags=["pow"])


@router.get(
    "",
    response_model=PowChallengeOut,
    responses={204: {"description": "Proof-of-work is disabled"}},
)
def get_challenge(paste_service: PasteServiceDep) -> PowChallengeOut | Response:
    """Issue a proof-of-work challenge for the next paste creation.

    Returns 204 No Content when proof-of-work is disabled.
    """
    challenge = paste_service.issue_challenge()
    if challenge is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return PowChallengeOut(
        challenge=challenge.challenge,
        difficulty=challenge.difficulty,
        expires_at=challenge.expires_at,
    )
