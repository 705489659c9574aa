# src/delerium_paste/api/v1/endpoints/pastes.py
"""Paste endpoints: create, read and delete encrypted pastes."""

from fastapi import APIRouter, Response, status

from delerium_paste.api.v1.dependencies import ClientIpDep, PasteServiceDep
from delerium_paste.core.errors import ValidationError
from delerium_paste.schemas.paste import (
    CreatePasteRequest,
    CreatePasteResponse,
    ErrorResponse,
    PastePayload,
)

router = APIRouter(prefix="/pastes", tags=["pastes"])


@router.post(
    "",
    response_model=CreatePasteResponse,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def create_paste(
    body: CreatePasteRequest,
    paste_service: PasteServiceDep,
    ip: ClientIpDep,
) -> CreatePasteResponse:
    """Create a new encrypted paste.

    Checks run in order: rate limit, proof-of-work, ciphertext/IV size, expiry.

    Returns:
        The paste id and a deletion token that is never shown again.
    """
    return paste_service.create_paste(body, client_key=f"POST:{ip}")


@router.get(
    "/{paste_id}",
    response_model=PastePayload,
    responses={404: {"model": ErrorResponse}},
)
def get_paste(paste_id: str, paste_service: PasteServiceDep) -> PastePayload:
    """Retrieve an encrypted paste, counting the view.

    Single-view pastes and pastes reaching their view limit are deleted as
    part of this request.
    """
    return paste_service.get_paste(paste_id)


@router.delete(
    "/{paste_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def delete_paste(
    paste_id: str,
    paste_service: PasteServiceDep,
    token: str | None = None,
) -> Response:
    """Delete a paste using the token returned at creation."""
    if not token:
        raise ValidationError("missing_token")
    paste_service.delete_paste(paste_id, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
