"""Service-level orchestration of paste creation, retrieval and deletion."""
from __future__ import annotations

import logging
import time

from delerium_paste.core.errors import (
    DuplicatePasteId,
    Forbidden,
    NotFound,
    ProofOfWorkInvalid,
    ProofOfWorkRequired,
    RateLimited,
    StorageError,
    ValidationError,
)
from delerium_paste.core.pow import PowChallenge
from delerium_paste.core.settings import Settings
from delerium_paste.db.time import Clock, epoch_seconds
from delerium_paste.repositories.paste_repo import PasteRepository
from delerium_paste.schemas.paste import CreatePasteRequest, CreatePasteResponse, PastePayload
from delerium_paste.services.pow import PowService
from delerium_paste.services.rate_limiter import TokenBucketRateLimiter
from delerium_paste.utils.encoding import base64url_size
from delerium_paste.utils.ids import new_delete_token, random_id

logger = logging.getLogger(__name__)

IV_MIN_BYTES = 12
IV_MAX_BYTES = 64
CREATE_ID_ATTEMPTS = 3


class PasteService:
    """Implements the four operations exposed to the routing layer.

    Validation, rate-limit and proof-of-work failures raise before anything
    touches the store.
    """

    def __init__(
        self,
        repo: PasteRepository,
        settings: Settings,
        rate_limiter: TokenBucketRateLimiter | None = None,
        pow_service: PowService | None = None,
        clock: Clock = time.time,
    ) -> None:
        self.repo = repo
        self.settings = settings
        self.rate_limiter = rate_limiter
        self.pow_service = pow_service
        self._clock = clock

    def issue_challenge(self) -> PowChallenge | None:
        """Return a new challenge, or None when proof-of-work is disabled."""
        if self.pow_service is None:
            return None
        return self.pow_service.new_challenge()

    def create_paste(
        self,
        request: CreatePasteRequest,
        client_key: str | None = None,
    ) -> CreatePasteResponse:
        """Validate and store a new paste.

        Args:
            request: Parsed creation request.
            client_key: Rate-limit key for the caller; skipped when None.

        Returns:
            The new paste id and its one-time deletion token.

        Raises:
            RateLimited: Caller's bucket is empty.
            ProofOfWorkRequired: Proof-of-work is enabled and none was supplied.
            ProofOfWorkInvalid: The supplied solution does not verify.
            ValidationError: Size or expiry bounds are violated.
            StorageError: Persistence failed.
        """
        if self.rate_limiter is not None and client_key is not None:
            if not self.rate_limiter.allow(client_key):
                raise RateLimited()

        if self.pow_service is not None:
            if request.pow is None:
                raise ProofOfWorkRequired()
            if not self.pow_service.verify(request.pow.challenge, request.pow.nonce):
                logger.info("Rejected proof-of-work for challenge %s", request.pow.challenge)
                raise ProofOfWorkInvalid()

        self._validate(request)

        delete_token = new_delete_token()
        for _ in range(CREATE_ID_ATTEMPTS):
            paste_id = random_id(self.settings.paste_id_length)
            try:
                self.repo.create(paste_id, request.ct, request.iv, request.meta, delete_token)
            except DuplicatePasteId:
                logger.warning("Paste id collision on %s, retrying", paste_id)
                continue
            logger.info("Created paste %s", paste_id)
            return CreatePasteResponse(id=paste_id, delete_token=delete_token)

        raise StorageError(message="Could not allocate a unique paste id")

    def _validate(self, request: CreatePasteRequest) -> None:
        try:
            ct_size = base64url_size(request.ct)
            iv_size = base64url_size(request.iv)
        except ValueError as err:
            raise ValidationError("size_invalid", str(err)) from err

        if not 0 < ct_size <= self.settings.paste_max_size_bytes:
            raise ValidationError("size_invalid")
        if not IV_MIN_BYTES <= iv_size <= IV_MAX_BYTES:
            raise ValidationError("size_invalid")

        earliest = epoch_seconds(self._clock) + self.settings.paste_min_expiry_seconds
        if request.meta.expire_ts <= earliest:
            raise ValidationError("expiry_too_soon")

    def get_paste(self, paste_id: str) -> PastePayload:
        """Serve one view of a paste.

        Raises:
            NotFound: The paste is absent, expired or already exhausted.
        """
        payload = self.repo.consume_view(paste_id)
        if payload is None:
            raise NotFound()
        return payload

    def delete_paste(self, paste_id: str, token: str) -> None:
        """Delete a paste with its deletion token.

        Raises:
            Forbidden: The token does not match or the paste is gone.
        """
        if not self.repo.delete_if_token_matches(paste_id, token):
            raise Forbidden()
        logger.info("Deleted paste %s by token", paste_id)
