"""Data access helpers for working with pastes."""
from __future__ import annotations

import logging
import time

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from delerium_paste.core.errors import DuplicatePasteId, StorageError
from delerium_paste.core.security import delete_token_matches, hash_delete_token
from delerium_paste.db.time import Clock, epoch_seconds
from delerium_paste.models.paste import Paste
from delerium_paste.schemas.paste import PasteMeta, PastePayload

__all__ = ["PasteRepository", "MAX_CONSUME_ATTEMPTS"]

logger = logging.getLogger(__name__)

# Bound on re-reads after losing a view race; each loss means the paste moved toward deletion.
MAX_CONSUME_ATTEMPTS = 8

_NO_SYNC = {"synchronize_session": False}


class PasteRepository:
    """Persistence and lifecycle rules for paste rows.

    Every mutating method commits its own unit of work. Database errors roll
    the session back and surface as `StorageError`, so nothing applies partially.
    """

    def __init__(self, session: Session, pepper: str, clock: Clock = time.time) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy session used for all statements.
            pepper: Server secret mixed into deletion-token hashes.
            clock: Source of the current Unix time, injectable for tests.
        """
        self.session = session
        self._pepper = pepper
        self._clock = clock

    def _now(self) -> int:
        return epoch_seconds(self._clock)

    def _fail(self, err: SQLAlchemyError, action: str) -> StorageError:
        self.session.rollback()
        return StorageError(message=f"Failed to {action}: {err.__class__.__name__}")

    def create(
        self,
        paste_id: str,
        ct: str,
        iv: str,
        meta: PasteMeta,
        raw_delete_token: str,
    ) -> None:
        """Insert a new paste with zero views used.

        Raises:
            DuplicatePasteId: If ``paste_id`` is already taken.
            StorageError: On any other persistence failure.
        """
        stmt = insert(Paste).values(
            id=paste_id,
            ct=ct,
            iv=iv,
            expire_ts=meta.expire_ts,
            views_allowed=meta.views_allowed,
            views_used=0,
            single_view=bool(meta.single_view),
            mime=meta.mime,
            delete_token_hash=hash_delete_token(self._pepper, raw_delete_token),
            created_at=self._now(),
        )
        try:
            self.session.execute(stmt)
            self.session.commit()
        except IntegrityError as err:
            self.session.rollback()
            raise DuplicatePasteId(message=f"Paste id {paste_id} already exists") from err
        except SQLAlchemyError as err:
            raise self._fail(err, "insert paste") from err

    def get_if_available(self, paste_id: str) -> Paste | None:
        """Return the paste if it exists and has not expired."""
        stmt = (
            select(Paste)
            .where(Paste.id == paste_id, Paste.expire_ts > self._now())
            .execution_options(populate_existing=True)
        )
        try:
            return self.session.execute(stmt).scalars().first()
        except SQLAlchemyError as err:
            raise self._fail(err, "read paste") from err

    @staticmethod
    def should_delete_after_view(paste: Paste) -> bool:
        """Return True if serving one more view exhausts the paste."""
        if paste.single_view:
            return True
        allowed = paste.views_allowed
        return allowed is not None and paste.views_used + 1 >= allowed

    @staticmethod
    def to_payload(paste: Paste) -> PastePayload:
        """Build the reader payload for the view currently being served."""
        allowed = paste.views_allowed
        views_left = None if allowed is None else max(0, allowed - (paste.views_used + 1))
        return PastePayload(
            ct=paste.ct,
            iv=paste.iv,
            meta=PasteMeta(
                expire_ts=paste.expire_ts,
                views_allowed=allowed,
                mime=paste.mime,
                single_view=paste.single_view,
            ),
            views_left=views_left,
        )

    def consume_view(self, paste_id: str) -> PastePayload | None:
        """Serve one view of a paste, deleting or counting it atomically.

        Counting a non-final view is a single increment guarded by the limit,
        so concurrent readers never conflict on it. Only the final view
        deletes, and that delete applies only while ``views_used`` still
        matches the read; a reader that loses it re-reads and sees the paste
        gone. A single-view paste is therefore served once.

        Returns:
            The payload, or None if the paste is absent, expired or exhausted.

        Raises:
            StorageError: On persistence failure or persistent contention.
        """
        for attempt in range(1, MAX_CONSUME_ATTEMPTS + 1):
            paste = self.get_if_available(paste_id)
            if paste is None:
                return None

            # Commit expires the instance, so the payload is taken first.
            payload = self.to_payload(paste)
            if self.should_delete_after_view(paste):
                served = self._delete_final_view(paste_id, paste.views_used)
            else:
                served = self._count_view(paste_id, payload)
            if served:
                return payload
            logger.debug("View race on paste %s (attempt %d), re-reading", paste_id, attempt)

        raise StorageError(message=f"Gave up recording a view of paste {paste_id}")

    def _delete_final_view(self, paste_id: str, views_used: int) -> bool:
        stmt = delete(Paste).where(Paste.id == paste_id, Paste.views_used == views_used)
        try:
            applied = self.session.execute(stmt, execution_options=_NO_SYNC).rowcount
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(err, "record paste view") from err
        if applied:
            logger.info("Paste %s removed after final view", paste_id)
        return applied > 0

    def _count_view(self, paste_id: str, payload: PastePayload) -> bool:
        allowed = payload.meta.views_allowed
        stmt = (
            update(Paste)
            .where(Paste.id == paste_id, Paste.expire_ts > self._now())
            .values(views_used=Paste.views_used + 1)
            .returning(Paste.views_used)
        )
        if allowed is not None:
            # Leaves the final view to the guarded delete.
            stmt = stmt.where(Paste.views_used + 1 < Paste.views_allowed)
        try:
            counted = self.session.execute(stmt, execution_options=_NO_SYNC).scalar_one_or_none()
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(err, "record paste view") from err
        if counted is None:
            return False
        if allowed is not None:
            # Other readers may have counted since the read.
            payload.views_left = max(0, allowed - counted)
        return True

    def increment_views(self, paste_id: str) -> bool:
        """Count one view unless the view limit is already reached.

        Returns:
            True if the counter moved.
        """
        stmt = (
            update(Paste)
            .where(
                Paste.id == paste_id,
                or_(Paste.views_allowed.is_(None), Paste.views_used < Paste.views_allowed),
            )
            .values(views_used=Paste.views_used + 1)
        )
        try:
            applied = self.session.execute(stmt, execution_options=_NO_SYNC).rowcount
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(err, "increment views") from err
        return applied > 0

    def delete(self, paste_id: str) -> bool:
        """Delete a paste unconditionally. Returns True if a row was removed."""
        try:
            removed = self.session.execute(
                delete(Paste).where(Paste.id == paste_id), execution_options=_NO_SYNC
            ).rowcount
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(err, "delete paste") from err
        return removed > 0

    def delete_if_token_matches(self, paste_id: str, raw_token: str) -> bool:
        """Delete a paste if ``raw_token`` hashes to its stored deletion hash.

        Returns:
            True if a row was removed; False on mismatch or missing paste.
        """
        try:
            stored = self.session.execute(
                select(Paste.delete_token_hash).where(Paste.id == paste_id)
            ).scalar_one_or_none()
        except SQLAlchemyError as err:
            raise self._fail(err, "read paste") from err

        if stored is None or not delete_token_matches(self._pepper, raw_token, stored):
            return False

        try:
            removed = self.session.execute(
                delete(Paste).where(Paste.id == paste_id, Paste.delete_token_hash == stored),
                execution_options=_NO_SYNC,
            ).rowcount
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(err, "delete paste") from err
        return removed > 0

    def prune_expired(self, now: int | None = None) -> int:
        """Delete rows whose expiry has passed. Returns the number removed."""
        cutoff = self._now() if now is None else now
        try:
            removed = self.session.execute(
                delete(Paste).where(Paste.expire_ts <= cutoff), execution_options=_NO_SYNC
            ).rowcount
            self.session.commit()
        except SQLAlchemyError as err:
            raise self._fail(err, "prune expired pastes") from err
        return removed
