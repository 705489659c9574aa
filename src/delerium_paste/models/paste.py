# src/delerium_paste/models/paste.py
"""SQLAlchemy model for stored pastes."""

from sqlalchemy import BigInteger, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from delerium_paste.db.session import Base


class Paste(Base):
    """An encrypted paste.

    The server never interprets ``ct`` or ``iv``; the decryption key lives only
    in the URL fragment held by the client.
    """

    __tablename__ = "pastes"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    ct: Mapped[str] = mapped_column(Text, nullable=False)
    iv: Mapped[str] = mapped_column(Text, nullable=False)
    # Unix seconds; rows at or past this instant are treated as absent.
    expire_ts: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    views_allowed: Mapped[int | None] = mapped_column(Integer, nullable=True)
    views_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    single_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mime: Mapped[str | None] = mapped_column(String(128), nullable=True)
    # HMAC of the deletion token keyed with the server pepper; the raw token is never stored.
    delete_token_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
