"""Refresh token model: one live opaque refresh credential per user."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auth_service.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import UserAccount


class RefreshToken(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Refresh credential bound one-to-one to a :class:`UserAccount`.

    Fields
    ------
    token : str
        Opaque random value handed to the client.
    user_id : int
        Owner; unique so issuing a new token supersedes the previous one.
    expiry_date : datetime
        Absolute expiration (UTC).
    access_token : str | None
        Access token minted in the same sign-in.
    """

    __tablename__ = "refresh_tokens"
    repr_attrs = ("id", "user_id", "expiry_date")

    token: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_auth.id", ondelete="CASCADE"), nullable=False
    )
    expiry_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    access_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped[UserAccount] = relationship(back_populates="refresh_token")

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        UniqueConstraint("user_id", name="uq_refresh_tokens_user_id"),
        Index("ix_refresh_tokens_expiry_date", "expiry_date"),
    )
