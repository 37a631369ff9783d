"""Access token model: the materialized "current session" marker per user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auth_service.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import UserAccount


class AccessToken(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Currently issued access token of one user.

    The table is not a log: ``user_id`` is unique, a new sign-in overwrites the
    row, and sign-out only flips ``is_active`` so the row remains for audit.
    """

    __tablename__ = "tokens"
    repr_attrs = ("id", "user_id", "is_active")

    token: Mapped[str] = mapped_column(String(2048), nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_auth.id", ondelete="CASCADE"), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    user: Mapped[UserAccount] = relationship(back_populates="access_token")

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_tokens_user_id"),
        UniqueConstraint("token", name="uq_tokens_token"),
    )
