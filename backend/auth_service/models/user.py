"""User account model: the root aggregate owning every token row."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from auth_service.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .refresh_token import RefreshToken
    from .token import AccessToken

USERNAME_MAX_LENGTH = 50


class UserAccount(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Credentials of one user plus their (at most one) token of each kind.

    Fields
    ------
    username : str
        Login handle, unique, stored trimmed.
    password_hash : str
        Werkzeug hash; written through the ``password`` setter only.
    access_token : AccessToken | None
        Current access token row (active or signed out).
    refresh_token : RefreshToken | None
        Live refresh token, if the user has signed in and not out.
    """

    __tablename__ = "user_auth"

    username: Mapped[str] = mapped_column(String(USERNAME_MAX_LENGTH), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Token rows go with the account; the FKs also cascade in the database
    access_token: Mapped[AccessToken | None] = relationship(
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    refresh_token: Mapped[RefreshToken | None] = relationship(
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("username", name="uq_user_auth_username"),)

    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Store the salted hash of ``raw``.

        :raises ValueError: If ``raw`` is empty or not a string.
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """Return ``True`` if ``raw`` matches the stored hash."""
        if not self.password_hash:
            return False
        return bool(check_password_hash(self.password_hash, raw))

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Trim ``value`` and enforce the column limits.

        :raises ValueError: If the username is blank or too long.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        v = value.strip()
        if len(v) > USERNAME_MAX_LENGTH:
            raise ValueError(f"Username must be at most {USERNAME_MAX_LENGTH} characters.")
        return v
