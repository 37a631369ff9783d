"""Refresh token repository (the ``refresh_tokens`` table)."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select

from auth_service.models.refresh_token import RefreshToken
from auth_service.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only access to refresh tokens."""

    model = RefreshToken

    def _filterable_fields(self):
        return {
            "id": RefreshToken.id,
            "token": RefreshToken.token,
            "user_id": RefreshToken.user_id,
        }

    def find_by_token(self, token: str) -> RefreshToken | None:
        """Return the row holding ``token``."""
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def find_by_user_id(self, user_id: int) -> RefreshToken | None:
        """Return the user's refresh token, if any."""
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def replace_for_user(
        self, user_id: int, token: str, expiry_date: datetime, access_token: str
    ) -> RefreshToken:
        """Store ``token`` as the user's only refresh token, superseding any previous one.

        :returns: The persisted row.
        """
        values = {
            "user_id": user_id,
            "token": token,
            "expiry_date": expiry_date,
            "access_token": access_token,
        }
        if self.upsert(values, conflict="user_id", update=("token", "expiry_date", "access_token")):
            stmt = (
                select(RefreshToken)
                .where(RefreshToken.user_id == user_id)
                .execution_options(populate_existing=True)
            )
            return cast(RefreshToken, self.session.execute(stmt).scalars().one())
        self.delete_by_user_id(user_id)
        return self.add(RefreshToken(**values))

    def delete_by_user_id(self, user_id: int) -> int:
        """Remove every refresh token of ``user_id``."""
        return self.delete_where(user_id=user_id)

    def delete_by_token(self, token: str) -> int:
        """Remove the row holding ``token``."""
        return self.delete_where(token=token)

    def delete_expired(self, now: datetime) -> int:
        """Remove rows whose ``expiry_date`` lies before ``now``.

        :returns: Number of rows removed.
        """
        stmt = select(RefreshToken).where(RefreshToken.expiry_date < now)
        expired = list(self.session.execute(stmt).scalars())
        for row in expired:
            self.session.delete(row)
        self.flush()
        return len(expired)
