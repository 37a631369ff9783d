"""Access token repository (the ``tokens`` table)."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from auth_service.models.token import AccessToken
from auth_service.repositories.base import BaseRepository


class AccessTokenRepository(BaseRepository[AccessToken]):
    """Lookups and upserts over the one-row-per-user access token table."""

    model = AccessToken

    def _filterable_fields(self):
        return {"token": AccessToken.token, "user_id": AccessToken.user_id}

    def find_by_token(self, token: str) -> AccessToken | None:
        """Return the row holding exactly ``token``."""
        stmt = select(AccessToken).where(AccessToken.token == token)
        return cast(AccessToken | None, self.session.execute(stmt).scalars().first())

    def find_by_user_id(self, user_id: int) -> AccessToken | None:
        """Return the (single) row for ``user_id``."""
        stmt = select(AccessToken).where(AccessToken.user_id == user_id)
        return cast(AccessToken | None, self.session.execute(stmt).scalars().first())

    def find_by_user_id_and_token(self, user_id: int, token: str) -> AccessToken | None:
        """Return the row only if ``token`` is the one recorded for ``user_id``."""
        stmt = select(AccessToken).where(
            AccessToken.user_id == user_id, AccessToken.token == token
        )
        return cast(AccessToken | None, self.session.execute(stmt).scalars().first())

    def upsert_for_user(self, user_id: int, token: str) -> AccessToken:
        """Overwrite the user's row with ``token`` (active), inserting if absent.

        Concurrent sign-ins of one user resolve to last-write-wins instead of
        a unique violation on ``user_id``.

        :param user_id: Owner of the token.
        :param token: Newly issued access token.
        :returns: The persisted row.
        """
        values = {"user_id": user_id, "token": token, "is_active": True}
        if self.upsert(values, conflict="user_id", update=("token", "is_active")):
            stmt = (
                select(AccessToken)
                .where(AccessToken.user_id == user_id)
                .execution_options(populate_existing=True)
            )
            return cast(AccessToken, self.session.execute(stmt).scalars().one())
        row = self.find_by_user_id(user_id)
        if row is None:
            return self.add(AccessToken(**values))
        row.token = token
        row.is_active = True
        self.flush()
        return row

    def delete_by_token(self, token: str) -> int:
        """Hard-delete the row holding ``token``."""
        return self.delete_where(token=token)
