"""User account repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from auth_service.models.user import UserAccount
from auth_service.repositories.base import BaseRepository


class UserAccountRepository(BaseRepository[UserAccount]):
    """Persistence-only repository for :class:`UserAccount`.

    It never issues tokens or compares passwords; that belongs to the
    credential verifier.
    """

    model = UserAccount

    def _filterable_fields(self):
        return {"id": UserAccount.id, "username": UserAccount.username}

    def get_by_username(self, username: str) -> UserAccount | None:
        """Fetch an account by its (trimmed) username.

        :param username: Login handle.
        :type username: str
        :returns: Account or ``None`` when not found.
        :rtype: UserAccount | None
        """
        stmt = select(UserAccount).where(UserAccount.username == username.strip())
        return cast(UserAccount | None, self.session.execute(stmt).scalars().first())

    def exists_by_username(self, username: str) -> bool:
        """Return ``True`` when the username is already taken."""
        stmt = select(UserAccount.id).where(UserAccount.username == username.strip())
        return self.session.execute(stmt).first() is not None
