"""
UserService
===========

Read-only lookup of user accounts for other services.
"""

from __future__ import annotations

from dataclasses import dataclass

from auth_service.repositories.user import UserAccountRepository
from auth_service.services._shared.base import BaseService
from auth_service.services._shared.errors import NotFoundError


@dataclass(frozen=True, slots=True)
class UserAccountOut:
    """
    Public-safe account view.

    :param id: Account id.
    :type id: int
    :param username: Login handle.
    :type username: str
    """

    id: int
    username: str


class UserService(BaseService):
    """Application service exposing accounts without credentials."""

    def get_user(self, user_id: int) -> UserAccountOut:
        """
        Retrieve an account by identifier.

        :param user_id: Account primary key.
        :type user_id: int
        :returns: Public-safe account DTO.
        :rtype: UserAccountOut
        :raises NotFoundError: If the account does not exist.
        """
        with self.ro_uow() as uow:
            repo: UserAccountRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                raise NotFoundError("UserAccount", user_id)
            return UserAccountOut(id=user.id, username=user.username)
