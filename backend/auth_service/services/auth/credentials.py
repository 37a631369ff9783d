"""Username/password verification against stored account hashes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from auth_service.services._shared.errors import InvalidCredentialsError
from auth_service.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork

# Checked when the username is unknown so both failure paths hash once.
_DUMMY_HASH = generate_password_hash("not-a-real-password")


@dataclass(frozen=True, slots=True)
class VerifiedAccount:
    """
    Account view returned after a successful check.

    :param user_id: Account id.
    :param username: Stored (trimmed) username.
    """

    user_id: int
    username: str


class CredentialVerifier:
    """
    Check a username/password pair. Read-only, no side effects.

    :param ro_uow: Factory for read-only units of work.
    """

    def __init__(
        self,
        *,
        ro_uow: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._ro_uow = ro_uow

    def verify(self, username: str, password: str) -> VerifiedAccount:
        """
        Return the matching account or fail.

        :raises InvalidCredentialsError: Unknown username or wrong password.
        """
        with self._ro_uow() as uow:
            user = uow.users.get_by_username(username)
            if user is None:
                check_password_hash(_DUMMY_HASH, password)
                raise InvalidCredentialsError()
            if not user.verify_password(password):
                raise InvalidCredentialsError()
            return VerifiedAccount(user_id=user.id, username=user.username)
