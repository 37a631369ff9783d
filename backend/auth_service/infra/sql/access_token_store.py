# auth_service/infra/sql/access_token_store.py
from __future__ import annotations

from collections.abc import Callable

from auth_service.models.token import AccessToken
from auth_service.services._shared.ports import AccessTokenStore, TokenRecord
from auth_service.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


def _record(row: AccessToken) -> TokenRecord:
    return TokenRecord(token=row.token, user_id=row.user_id, is_active=bool(row.is_active))


def _to_record(row: AccessToken | None) -> TokenRecord | None:
    return _record(row) if row is not None else None


class SQLAccessTokenStore(AccessTokenStore):
    """
    Access token store over the ``tokens`` table.

    Each call opens its own Unit of Work, so every operation commits (or
    rolls back) on its own. ``record_active`` is a single upsert on ``user_id``,
    so concurrent sign-ins resolve to last-write-wins.

    :param rw_uow: Factory for read-write units of work.
    :param ro_uow: Factory for read-only units of work.
    """

    def __init__(
        self,
        *,
        rw_uow: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self._rw_uow = rw_uow
        self._ro_uow = ro_uow

    def record_active(self, user_id: int, token: str) -> TokenRecord:
        with self._rw_uow() as uow:
            return _record(uow.tokens.upsert_for_user(user_id, token))

    def find_by_token(self, token: str) -> TokenRecord | None:
        with self._ro_uow() as uow:
            return _to_record(uow.tokens.find_by_token(token))

    def find_by_user_id(self, user_id: int) -> TokenRecord | None:
        with self._ro_uow() as uow:
            return _to_record(uow.tokens.find_by_user_id(user_id))

    def find_by_user_id_and_token(self, user_id: int, token: str) -> TokenRecord | None:
        with self._ro_uow() as uow:
            return _to_record(uow.tokens.find_by_user_id_and_token(user_id, token))

    def deactivate(self, token: str) -> bool:
        with self._rw_uow() as uow:
            row = uow.tokens.find_by_token(token)
            if row is None:
                return False
            row.is_active = False
            uow.tokens.flush()
            return True

    def delete_by_token(self, token: str) -> bool:
        with self._rw_uow() as uow:
            return uow.tokens.delete_by_token(token) > 0
