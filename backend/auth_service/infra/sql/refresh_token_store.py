# auth_service/infra/sql/refresh_token_store.py
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from auth_service.models.base import as_utc
from auth_service.models.refresh_token import RefreshToken
from auth_service.services._shared.errors import TokenRefreshError, TokenRefreshErrorKind
from auth_service.services._shared.ports import RefreshTokenStore, RefreshTokenView, new_token_value
from auth_service.services._shared.ports.refresh_token_store import Clock, utcnow
from auth_service.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


def _to_view(row: RefreshToken) -> RefreshTokenView:
    return RefreshTokenView(
        token=row.token,
        user_id=row.user_id,
        expires_at=as_utc(row.expiry_date),
        access_token=row.access_token,
    )


class SQLRefreshTokenStore(RefreshTokenStore):
    """
    Refresh token store over the ``refresh_tokens`` table.

    ``create`` overwrites the user's row with a single upsert on ``user_id``,
    so concurrent sign-ins never trip the one-token-per-user constraint.

    :param ttl: Lifetime of newly created tokens.
    :param clock: Source of "now" (aware UTC).
    """

    def __init__(
        self,
        *,
        ttl: timedelta,
        clock: Clock = utcnow,
        rw_uow: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
        ro_uow: Callable[[], SQLAlchemyReadOnlyUnitOfWork] = SQLAlchemyReadOnlyUnitOfWork,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._rw_uow = rw_uow
        self._ro_uow = ro_uow

    def create(self, access_token: str, user_id: int) -> RefreshTokenView:
        with self._rw_uow() as uow:
            row = uow.refresh_tokens.replace_for_user(
                user_id,
                new_token_value(),
                self._clock() + self.ttl,
                access_token,
            )
            view = _to_view(row)
        return view

    def find_by_token(self, token: str) -> RefreshTokenView | None:
        with self._ro_uow() as uow:
            row = uow.refresh_tokens.find_by_token(token)
            return _to_view(row) if row is not None else None

    def verify_expiration(self, refresh_token: RefreshTokenView) -> RefreshTokenView:
        if not refresh_token.is_expired(self._clock()):
            return refresh_token
        with self._rw_uow() as uow:
            uow.refresh_tokens.delete_by_token(refresh_token.token)
        raise TokenRefreshError(refresh_token.token, TokenRefreshErrorKind.EXPIRED)

    def delete_by_user_id(self, user_id: int) -> int:
        with self._rw_uow() as uow:
            return uow.refresh_tokens.delete_by_user_id(user_id)

    def purge_expired(self, now: datetime | None = None) -> int:
        with self._rw_uow() as uow:
            return uow.refresh_tokens.delete_expired(now or self._clock())
