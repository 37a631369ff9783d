from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol
from uuid import uuid4

from auth_service.services._shared.errors import TokenRefreshError, TokenRefreshErrorKind

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_token_value() -> str:
    """Generate a new opaque refresh token value."""
    return str(uuid4())


@dataclass(frozen=True, slots=True)
class RefreshTokenView:
    """
    Read-model for a refresh token.

    :ivar token: Opaque value held by the client.
    :ivar user_id: Owner user id.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar access_token: Access token minted alongside it, when known.
    """

    token: str
    user_id: int
    expires_at: datetime
    access_token: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh tokens: exactly one live token per user.

    Every call is atomic on its own; none is expected to hold a lock across
    calls.
    """

    def create(self, access_token: str, user_id: int) -> RefreshTokenView:
        """
        Generate a new token for ``user_id`` expiring after the store TTL.

        Any previous token of the user is replaced.
        """
        ...

    def find_by_token(self, token: str) -> RefreshTokenView | None: ...

    def verify_expiration(self, refresh_token: RefreshTokenView) -> RefreshTokenView:
        """
        Return ``refresh_token`` unchanged if still valid.

        :raises TokenRefreshError: ``EXPIRED``, after the expired token has
            been deleted from the store.
        """
        ...

    def delete_by_user_id(self, user_id: int) -> int:
        """Remove the user's refresh token(s). :returns: Number removed."""
        ...

    def purge_expired(self, now: datetime | None = None) -> int:
        """Remove every expired token. :returns: Number removed."""
        ...


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store.

    .. note::
       Uses a threading lock to keep each call atomic in unit tests.
    """

    def __init__(self, *, ttl: timedelta, clock: Clock = utcnow) -> None:
        self.ttl = ttl
        self._clock = clock
        self._by_token: dict[str, RefreshTokenView] = {}
        self._by_user: dict[int, str] = {}
        self._lock = threading.Lock()

    def create(self, access_token: str, user_id: int) -> RefreshTokenView:
        view = RefreshTokenView(
            token=new_token_value(),
            user_id=user_id,
            expires_at=self._clock() + self.ttl,
            access_token=access_token,
        )
        with self._lock:
            previous = self._by_user.pop(user_id, None)
            if previous is not None:
                self._by_token.pop(previous, None)
            self._by_token[view.token] = view
            self._by_user[user_id] = view.token
        return view

    def find_by_token(self, token: str) -> RefreshTokenView | None:
        with self._lock:
            return self._by_token.get(token)

    def verify_expiration(self, refresh_token: RefreshTokenView) -> RefreshTokenView:
        if not refresh_token.is_expired(self._clock()):
            return refresh_token
        with self._lock:
            self._by_token.pop(refresh_token.token, None)
            if self._by_user.get(refresh_token.user_id) == refresh_token.token:
                del self._by_user[refresh_token.user_id]
        raise TokenRefreshError(refresh_token.token, TokenRefreshErrorKind.EXPIRED)

    def delete_by_user_id(self, user_id: int) -> int:
        with self._lock:
            token = self._by_user.pop(user_id, None)
            if token is None:
                return 0
            self._by_token.pop(token, None)
            return 1

    def purge_expired(self, now: datetime | None = None) -> int:
        now = now or self._clock()
        with self._lock:
            stale = [v for v in self._by_token.values() if v.is_expired(now)]
            for view in stale:
                del self._by_token[view.token]
                self._by_user.pop(view.user_id, None)
            return len(stale)
