# auth_service/infra/redis/redis_refresh_token_store.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import redis

from auth_service.services._shared.errors import TokenRefreshError, TokenRefreshErrorKind
from auth_service.services._shared.ports import RefreshTokenStore, RefreshTokenView, new_token_value
from auth_service.services._shared.ports.refresh_token_store import Clock, utcnow

DEFAULT_GRACE = timedelta(hours=1)


class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    Layout:

    - ``rt:<token>``: hash with ``user_id``, ``expires_at`` (epoch seconds)
      and ``access_token``. The key outlives the token by ``grace`` so an
      expired token is still reported as expired (and removed) rather than
      as unknown.
    - ``rt:u:<user_id>``: the user's current token value.

    :param r: A Redis client (already connected).
    :param ttl: Lifetime of newly created tokens.
    :param grace: How long keys are kept after their token expires.
    :param clock: Source of "now" (aware UTC).
    """

    def __init__(
        self,
        r: redis.Redis,
        *,
        ttl: timedelta,
        grace: timedelta = DEFAULT_GRACE,
        clock: Clock = utcnow,
    ) -> None:
        self.r = r
        self.ttl = ttl
        self.grace = grace
        self._clock = clock

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"rt:{token}"

    @staticmethod
    def _ku(user_id: int) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        return int(dt.timestamp())

    @staticmethod
    def _s(value: bytes | str | None, default: str = "") -> str:
        if value is None:
            return default
        return value.decode() if isinstance(value, bytes | bytearray) else str(value)

    def _key_ttl(self, expires_at: datetime) -> int:
        return max(1, self._to_ts(expires_at + self.grace) - self._to_ts(self._clock()))

    # -------------------- API ------------------------

    def create(self, access_token: str, user_id: int) -> RefreshTokenView:
        """
        Store a fresh token for ``user_id`` and drop the previous one.

        Uses WATCH/MULTI/EXEC on the user index so concurrent sign-ins for the
        same user leave exactly one token behind (last writer wins).
        """
        view = RefreshTokenView(
            token=new_token_value(),
            user_id=user_id,
            expires_at=self._clock() + self.ttl,
            access_token=access_token,
        )
        k_user = self._ku(user_id)
        ttl = self._key_ttl(view.expires_at)

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(k_user)
                    previous = p.get(k_user)

                    p.multi()
                    if previous:
                        p.delete(self._k(self._s(previous)))
                    p.hset(
                        self._k(view.token),
                        mapping={
                            "user_id": str(user_id),
                            "expires_at": str(self._to_ts(view.expires_at)),
                            "access_token": access_token,
                        },
                    )
                    p.expire(self._k(view.token), ttl)
                    p.set(k_user, view.token, ex=ttl)
                    p.execute()
                return view
            except redis.WatchError:
                # Concurrent sign-in for the same user; retry against the new state
                continue

    def find_by_token(self, token: str) -> RefreshTokenView | None:
        h = self.r.hgetall(self._k(token))
        if not h:
            return None
        return RefreshTokenView(
            token=token,
            user_id=int(self._s(h.get(b"user_id"), "0")),
            expires_at=datetime.fromtimestamp(
                int(self._s(h.get(b"expires_at"), "0")), tz=timezone.utc
            ),
            access_token=self._s(h.get(b"access_token")) or None,
        )

    def verify_expiration(self, refresh_token: RefreshTokenView) -> RefreshTokenView:
        if not refresh_token.is_expired(self._clock()):
            return refresh_token
        self._delete(refresh_token.token, refresh_token.user_id)
        raise TokenRefreshError(refresh_token.token, TokenRefreshErrorKind.EXPIRED)

    def _delete(self, token: str, user_id: int) -> None:
        k_user = self._ku(user_id)
        with self.r.pipeline() as p:
            p.watch(k_user)
            current = p.get(k_user)
            p.multi()
            p.delete(self._k(token))
            if self._s(current) == token:
                p.delete(k_user)
            try:
                p.execute()
            except redis.WatchError:
                # The user signed in again meanwhile; the old key is still ours to drop.
                self.r.delete(self._k(token))

    def delete_by_user_id(self, user_id: int) -> int:
        k_user = self._ku(user_id)
        current = self.r.get(k_user)
        if not current:
            return 0
        with self.r.pipeline(transaction=True) as p:
            p.delete(self._k(self._s(current)))
            p.delete(k_user)
            removed, _ = p.execute()
        return int(removed)

    def purge_expired(self, now: datetime | None = None) -> int:
        """
        Remove tokens whose ``expires_at`` lies before ``now``.

        Key TTLs evict tokens ``grace`` after expiry; this sweeps them sooner.
        """
        now_ts = self._to_ts(now or self._clock())
        removed = 0
        for key in self.r.scan_iter(match="rt:*"):
            name = self._s(key)
            if name.startswith("rt:u:"):
                continue
            h = self.r.hgetall(name)
            if not h:
                continue
            if int(self._s(h.get(b"expires_at"), "0")) < now_ts:
                self._delete(name[len("rt:") :], int(self._s(h.get(b"user_id"), "0")))
                removed += 1
        return removed
