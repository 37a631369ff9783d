from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated identity of the current caller.

    Built from a validated access token and handed explicitly down the call
    chain; there is no ambient security context.

    :ivar user_id: Account id.
    :ivar username: Login handle (the token subject).
    :ivar authorities: Granted authorities, if any.
    :ivar anonymous: ``True`` for a placeholder identity that carries no credentials.
    """

    user_id: int
    username: str
    authorities: tuple[str, ...] = field(default_factory=tuple)
    anonymous: bool = False


@dataclass(frozen=True, slots=True)
class Claims:
    """
    Verified content of an access token.

    :ivar subject: Username the token was issued for.
    :ivar user_id: Account id, absent on bare (refresh-derived) tokens.
    :ivar issued_at: ``iat`` as an aware UTC datetime.
    :ivar expires_at: ``exp`` as an aware UTC datetime.
    :ivar jti: Unique token id.
    :ivar authorities: Authorities embedded at issue time.
    """

    subject: str
    user_id: int | None
    issued_at: datetime
    expires_at: datetime
    jti: str
    authorities: tuple[str, ...] = ()


class TokenProvider(Protocol):
    """Port for issuing and parsing signed access tokens."""

    def issue_access_token(self, principal: Principal) -> str:
        """Sign a token carrying the principal's id, username and authorities."""
        ...

    def issue_bare_token(self, username: str) -> str:
        """Sign a token derived from ``username`` alone (refresh flow)."""
        ...

    def parse(self, token: str) -> Claims:
        """
        Verify signature and expiry and return the claims.

        :raises TokenError: ``MALFORMED``, ``EXPIRED`` or ``BAD_SIGNATURE``.
        """
        ...
