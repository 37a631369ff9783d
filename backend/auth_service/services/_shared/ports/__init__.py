"""
auth_service.services._shared.ports
===================================

*Ports* (hexagonal interfaces) for the token lifecycle.

They decouple the auth orchestrator from the concrete signing library and
storage backends.

Modules
-------
- :mod:`token_provider`:
    :class:`~.TokenProvider` plus the :class:`~.Principal` and
    :class:`~.Claims` value objects.

- :mod:`access_token_store`:
    :class:`~.AccessTokenStore` — one current access token per user.

- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore` — one live refresh token per user.

Concrete adapters (SQL, Redis) live under ``auth_service.infra``; the
in-memory adapters here back unit tests and the ``memory`` backend.
"""

from __future__ import annotations

from .access_token_store import AccessTokenStore, InMemoryAccessTokenStore, TokenRecord
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
    RefreshTokenView,
    new_token_value,
)
from .token_provider import Claims, Principal, TokenProvider

__all__ = [
    "AccessTokenStore",
    "Claims",
    "InMemoryAccessTokenStore",
    "InMemoryRefreshTokenStore",
    "Principal",
    "RefreshTokenStore",
    "RefreshTokenView",
    "TokenProvider",
    "TokenRecord",
    "new_token_value",
]
