"""Shared API helpers for request parsing, wiring and cross-cutting concerns."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from auth_service.core.errors import Unauthorized
from auth_service.core.extensions import get_redis
from auth_service.core.logger import ensure_request_id
from auth_service.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from auth_service.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from auth_service.infra.sql.access_token_store import SQLAccessTokenStore
from auth_service.infra.sql.refresh_token_store import SQLRefreshTokenStore
from auth_service.services._shared.base import ServiceContext
from auth_service.services._shared.errors import ServiceError
from auth_service.services._shared.ports import (
    InMemoryRefreshTokenStore,
    Principal,
    RefreshTokenStore,
)
from auth_service.services.auth import AuthService, extract_bearer

F = TypeVar("F", bound=Callable[..., Any])

_MEMORY_STORE_KEY = "auth_memory_refresh_store"


def service_context() -> ServiceContext:
    """Build the request-scoped service context."""

    return ServiceContext(request_id=ensure_request_id(), remote_addr=request.remote_addr)


def build_refresh_store() -> RefreshTokenStore:
    """Return the refresh token store selected by ``REFRESH_TOKEN_BACKEND``."""

    backend = current_app.config["REFRESH_TOKEN_BACKEND"]
    ttl = current_app.config["REFRESH_TOKEN_EXPIRES"]
    if backend == "redis":
        return RedisRefreshTokenStore(
            get_redis(), ttl=ttl, grace=current_app.config["REFRESH_TOKEN_GRACE"]
        )
    if backend == "memory":
        # One store per app so tokens survive across requests
        store = current_app.extensions.get(_MEMORY_STORE_KEY)
        if store is None:
            store = current_app.extensions[_MEMORY_STORE_KEY] = InMemoryRefreshTokenStore(ttl=ttl)
        return cast(RefreshTokenStore, store)
    return SQLRefreshTokenStore(ttl=ttl)


def build_auth_service(ctx: ServiceContext | None = None) -> AuthService:
    """Assemble :class:`AuthService` from the app configuration."""

    return AuthService(
        token_provider=JWTTokenProvider(
            access_expires=current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
        ),
        access_store=SQLAccessTokenStore(),
        refresh_store=build_refresh_store(),
        ctx=ctx,
    )


def resolve_optional_principal(service: AuthService) -> Principal | None:
    """
    Resolve the caller from the ``Authorization`` header, if possible.

    Missing or untrusted tokens yield ``None``; callers decide what that means.
    """

    token = extract_bearer(request.headers.get("Authorization"))
    if token is None:
        return None
    try:
        return service.resolve_principal(token)
    except ServiceError as exc:
        current_app.logger.debug("auth.principal_rejected", extra={"outcome": str(exc)})
        return None


def require_principal(func: F) -> F:
    """Require a bearer token that is the caller's current active session."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = extract_bearer(request.headers.get("Authorization"))
        if token is None:
            raise Unauthorized("Authorization header is missing or invalid", code="invalid_token")
        service = build_auth_service(service_context())
        # TokenError propagates to the ServiceError handler (401)
        g.principal = service.resolve_principal(token, require_active_session=True)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response
