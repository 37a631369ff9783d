"""Authentication endpoints: sign-in, sign-up, refresh and sign-out."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from auth_service.api.deps import (
    build_auth_service,
    json_response,
    resolve_optional_principal,
    service_context,
)
from auth_service.core.extensions import limiter
from auth_service.schemas import (
    JwtResponseSchema,
    MessageSchema,
    SignInSchema,
    SignUpSchema,
    TokenRefreshRequestSchema,
    TokenRefreshResponseSchema,
)
from auth_service.services.auth import RefreshIn, SignInIn, SignOutIn, SignUpIn

bp = Blueprint("auth", __name__)

signin_schema = SignInSchema()
signup_schema = SignUpSchema()
refresh_request_schema = TokenRefreshRequestSchema()
jwt_schema = JwtResponseSchema()
refresh_response_schema = TokenRefreshResponseSchema()
message_schema = MessageSchema()


def _signin_rate_limit() -> str:
    return str(current_app.config.get("AUTH_SIGNIN_RATE_LIMIT", "5 per minute"))


@bp.post("/signin")
@limiter.limit(_signin_rate_limit)
def signin():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = signin_schema.load(request.get_json(silent=True) or {})
    service = build_auth_service(service_context())
    jwt = service.sign_in(SignInIn(username=data["username"], password=data["password"]))
    return json_response(jwt_schema.dump(jwt))


@bp.post("/signup")
def signup():
    """Register a new account."""

    data = signup_schema.load(request.get_json(silent=True) or {})
    service = build_auth_service(service_context())
    message = service.sign_up(SignUpIn(username=data["username"], password=data["password"]))
    return json_response(message_schema.dump(message), status=201)


@bp.post("/refreshtoken")
def refreshtoken():
    """Exchange a refresh token for a new access token."""

    data = refresh_request_schema.load(request.get_json(silent=True) or {})
    service = build_auth_service(service_context())
    out = service.refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response(refresh_response_schema.dump(out))


@bp.post("/signout")
def signout():
    """End the caller's session. Always 200; the message tells the outcome."""

    service = build_auth_service(service_context())
    outcome = service.sign_out(
        SignOutIn(
            principal=resolve_optional_principal(service),
            authorization=request.headers.get("Authorization"),
        )
    )
    return json_response(message_schema.dump({"message": outcome.message}))
