# auth_service/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from auth_service.services._shared.ports import Principal

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignInIn:
    """
    Input DTO for sign-in.

    :param username: Login handle.
    :type username: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    username: str
    password: str


@dataclass(frozen=True, slots=True)
class SignUpIn:
    """
    Input DTO for sign-up.

    :param username: Desired login handle.
    :type username: str
    :param password: Raw password (hashed by the model setter).
    :type password: str
    """

    username: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh token value.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class SignOutIn:
    """
    Input DTO for sign-out.

    :param principal: Caller identity resolved from the bearer token, if any.
    :type principal: Principal | None
    :param authorization: Raw ``Authorization`` header value.
    :type authorization: str | None
    """

    principal: Principal | None
    authorization: str | None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class JwtOut:
    """
    Output DTO for a successful sign-in.

    :param access_token: Signed access token.
    :param refresh_token: Opaque refresh token value.
    :param user_id: Account id.
    :param username: Login handle.
    :param token_type: Always ``"Bearer"``.
    """

    access_token: str
    refresh_token: str
    user_id: int
    username: str
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class TokenRefreshOut:
    """
    Output DTO for a refresh.

    :param access_token: Newly signed access token.
    :param refresh_token: The refresh token value that was presented.
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class MessageOut:
    """Plain message response."""

    message: str


class SignOutOutcome(str, Enum):
    """Every way a sign-out can end; the value is the client-facing message."""

    SUCCESS = "Logout successful!"
    TOKEN_NOT_FOUND = "Token not found, logout failed!"
    INVALID_HEADER = "Authorization header is missing or invalid"
    NOT_AUTHENTICATED = "User is not authenticated"

    @property
    def message(self) -> str:
        return self.value


__all__ = [
    "JwtOut",
    "MessageOut",
    "Principal",
    "RefreshIn",
    "SignInIn",
    "SignOutIn",
    "SignOutOutcome",
    "SignUpIn",
    "TokenRefreshOut",
]
