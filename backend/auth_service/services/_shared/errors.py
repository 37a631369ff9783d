"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or HTTP.
They are the stable contract between stores, the credential verifier, the
token signer and the auth orchestrator.

The translation to HTTP responses (RFC 7807) is handled by
``auth_service/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite reports the column list,
    so callers should also accept the generic uniqueness failure there.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Database constraint name (e.g. ``uq_user_auth_username``).
    :returns: ``True`` if the message mentions the constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    These are *not* HTTP errors; ``BaseService.translate_exceptions`` maps
    them to ``APIError`` at the boundary.
    """


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "UserAccount").
    :param key: Identifier or search key.
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name.
    :param detail: Short human-readable explanation.
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


# --------------------------------------------------------------------------- #
# Authentication taxonomy
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Bad username/password at sign-in. No tokens issued, nothing mutated."""

    def __init__(self, message: str = "Bad credentials") -> None:
        super().__init__(message)


class UsernameAlreadyExistsError(ConflictError):
    """Sign-up conflict; no partial account is created."""

    def __init__(self, username: str) -> None:
        super().__init__("UserAccount", "Username is already taken!")
        self.username = username

    def __str__(self) -> str:
        return "Username is already taken!"


class TokenErrorKind(str, Enum):
    """Why an access token was rejected."""

    MALFORMED = "malformed"
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    REVOKED = "revoked"


class TokenError(ServiceError):
    """An access token could not be trusted."""

    def __init__(self, kind: TokenErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or f"Access token rejected: {kind.value}")


class TokenRefreshErrorKind(str, Enum):
    """Why a refresh token cannot be exchanged."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"


_REFRESH_REASONS = {
    TokenRefreshErrorKind.NOT_FOUND: "Refresh token is not in database!",
    TokenRefreshErrorKind.EXPIRED: "Refresh token was expired. Please make a new signin request",
}


class TokenRefreshError(ServiceError):
    """
    Refresh token validation failure.

    Callers must answer with "sign in again", never with a retry.

    :param token: The refresh token value presented by the client.
    :param kind: ``NOT_FOUND`` or ``EXPIRED``.
    """

    def __init__(self, token: str, kind: TokenRefreshErrorKind) -> None:
        self.token = token
        self.kind = kind
        self.reason = _REFRESH_REASONS[kind]
        super().__init__(f"Failed for [{token}]: {self.reason}")
