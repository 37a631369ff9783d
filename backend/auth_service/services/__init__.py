"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`auth_service.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``auth_service.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Auth orchestrator (from ``auth_service.services.auth``)
    * :class:`AuthService`, :class:`CredentialVerifier`
    * DTOs: :class:`SignInIn`, :class:`SignUpIn`, :class:`RefreshIn`,
      :class:`SignOutIn`, :class:`JwtOut`, :class:`TokenRefreshOut`,
      :class:`MessageOut`, :class:`SignOutOutcome`

- User lookup (from ``auth_service.services.users``)
    * :class:`UserService`, :class:`UserAccountOut`
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from .auth import (
    AuthService,
    CredentialVerifier,
    JwtOut,
    MessageOut,
    RefreshIn,
    SignInIn,
    SignOutIn,
    SignOutOutcome,
    SignUpIn,
    TokenRefreshOut,
)
from .users import UserAccountOut, UserService

__all__ = [
    "AuthService",
    "BaseService",
    "CredentialVerifier",
    "JwtOut",
    "MessageOut",
    "RefreshIn",
    "ServiceContext",
    "SignInIn",
    "SignOutIn",
    "SignOutOutcome",
    "SignUpIn",
    "TokenRefreshOut",
    "UserAccountOut",
    "UserService",
]
