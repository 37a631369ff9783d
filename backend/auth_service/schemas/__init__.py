"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    JwtResponseSchema,
    MessageSchema,
    SignInSchema,
    SignUpSchema,
    TokenRefreshRequestSchema,
    TokenRefreshResponseSchema,
)
from .user import UserSchema

__all__ = [
    "JwtResponseSchema",
    "MessageSchema",
    "SignInSchema",
    "SignUpSchema",
    "TokenRefreshRequestSchema",
    "TokenRefreshResponseSchema",
    "UserSchema",
]
