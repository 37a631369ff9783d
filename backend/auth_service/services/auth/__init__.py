from .credentials import CredentialVerifier, VerifiedAccount
from .dto import (
    JwtOut,
    MessageOut,
    RefreshIn,
    SignInIn,
    SignOutIn,
    SignOutOutcome,
    SignUpIn,
    TokenRefreshOut,
)
from .service import AuthService, extract_bearer

__all__ = [
    "AuthService",
    "CredentialVerifier",
    "JwtOut",
    "MessageOut",
    "RefreshIn",
    "SignInIn",
    "SignOutIn",
    "SignOutOutcome",
    "SignUpIn",
    "TokenRefreshOut",
    "VerifiedAccount",
    "extract_bearer",
]
