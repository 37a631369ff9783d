from auth_service.models.refresh_token import RefreshToken
from auth_service.models.token import AccessToken
from auth_service.models.user import UserAccount

__all__ = [
    "AccessToken",
    "RefreshToken",
    "UserAccount",
]
