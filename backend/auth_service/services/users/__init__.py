from .service import UserAccountOut, UserService

__all__ = ["UserAccountOut", "UserService"]
