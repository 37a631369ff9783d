"""Version 1 of the auth HTTP API."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "v1"


def registry() -> list[tuple[Blueprint, str]]:
    """Return ``(blueprint, mount point)`` pairs relative to ``/api/v1``.

    Route modules are imported lazily so importing the package never pulls
    in the services layer.
    """
    from .auth import bp as auth_bp
    from .health import bp as health_bp
    from .users import bp as users_bp

    return [
        (health_bp, ""),
        (auth_bp, "/auth"),
        (users_bp, "/users"),
    ]
