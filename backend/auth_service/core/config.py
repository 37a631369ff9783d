"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

REFRESH_BACKENDS: Final[frozenset[str]] = frozenset({"sql", "redis", "memory"})


# Loads .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_seconds(name: str, default: int) -> timedelta:
    """Read a duration expressed in whole seconds from the environment.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: int
        Fallback number of seconds when the variable is unset or blank.

    Returns
    -------
    datetime.timedelta
        Parsed duration.

    Raises
    ------
    ValueError
        If the variable is set but is not an integer.
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return timedelta(seconds=default)
    try:
        return timedelta(seconds=int(raw.strip()))
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer number of seconds, got {raw!r}") from exc


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development placeholder.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing access tokens.
    JWT_ALGORITHM: str
        Signing algorithm shared by every issued token.
    JWT_ACCESS_TOKEN_EXPIRES: timedelta
        Access token lifetime (``JWT_EXPIRATION_SECONDS``).
    JWT_DECODE_LEEWAY: int
        Clock skew tolerated on ``exp``; kept at zero for strict expiry.
    REFRESH_TOKEN_EXPIRES: timedelta
        Refresh token lifetime (``REFRESH_EXPIRATION_SECONDS``).
    REFRESH_TOKEN_GRACE: timedelta
        How long the Redis backend keeps a refresh token after it expires, so
        it is reported as expired rather than unknown (``REFRESH_GRACE_SECONDS``).
    REFRESH_TOKEN_BACKEND: str
        Refresh token store adapter: ``sql`` | ``redis`` | ``memory``.
    REDIS_URL: str | None
        Connection URL used when the Redis backend is selected.
    REDIS_CONNECTOR: Callable[[str], redis.Redis] | None
        Optional factory replacing the default connect-and-ping (tests pass
        a fakeredis client through it).
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    AUTH_SIGNIN_RATE_LIMIT: str
        Flask-Limiter expression applied to the sign-in endpoint.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_TOKEN_EXPIRES = env_seconds("JWT_EXPIRATION_SECONDS", 15 * 60)
    JWT_DECODE_LEEWAY = 0
    JWT_TOKEN_LOCATION = ["headers"]

    # Refresh tokens
    REFRESH_TOKEN_EXPIRES = env_seconds("REFRESH_EXPIRATION_SECONDS", 24 * 60 * 60)
    REFRESH_TOKEN_GRACE = env_seconds("REFRESH_GRACE_SECONDS", 60 * 60)
    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sql").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL") or None
    REDIS_CONNECTOR = None

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./auth.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Rate limiting
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    AUTH_SIGNIN_RATE_LIMIT = os.getenv("AUTH_SIGNIN_RATE_LIMIT", "5 per minute")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables rate limiting.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = "testing-secret-key-with-enough-entropy"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REFRESH_TOKEN_BACKEND = "sql"
    RATELIMIT_ENABLED = False
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. :func:`validate_config` refuses to
    boot with the placeholder signing key.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, object]) -> None:
    """Fail fast on settings the token lifecycle cannot run with.

    :param config: Loaded Flask configuration mapping.
    :raises RuntimeError: On an unknown refresh backend, a Redis backend
        without ``REDIS_URL``, or the placeholder JWT key outside debug/testing.
    """
    backend = str(config.get("REFRESH_TOKEN_BACKEND", "sql")).lower()
    if backend not in REFRESH_BACKENDS:
        raise RuntimeError(
            f"REFRESH_TOKEN_BACKEND must be one of {sorted(REFRESH_BACKENDS)}, got {backend!r}"
        )
    if backend == "redis" and not config.get("REDIS_URL"):
        raise RuntimeError("REFRESH_TOKEN_BACKEND=redis requires REDIS_URL.")

    relaxed = bool(config.get("DEBUG")) or bool(config.get("TESTING"))
    if not relaxed and config.get("JWT_SECRET_KEY") in (None, "", "CHANGE_ME_JWT"):
        raise RuntimeError("JWT_SECRET_KEY must be set outside development and testing.")
