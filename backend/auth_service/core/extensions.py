"""Extension singletons shared by the app factory, services and CLI."""

from __future__ import annotations

from collections.abc import Callable

import redis
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError
from sqlalchemy import MetaData

# Constraint names are relied on when mapping IntegrityError (uq_user_auth_username)
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
# No default limits; only credential endpoints opt in
limiter = Limiter(key_func=get_remote_address, default_limits=[], headers_enabled=True)

redis_client: redis.Redis | None = None
RedisConnector = Callable[[str], redis.Redis]


def connect_redis(url: str) -> redis.Redis:
    """Open a client for ``url`` and check it answers."""
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    return client


def init_redis(app: Flask, connector: RedisConnector | None = None) -> redis.Redis | None:
    """Bind the Redis client used by the ``redis`` refresh token backend.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``REFRESH_TOKEN_BACKEND`` and ``REDIS_URL`` are read.
    connector: callable, optional
        Builds the client from the URL. Defaults to :func:`connect_redis`.

    Returns
    -------
    redis.Redis | None
        The bound client, or ``None`` when another backend is selected.
    """
    global redis_client
    url = app.config.get("REDIS_URL")
    if app.config.get("REFRESH_TOKEN_BACKEND") != "redis" or not url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return None

    redis_client = (connector or connect_redis)(url)
    app.extensions["redis_client"] = redis_client
    return redis_client


def init_app(app: Flask) -> None:
    """Bind the database, migrations, JWT signer, rate limiter and Redis.

    Importing :mod:`auth_service.models` here registers ``user_auth``,
    ``tokens`` and ``refresh_tokens`` on :data:`metadata` before Alembic
    inspects it.
    """
    db.init_app(app)

    from auth_service import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    init_redis(app, app.config.get("REDIS_CONNECTOR"))


def get_redis() -> redis.Redis:
    """Return the client bound by :func:`init_redis`."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized; is REFRESH_TOKEN_BACKEND 'redis'?")
    return redis_client
