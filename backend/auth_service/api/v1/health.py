"""Liveness check reporting the stores the token lifecycle depends on."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from auth_service.api.deps import json_response
from auth_service.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


def _check_db() -> str:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        return "fail"
    return "ok"


def _check_refresh_store(backend: str) -> str:
    if backend != "redis":
        return "ok"
    try:
        get_redis().ping()
    except RedisError:  # pragma: no cover - depends on Redis availability
        current_app.logger.exception("healthcheck.redis_error")
        return "fail"
    return "ok"


@bp.get("/health")
def healthcheck():
    """Return ``status`` plus one entry per backing store."""

    backend = current_app.config["REFRESH_TOKEN_BACKEND"]
    checks = {"db": _check_db(), "refreshStore": _check_refresh_store(backend)}
    status = "ok" if all(v == "ok" for v in checks.values()) else "degraded"
    return json_response(
        {"status": status, "refreshBackend": backend, **checks},
        status=200 if status == "ok" else 503,
    )
