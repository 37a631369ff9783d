"""Tests for configuration helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest
from auth_service.core.config import env_bool, env_seconds, validate_config


def test_env_seconds_reads_integer(monkeypatch):
    monkeypatch.setenv("JWT_EXPIRATION_SECONDS", "60")
    assert env_seconds("JWT_EXPIRATION_SECONDS", 900) == timedelta(seconds=60)


def test_env_seconds_default(monkeypatch):
    monkeypatch.delenv("REFRESH_EXPIRATION_SECONDS", raising=False)
    assert env_seconds("REFRESH_EXPIRATION_SECONDS", 86400) == timedelta(days=1)


@pytest.mark.parametrize("raw,expected", [("1", True), ("true", True), ("no", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)
    assert env_bool("SOME_FLAG") is expected


def test_app_config_defaults(app):
    assert app.config["JWT_DECODE_LEEWAY"] == 0
    assert app.config["REFRESH_TOKEN_BACKEND"] == "sql"
    assert isinstance(app.config["REFRESH_TOKEN_EXPIRES"], timedelta)


@pytest.mark.parametrize(
    "config,match",
    [
        ({"REFRESH_TOKEN_BACKEND": "mongo", "TESTING": True}, "REFRESH_TOKEN_BACKEND"),
        ({"REFRESH_TOKEN_BACKEND": "redis", "TESTING": True}, "REDIS_URL"),
        ({"REFRESH_TOKEN_BACKEND": "sql", "JWT_SECRET_KEY": "CHANGE_ME_JWT"}, "JWT_SECRET_KEY"),
    ],
)
def test_validate_config_rejects(config, match):
    with pytest.raises(RuntimeError, match=match):
        validate_config(config)


def test_validate_config_accepts_memory_backend():
    validate_config({"REFRESH_TOKEN_BACKEND": "memory", "JWT_SECRET_KEY": "x" * 32})


def test_init_redis_skips_other_backends() -> None:
    from auth_service.core.extensions import init_redis
    from flask import Flask

    app = Flask("sql-backend")
    app.config.update(REFRESH_TOKEN_BACKEND="sql", REDIS_URL="redis://localhost:6379/0")

    assert init_redis(app) is None
    assert "redis_client" not in app.extensions


def test_init_redis_uses_connector() -> None:
    import fakeredis
    from auth_service.core import extensions
    from flask import Flask

    fake = fakeredis.FakeRedis()
    seen: list[str] = []

    def connector(url):
        seen.append(url)
        return fake

    app = Flask("redis-backend")
    app.config.update(REFRESH_TOKEN_BACKEND="redis", REDIS_URL="redis://cache:6379/2")

    try:
        assert extensions.init_redis(app, connector) is fake
        assert seen == ["redis://cache:6379/2"]
        assert extensions.get_redis() is fake
    finally:
        extensions.init_redis(Flask("reset"))
