"""Token lifecycle over HTTP with refresh tokens kept in Redis."""

from __future__ import annotations

import fakeredis
import pytest
from auth_service.core.config import TestingConfig
from auth_service.factory import create_app

from tests.helpers.auth import REFRESH_URL, SIGNOUT_URL, bearer, signup_and_signin


@pytest.fixture()
def fake_redis():
    return fakeredis.FakeRedis()


@pytest.fixture()
def redis_client_app(session, fake_redis):
    """App on the ``redis`` backend; SQL still goes through the test session."""

    class RedisBackendConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
        REFRESH_TOKEN_BACKEND = "redis"
        REDIS_URL = "redis://localhost:6379/15"
        REDIS_CONNECTOR = staticmethod(lambda url: fake_redis)

    return create_app(RedisBackendConfig).test_client()


def test_signin_stores_refresh_token_in_redis(redis_client_app, fake_redis):
    tokens = signup_and_signin(redis_client_app)

    current = fake_redis.get(f"rt:u:{tokens['userId']}")
    assert current is not None
    assert current.decode() == tokens["refreshToken"]
    assert fake_redis.ttl(f"rt:{tokens['refreshToken']}") > 0


def test_refresh_then_signout_drops_redis_keys(redis_client_app, fake_redis):
    tokens = signup_and_signin(redis_client_app)

    resp = redis_client_app.post(REFRESH_URL, json={"refreshToken": tokens["refreshToken"]})
    assert resp.status_code == 200
    refreshed = resp.get_json()
    assert refreshed["refreshToken"] == tokens["refreshToken"]

    resp = redis_client_app.post(SIGNOUT_URL, headers=bearer(refreshed["accessToken"]))
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Logout successful!"
    assert not fake_redis.exists(f"rt:{tokens['refreshToken']}")
    assert not fake_redis.exists(f"rt:u:{tokens['userId']}")


def test_unknown_refresh_token_is_rejected(redis_client_app):
    resp = redis_client_app.post(
        REFRESH_URL, json={"refreshToken": "00000000-0000-0000-0000-000000000000"}
    )

    assert resp.status_code == 403
    assert resp.get_json()["code"] == "refresh_token_not_found"


def test_health_reports_redis_store(redis_client_app):
    resp = redis_client_app.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json()["refreshBackend"] == "redis"
    assert resp.get_json()["refreshStore"] == "ok"
