"""Shared fixtures: one app per session, one rolled-back transaction per test.

Service code under test opens its own Unit of Work and commits; those commits
only release a SAVEPOINT inside the per-test outer transaction, which is
rolled back at teardown.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

import pytest
from auth_service.core.config import TestingConfig
from auth_service.core.extensions import db as _db
from auth_service.factory import create_app
from auth_service.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from auth_service.infra.sql.access_token_store import SQLAccessTokenStore
from auth_service.infra.sql.refresh_token_store import SQLRefreshTokenStore
from auth_service.services.auth import AuthService
from sqlalchemy import event
from sqlalchemy.engine import Connection
from sqlalchemy.orm import scoped_session, sessionmaker


class TestConfig(TestingConfig):
    """SQL refresh backend on in-memory SQLite; no Redis, no rate limits."""

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = None


@contextmanager
def _savepoint_session(connection: Connection) -> Iterator[scoped_session]:
    """Yield a session whose commits never reach the outer transaction.

    ``join_transaction_mode="create_savepoint"`` makes ``commit()`` release
    and ``rollback()`` undo only the session's own SAVEPOINT.
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, join_transaction_mode="create_savepoint"))
    try:
        yield scoped
    finally:
        scoped.remove()
        if outer.is_active:
            outer.rollback()


@pytest.fixture(scope="session")
def app():
    """Application built from :class:`TestConfig`."""
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create ``user_auth``, ``tokens`` and ``refresh_tokens`` once."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Single connection so the in-memory database is shared by every session."""
    conn = db.engine.connect()
    if conn.dialect.name == "sqlite":
        # pysqlite defers BEGIN; emit it ourselves so SAVEPOINTs nest in a real transaction
        conn.connection.driver_connection.isolation_level = None
        event.listen(conn, "begin", lambda c: c.exec_driver_sql("BEGIN"))
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def session(db, connection):
    """Per-test session installed as ``db.session`` for app and service code."""
    original = db.session
    original.remove()
    with _savepoint_session(connection) as scoped:
        db.session = scoped
        try:
            yield scoped
        finally:
            db.session = original


@pytest.fixture(scope="session")
def faker():
    """Seeded :class:`faker.Faker` instance."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def auth_service(session, app) -> AuthService:
    """AuthService wired to the SQL stores and the Flask-JWT-Extended signer."""
    return AuthService(
        token_provider=JWTTokenProvider(),
        access_store=SQLAccessTokenStore(),
        refresh_store=SQLRefreshTokenStore(ttl=app.config["REFRESH_TOKEN_EXPIRES"]),
    )


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the per-test session."""
    return app.test_client()


@pytest.fixture(autouse=True)
def _bind_factories(session):
    """Bind Factory Boy to the per-test session."""
    from tests.factories import bind_session

    bind_session(session)
    yield
    bind_session(None)
