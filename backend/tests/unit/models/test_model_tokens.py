"""Tests for the AccessToken and RefreshToken models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from auth_service.models import AccessToken, RefreshToken
from sqlalchemy.exc import IntegrityError
from tests.factories.token import AccessTokenFactory, RefreshTokenFactory
from tests.factories.user import UserAccountFactory


class TestAccessToken:
    def test_repr_omits_token_value(self, session):
        row = AccessTokenFactory(token="secret-jwt")
        assert "secret-jwt" not in repr(row)
        assert repr(row) == f"<AccessToken id={row.id} user_id={row.user_id} is_active=True>"

    def test_defaults_to_active(self, session):
        user = UserAccountFactory()
        row = AccessToken(user_id=user.id, token="abc")
        session.add(row)
        session.flush()
        session.refresh(row)
        assert row.is_active is True

    def test_one_row_per_user(self, session):
        existing = AccessTokenFactory()
        session.add(AccessToken(user_id=existing.user_id, token="another"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_token_unique(self, session):
        existing = AccessTokenFactory()
        other = UserAccountFactory()
        session.add(AccessToken(user_id=other.id, token=existing.token))
        with pytest.raises(IntegrityError):
            session.flush()


class TestRefreshToken:
    def test_one_row_per_user(self, session):
        existing = RefreshTokenFactory()
        session.add(
            RefreshToken(
                user_id=existing.user_id,
                token="other-token",
                expiry_date=datetime.now(timezone.utc) + timedelta(days=1),
            )
        )
        with pytest.raises(IntegrityError):
            session.flush()

    def test_access_token_is_optional(self, session):
        row = RefreshTokenFactory(access_token=None)
        assert row.id is not None
        assert row.access_token is None
