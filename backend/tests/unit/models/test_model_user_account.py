"""Tests for the UserAccount model."""

from __future__ import annotations

import pytest
from auth_service.models import UserAccount
from sqlalchemy.exc import IntegrityError


class TestUserAccount:
    def test_password_hashing(self, session):
        u = UserAccount(username="tester")
        u.password = "secret123"
        session.add(u)
        session.commit()
        assert u.password_hash != "secret123"
        assert u.verify_password("secret123") is True
        assert u.verify_password("wrong") is False

    def test_password_is_write_only(self):
        u = UserAccount(username="u1")
        u.password = "x"
        with pytest.raises(AttributeError):
            _ = u.password

    def test_empty_password_rejected(self):
        with pytest.raises(ValueError):
            UserAccount(username="u1").password = ""

    def test_username_trimmed_and_required(self):
        assert UserAccount(username="  alice ").username == "alice"
        with pytest.raises(ValueError):
            UserAccount(username="   ")

    def test_username_unique(self, session):
        u1 = UserAccount(username="bob")
        u1.password = "pw"
        session.add(u1)
        session.commit()

        u2 = UserAccount(username="bob")
        u2.password = "pw"
        session.add(u2)
        with pytest.raises(IntegrityError):
            session.commit()

    def test_repr_hides_credentials(self, session):
        u = UserAccount(username="carol")
        u.password = "pw"
        session.add(u)
        session.flush()
        assert repr(u) == f"<UserAccount id={u.id}>"

    def test_username_too_long_rejected(self):
        with pytest.raises(ValueError):
            UserAccount(username="x" * 51)

    def test_deleting_account_removes_token_rows(self, session):
        from auth_service.models import AccessToken, RefreshToken
        from tests.factories.token import AccessTokenFactory, RefreshTokenFactory
        from tests.factories.user import UserAccountFactory

        user = UserAccountFactory()
        AccessTokenFactory(user_id=user.id)
        RefreshTokenFactory(user_id=user.id)
        session.expire(user)
        assert user.access_token is not None
        assert user.refresh_token is not None

        session.delete(user)
        session.flush()

        assert session.query(AccessToken).filter_by(user_id=user.id).count() == 0
        assert session.query(RefreshToken).filter_by(user_id=user.id).count() == 0
