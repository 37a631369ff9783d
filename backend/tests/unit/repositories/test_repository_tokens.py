"""Unit tests for the access and refresh token repositories."""

from datetime import datetime, timedelta, timezone

import pytest
from auth_service.models import AccessToken
from auth_service.repositories import AccessTokenRepository, RefreshTokenRepository
from sqlalchemy import func, select
from tests.factories.token import AccessTokenFactory, RefreshTokenFactory
from tests.factories.user import UserAccountFactory


class TestAccessTokenRepository:
    @pytest.fixture()
    def repo(self):
        return AccessTokenRepository()

    def test_upsert_inserts_then_updates(self, repo, session):
        user = UserAccountFactory()

        first = repo.upsert_for_user(user.id, "t1")
        first.is_active = False
        session.flush()
        second = repo.upsert_for_user(user.id, "t2")

        assert second.id == first.id
        assert second.token == "t2"
        assert second.is_active is True

    def test_upsert_does_not_rely_on_a_prior_read(self, repo, session, monkeypatch):
        user = UserAccountFactory()
        repo.upsert_for_user(user.id, "t1")
        # Another writer's row is invisible to the lookup
        monkeypatch.setattr(AccessTokenRepository, "find_by_user_id", lambda self, user_id: None)

        row = repo.upsert_for_user(user.id, "t2")

        assert row.token == "t2"
        rows = session.execute(
            select(func.count()).select_from(AccessToken).where(AccessToken.user_id == user.id)
        ).scalar_one()
        assert rows == 1

    def test_upsert_falls_back_without_on_conflict(self, repo, session, monkeypatch):
        monkeypatch.setattr(AccessTokenRepository, "upsert", lambda self, *a, **kw: False)
        user = UserAccountFactory()

        first = repo.upsert_for_user(user.id, "t1")
        second = repo.upsert_for_user(user.id, "t2")

        assert second.id == first.id
        assert second.token == "t2"

    def test_finders(self, repo, session):
        row = AccessTokenFactory(token="abc")

        assert repo.find_by_token("abc").id == row.id
        assert repo.find_by_user_id(row.user_id).id == row.id
        assert repo.find_by_user_id_and_token(row.user_id, "abc").id == row.id
        assert repo.find_by_user_id_and_token(row.user_id, "zzz") is None

    def test_delete_by_token(self, repo, session):
        AccessTokenFactory(token="abc")
        assert repo.delete_by_token("abc") == 1
        assert repo.find_by_token("abc") is None


class TestRefreshTokenRepository:
    @pytest.fixture()
    def repo(self):
        return RefreshTokenRepository()

    def test_finders(self, repo, session):
        row = RefreshTokenFactory()

        assert repo.find_by_token(row.token).id == row.id
        assert repo.find_by_user_id(row.user_id).id == row.id

    def test_replace_for_user_supersedes_previous_token(self, repo, session):
        old = RefreshTokenFactory()
        old_token = old.token
        expiry = datetime.now(timezone.utc) + timedelta(hours=1)

        row = repo.replace_for_user(old.user_id, "new-token", expiry, "access-2")

        assert row.token == "new-token"
        assert row.access_token == "access-2"
        assert repo.find_by_token(old_token) is None
        assert repo.find_by_user_id(old.user_id).token == "new-token"

    def test_replace_for_user_inserts_first_token(self, repo, session):
        user = UserAccountFactory()
        expiry = datetime.now(timezone.utc) + timedelta(hours=1)

        row = repo.replace_for_user(user.id, "first", expiry, "access-1")

        assert row.id is not None
        assert repo.find_by_user_id(user.id).token == "first"

    def test_delete_by_user_id(self, repo, session):
        row = RefreshTokenFactory()
        assert repo.delete_by_user_id(row.user_id) == 1
        assert repo.find_by_user_id(row.user_id) is None

    def test_delete_expired(self, repo, session):
        stale = RefreshTokenFactory(expired=True)
        live = RefreshTokenFactory()

        assert repo.delete_expired(datetime.now(timezone.utc)) == 1
        assert repo.find_by_token(stale.token) is None
        assert repo.find_by_token(live.token) is not None
