"""Unit tests for UserAccountRepository."""

import pytest
from auth_service.repositories import UserAccountRepository
from tests.factories.user import UserAccountFactory


class TestUserAccountRepository:
    """Ensure ``UserAccountRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self):
        return UserAccountRepository()

    def test_get_by_username(self, repo, session):
        u = UserAccountFactory(username="alice")
        session.commit()

        fetched = repo.get_by_username("alice")
        assert fetched is not None
        assert fetched.id == u.id
        assert repo.get_by_username(" alice ") is not None
        assert repo.get_by_username("nobody") is None

    def test_exists_by_username(self, repo, session):
        UserAccountFactory(username="bob")

        assert repo.exists_by_username("bob")
        assert not repo.exists_by_username("nonexistent")

    def test_find_one_and_count(self, repo, session):
        u = UserAccountFactory(username="dave")

        assert repo.find_one(username="dave").id == u.id
        assert repo.count() >= 1
        assert repo.exists(id=u.id)

    def test_unknown_filter_rejected(self, repo, session):
        with pytest.raises(ValueError):
            repo.find_one(password_hash="x")
