# tests/unit/services/test_user_service.py
from __future__ import annotations

import pytest
from auth_service.services._shared.errors import NotFoundError
from auth_service.services.users import UserAccountOut, UserService
from tests.factories.user import UserAccountFactory


def test_get_user_returns_public_view(session):
    user = UserAccountFactory(username="carol")

    out = UserService().get_user(user.id)

    assert out == UserAccountOut(id=user.id, username="carol")


def test_get_user_missing(session):
    with pytest.raises(NotFoundError, match="UserAccount not found: 999"):
        UserService().get_user(999)
