"""Factory Boy definitions for access and refresh token rows."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import factory
from auth_service.models import AccessToken, RefreshToken
from tests.factories import BaseFactory
from tests.factories.user import UserAccountFactory


class AccessTokenFactory(BaseFactory):
    """Active access-token row for a fresh account."""

    class Meta:
        model = AccessToken

    id = None
    user_id = factory.LazyFunction(lambda: UserAccountFactory().id)
    token = factory.Sequence(lambda n: f"access-token-{n}")
    is_active = True


class RefreshTokenFactory(BaseFactory):
    """Refresh-token row; ``expired=True`` puts its expiry in the past."""

    class Meta:
        model = RefreshToken

    class Params:
        expired = factory.Trait(
            expiry_date=factory.LazyFunction(
                lambda: datetime.now(timezone.utc) - timedelta(minutes=5)
            )
        )

    id = None
    user_id = factory.LazyFunction(lambda: UserAccountFactory().id)
    token = factory.LazyFunction(lambda: str(uuid4()))
    expiry_date = factory.LazyFunction(lambda: datetime.now(timezone.utc) + timedelta(days=1))
    access_token = factory.Sequence(lambda n: f"access-token-{n}")
