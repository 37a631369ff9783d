"""Factory Boy definition for :class:`auth_service.models.user.UserAccount`."""

from __future__ import annotations

import factory
from auth_service.models.user import UserAccount
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


class UserAccountFactory(BaseFactory):
    """
    Build persisted :class:`UserAccount` instances.

    Notes
    -----
    - The row is only flushed. Tests that hand the account to service code
      running its own Unit of Work must ``session.commit()`` first, otherwise
      a rollback inside that code discards it.
    """

    class Meta:
        model = UserAccount

    id = None  # let autoincrement handle it
    username = factory.Sequence(lambda n: f"user{n}")
    password_hash = factory.LazyFunction(lambda: "")  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set password using model setter (ensures hashing)."""
        obj.password = extracted or DEFAULT_PASSWORD
