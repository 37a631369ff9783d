"""Factory Boy base for account and token rows.

Factories flush into whatever session :func:`bind_session` received, which
in the test suite is the SAVEPOINT-wrapped session from ``conftest``.
"""

from __future__ import annotations

import factory
from sqlalchemy.orm import Session, scoped_session

_bound: Session | scoped_session | None = None


def bind_session(session: Session | scoped_session | None) -> None:
    """Point every factory at ``session`` (``None`` unbinds)."""
    global _bound
    _bound = session


def current_session() -> Session | scoped_session:
    if _bound is None:
        raise RuntimeError("No session bound for factories; request the 'session' fixture.")
    return _bound


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Rows are flushed, not committed, so the test transaction can undo them."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = current_session
        sqlalchemy_session_persistence = "flush"


__all__ = ["BaseFactory", "bind_session", "current_session"]
