"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session, scoped_session

from auth_service.core.extensions import db
from auth_service.repositories import (
    AccessTokenRepository,
    RefreshTokenRepository,
    UserAccountRepository,
)
from auth_service.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserAccountRepository(session=self.session)
        self.tokens = AccessTokenRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write scope on the Flask-scoped session.

    The session begins its transaction lazily, on the first query.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    While the scope is open any ORM flush carrying new/dirty/deleted objects
    is blocked. When the scope started the transaction it also ends it with a
    rollback; when it attached to a transaction already in progress (an outer
    request scope or a test fixture) that transaction is left untouched.
    ``commit()`` is disallowed.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)
        self._owns_transaction = False
        self._guarded: Session | None = None

    def _current_session(self) -> Session:
        if isinstance(self.session, scoped_session):
            return self.session()
        return self.session

    @staticmethod
    def _block_writes(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError(
                "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
            )

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        target = self._current_session()
        self._owns_transaction = not target.in_transaction()
        event.listen(target, "before_flush", self._block_writes)
        self._guarded = target
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                self.rollback()
        finally:
            if self._guarded is not None:
                event.remove(self._guarded, "before_flush", self._block_writes)
                self._guarded = None

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
