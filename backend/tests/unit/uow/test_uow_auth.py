"""
Unit tests for the read-write and read-only Units of Work.
"""

from __future__ import annotations

import pytest
from auth_service.models import UserAccount
from auth_service.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork
from tests.factories.user import UserAccountFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, db, session):
        initial = db.session.query(UserAccount).count()

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserAccountFactory.build())

        assert db.session.query(UserAccount).count() == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, db, session):
        initial = db.session.query(UserAccount).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserAccountFactory.build())
            raise RuntimeError("boom")

        assert db.session.query(UserAccount).count() == initial


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_reads_see_existing_rows(self, session):
        user = UserAccountFactory(username="reader")
        session.commit()

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.users.get_by_username("reader").id == user.id

    def test_blocks_orm_flush_writes(self, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(
            RuntimeError, match="ORM flush blocked"
        ):
            uow.session.add(UserAccountFactory.build())
            uow.session.flush()
        session.rollback()

    def test_commit_is_disallowed(self, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(RuntimeError):
            uow.commit()

    def test_leaves_outer_transaction_untouched(self, session):
        user = UserAccountFactory(username="pending")  # flushed, not committed

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.users.get(user.id) is not None

        assert session.get(UserAccount, user.id) is not None
