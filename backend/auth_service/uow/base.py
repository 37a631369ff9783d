"""Unit of Work contract shared by the SQL store adapters and services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from auth_service.repositories import (
        AccessTokenRepository,
        RefreshTokenRepository,
        UserAccountRepository,
    )


class UnitOfWork(ABC):
    """
    One transactional scope over the account and token repositories.

    Used as a context manager: the block's writes are committed when it exits
    cleanly and rolled back when it raises. Read-only variants override
    :meth:`__exit__`.
    """

    users: UserAccountRepository
    tokens: AccessTokenRepository
    refresh_tokens: RefreshTokenRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
