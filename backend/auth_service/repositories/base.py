"""Generic repository base for SQLAlchemy 2.x.

Repositories here are persistence-only:

- They never implement use cases or token policies.
- They never call commit/rollback; services and store adapters own the Unit
  of Work that wraps them.
- Lookups go through an explicit ``_filterable_fields`` whitelist.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import InstrumentedAttribute, Session

from auth_service.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define ``model`` and SHOULD override
    ``_filterable_fields`` to expose the columns safe for equality lookups.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``auth_service.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session, or the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist mapping of public filter keys to model attributes."""
        return {}

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any]) -> Select[Any]:
        """Apply whitelisted equality filters.

        :raises ValueError: On keys absent from ``_filterable_fields()``.
        """
        allowed = self._filterable_fields()
        unknown = [k for k in filters if k not in allowed]
        if unknown:
            raise ValueError(f"Unknown filter fields: {unknown}")
        clauses = [allowed[k] == v for k, v in filters.items()]
        return stmt.where(and_(*clauses)) if clauses else stmt

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush to materialize the PK."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key."""
        return cast(E | None, self.session.get(self.model, entity_id))

    def find_one(self, **filters: Any) -> E | None:
        """Find a single entity by whitelisted equality filters."""
        stmt = self._where(select(self.model), filters)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def exists(self, **filters: Any) -> bool:
        """Return ``True`` when at least one row matches the filters."""
        stmt = self._where(select(func.count()).select_from(self.model), filters)
        return bool(self.session.execute(stmt).scalar_one())

    def count(self) -> int:
        """Return the number of rows in the table."""
        stmt = select(func.count()).select_from(self.model)
        return int(self.session.execute(stmt).scalar_one())

    def delete(self, instance: E) -> None:
        """Delete an entity and flush."""
        self.session.delete(instance)
        self.flush()

    def delete_where(self, **filters: Any) -> int:
        """Bulk-delete rows matching whitelisted equality filters.

        :returns: Number of rows removed.
        """
        allowed = self._filterable_fields()
        unknown = [k for k in filters if k not in allowed]
        if unknown:
            raise ValueError(f"Unknown filter fields: {unknown}")
        stmt = delete(self.model).where(and_(*[allowed[k] == v for k, v in filters.items()]))
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)

    def upsert(self, values: Mapping[str, Any], *, conflict: str, update: tuple[str, ...]) -> bool:
        """Insert ``values`` or update the row clashing on ``conflict``, atomically.

        Uses ``INSERT ... ON CONFLICT DO UPDATE`` on PostgreSQL and SQLite so
        concurrent writers for the same key never trip the unique constraint.
        ``updated_at`` is bumped on the update path.

        :param values: Column values of the row to write.
        :param conflict: Name of the uniquely constrained column.
        :param update: Columns overwritten from ``values`` on conflict.
        :returns: ``False`` when the dialect has no native upsert; nothing is
            written in that case.
        """
        dialect = self.session.get_bind(mapper=self.model).dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(self.model).values(**values)
        elif dialect == "sqlite":
            stmt = sqlite.insert(self.model).values(**values)
        else:
            return False
        set_ = {name: stmt.excluded[name] for name in update}
        set_["updated_at"] = func.now()
        self.flush()
        self.session.execute(stmt.on_conflict_do_update(index_elements=[conflict], set_=set_))
        return True

    def flush(self) -> None:
        """Flush pending changes to the database without committing."""
        self.session.flush()
