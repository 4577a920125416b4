"""Generic repository base for SQLAlchemy 2.x.

Repositories are persistence-only:

- They never implement use cases or domain policies.
- They never call commit/rollback; services define the Unit of Work.
- They return store-level read-models, never live ORM instances, so callers
  cannot mutate rows outside of an explicit repository operation.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.orm import Session

from session_auth.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


class BaseRepository(Generic[E]):
    """Persistence-only repository for a single aggregate.

    Subclasses MUST define ``model``: the SQLAlchemy mapped class.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``session_auth.core.extensions``.

        :param session: Session shared across the Unit of Work scope.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session or the Flask-scoped one.

        :rtype: :class:`sqlalchemy.orm.Session`
        """
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Basic CRUD -------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity in the session (no flush).

        :param instance: Entity to add.
        :type instance: E
        :returns: The same instance.
        :rtype: E
        """
        self.session.add(instance)
        return instance

    def get(self, pk: Any) -> E | None:
        """Fetch an entity by primary key.

        :param pk: Primary key value.
        :returns: The entity or ``None``.
        :rtype: E | None
        """
        return self.session.get(self.model, pk)

    def find_one(self, **filters: Any) -> E | None:
        """Return the first entity matching equality filters.

        :param filters: ``column=value`` pairs applied with ``AND``.
        :returns: The entity or ``None``.
        :rtype: E | None
        """
        stmt = select(self.model)
        for key, value in filters.items():
            stmt = stmt.where(getattr(self.model, key) == value)
        return cast(E | None, self.session.execute(stmt.limit(1)).scalars().first())

    def flush(self) -> None:
        """Flush pending changes to the database (no commit)."""
        self.session.flush()
