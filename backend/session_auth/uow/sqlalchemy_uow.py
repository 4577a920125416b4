"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from session_auth.core.extensions import db
from session_auth.repositories import RefreshTokenRepository, UserRepository
from session_auth.services._shared.ports import TokenRecordStore
from session_auth.uow.base import UnitOfWork

# Dialects that understand ``SET TRANSACTION`` directives
_SET_TRANSACTION_DIALECTS = ("postgresql", "mysql", "mariadb")


class SQLAlchemyRepositoryContainer:
    """Provide stores that share a SQLAlchemy session.

    ``refresh_tokens`` may be replaced by an external record store (Redis);
    identities always live in the relational database.
    """

    def __init__(
        self, *, session: Session, refresh_tokens: TokenRecordStore | None = None
    ) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens: TokenRecordStore = (
            refresh_tokens
            if refresh_tokens is not None
            else RefreshTokenRepository(session=self.session)
        )


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Commits when the block exits cleanly, rolls back otherwise.
    """

    def __init__(self, *, refresh_tokens: TokenRecordStore | None = None) -> None:
        super().__init__(session=db.session, refresh_tokens=refresh_tokens)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    - Applies ``SET TRANSACTION ISOLATION LEVEL`` and ``READ ONLY`` on dialects
      that support them, when this scope owns the transaction.
    - Installs write guards (ORM flush and cursor-level DML) in every case.
    - Never commits; an owned transaction is rolled back on exit.

    :param isolation_level: Isolation hint, e.g. ``"READ COMMITTED"``.
    :type isolation_level: str | None
    :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
    :type enforce_db_readonly: bool
    """

    _WRITE_PREFIXES = (
        "insert",
        "update",
        "delete",
        "merge",
        "alter",
        "drop",
        "truncate",
        "create",
        "replace",
    )

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
        refresh_tokens: TokenRecordStore | None = None,
    ) -> None:
        super().__init__(session=db.session, refresh_tokens=refresh_tokens)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly

        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._guards: tuple | None = None

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """Open (or attach to) a transaction and install the write guards.

        When the session already runs a transaction (autobegin, outer test
        fixture), the scope attaches to it and skips ``SET TRANSACTION``.
        """
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            self._txn_ctx = None

        self._conn = self.session.connection()
        self._install_guards()

        if self._txn_ctx is not None and self._conn.dialect.name in _SET_TRANSACTION_DIALECTS:
            self._apply_transaction_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                with suppress(Exception):
                    self.session.rollback()
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
        finally:
            self._remove_guards()
            self._conn = None

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        :raises RuntimeError: always; read-only scopes never commit.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Internals ----------------------------------

    def _apply_transaction_directives(self) -> None:
        try:
            if self.isolation_level:
                iso = self.isolation_level.upper().strip()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning(
                "SET TRANSACTION directives failed (%s). Falling back to guards-only.", exc
            )

    def _install_guards(self) -> None:
        if self._guards is not None:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

        def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            first = statement.lstrip().split(None, 1)[0].lower() if statement else ""
            if first.startswith(self._WRITE_PREFIXES):
                raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {first.upper()}")

        target = self._conn if self._conn is not None else self.session.get_bind()
        event.listen(self.session, "before_flush", _before_flush)
        event.listen(target, "before_cursor_execute", _before_cursor_execute)
        self._guards = (target, _before_flush, _before_cursor_execute)

    def _remove_guards(self) -> None:
        if self._guards is None:
            return
        target, before_flush, before_cursor_execute = self._guards
        with suppress(Exception):
            event.remove(self.session, "before_flush", before_flush)
        with suppress(Exception):
            event.remove(target, "before_cursor_execute", before_cursor_execute)
        self._guards = None
