"""
In-memory implementation of UnitOfWork.

Each store is individually thread-safe and applies writes immediately, so
``commit``/``rollback`` are no-ops. Share one instance (or one pair of stores)
across every service that must observe the same state.
"""

from __future__ import annotations

from session_auth.services._shared.ports import (
    CredentialStore,
    InMemoryCredentialStore,
    InMemoryTokenRecordStore,
    TokenRecordStore,
)
from session_auth.uow.base import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """UoW over in-process stores; reusable as a context manager any number of times."""

    def __init__(
        self,
        *,
        users: CredentialStore | None = None,
        refresh_tokens: TokenRecordStore | None = None,
    ) -> None:
        self.users = users if users is not None else InMemoryCredentialStore()
        self.refresh_tokens = (
            refresh_tokens if refresh_tokens is not None else InMemoryTokenRecordStore()
        )

    def __enter__(self) -> InMemoryUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass
