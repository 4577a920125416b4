"""Unit of Work abstractions and concrete implementations.

This package re-exports the SQLAlchemy-backed unit of work used by the HTTP
application, the in-memory variant used by tests and embedders, and the
abstract contracts that service layers depend on.
"""

from .base import UnitOfWork
from .memory_uow import InMemoryUnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "InMemoryUnitOfWork",
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
]
