# session_auth/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from session_auth.core import errors as api_errors
from session_auth.services._shared.errors import (
    ConflictError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
)
from session_auth.uow.base import UnitOfWork

UnitOfWorkFactory = Callable[[], UnitOfWork]


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param request_id: Correlation id for logging/tracing.
    :param ip_address: Caller address, recorded on issued refresh tokens.
    :param user_agent: Caller user agent, recorded on issued refresh tokens.
    """

    request_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services never touch the global session; they always use a Unit of Work.
    - Passing ``uow_factory`` swaps the SQLAlchemy UoW for any other
      implementation (e.g. :class:`~session_auth.uow.InMemoryUnitOfWork`); the
      same factory then serves both read-only and read-write scopes.
    """

    # ---- Configuration defaults (override per subclass if needed) ----
    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
    ) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context.
        :type ctx: ServiceContext | None
        :param uow_factory: Optional Unit of Work factory.
        :type uow_factory: Callable[[], UnitOfWork] | None
        """
        self.ctx = ctx or ServiceContext()
        self._uow_factory = uow_factory

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> UnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: UnitOfWork
        """
        if self._uow_factory is not None:
            return self._uow_factory()
        from session_auth.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> UnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply `SET TRANSACTION READ ONLY` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: UnitOfWork
        """
        if self._uow_factory is not None:
            return self._uow_factory()
        from session_auth.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork

        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, NotFoundError):
            # → 404 Not Found
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            # → 409 Conflict
            return api_errors.Conflict(str(exc))

        if isinstance(exc, UnauthorizedError):
            # → 401 Unauthorized
            return api_errors.Unauthorized(str(exc) or "Unauthorized")

        if isinstance(exc, InvalidTokenError):
            # → 401; decoder detail stays server-side
            return api_errors.Unauthorized("Invalid token")

        if isinstance(exc, InvalidInputError):
            # → 422, same shape as schema validation failures
            return api_errors.APIError(
                message=str(exc),
                status_code=422,
                code="validation_error",
            )

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
