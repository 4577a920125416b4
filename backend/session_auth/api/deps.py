"""Shared API helpers: response building, timing and service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from session_auth.core.proxy import client_address, client_user_agent
from session_auth.services._shared.base import ServiceContext, UnitOfWorkFactory
from session_auth.services._shared.ports import TokenProvider
from session_auth.services.auth.dto import AuthTokenConfig
from session_auth.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])

#: ``app.extensions`` key holding the wiring built by the application factory
AUTH_EXTENSION = "session_auth"


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""
    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def service_context() -> ServiceContext:
    """Build the request-scoped service context from the current request."""
    return ServiceContext(
        request_id=getattr(g, "request_id", None),
        ip_address=client_address(),
        user_agent=client_user_agent(),
    )


def get_auth_service() -> AuthService:
    """Return an :class:`AuthService` bound to the current request.

    The token provider, lifetimes and optional Unit of Work factory are built
    once by the application factory and stored under ``app.extensions``.
    """
    wiring = cast(dict[str, Any], current_app.extensions[AUTH_EXTENSION])
    token_provider = cast(TokenProvider, wiring["token_provider"])
    token_cfg = cast(AuthTokenConfig, wiring["token_cfg"])
    uow_factory = cast(UnitOfWorkFactory | None, wiring.get("uow_factory"))
    return AuthService(
        token_provider=token_provider,
        token_cfg=token_cfg,
        ctx=service_context(),
        uow_factory=uow_factory,
    )
