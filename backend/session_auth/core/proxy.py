"""Reverse-proxy awareness for client audit metadata."""

from __future__ import annotations

from flask import Flask, request
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Wrap the WSGI app in :class:`ProxyFix` when ``USE_PROXYFIX`` is on.

    Refresh-token records store the caller's address for audit; behind a load
    balancer ``request.remote_addr`` is only correct once ``X-Forwarded-For``
    is honoured. ``PROXYFIX_HOPS`` sets how many proxies are trusted (1 by
    default).
    """
    if app.config.get("USE_PROXYFIX", True):
        hops = int(app.config.get("PROXYFIX_HOPS", 1))
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)


def client_address() -> str | None:
    """Return the caller's address for the current request, if any."""
    return request.remote_addr or None


def client_user_agent() -> str | None:
    """Return the caller's ``User-Agent`` header, if any."""
    return request.headers.get("User-Agent") or None
