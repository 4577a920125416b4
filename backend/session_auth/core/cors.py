"""CORS policy for the auth API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from session_auth.core.logger import REQUEST_ID_HEADER


def parse_origins(raw: str | None) -> list[str]:
    """Split a comma-separated ``CORS_ORIGINS`` value into clean entries."""
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


def init_app(app: Flask) -> None:
    """Configure CORS for ``/api/*`` from ``CORS_ORIGINS`` and ``CORS_MAX_AGE``.

    A blank or ``"*"`` origin list allows any origin but disables credential
    support. Bearer tokens travel in the ``Authorization`` header, so that
    header is always allowed, and the correlation header is exposed to
    browsers.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    wildcard = len(origins) == 0 or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
