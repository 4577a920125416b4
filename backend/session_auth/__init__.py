"""Expose the application factory at package level.

``from session_auth import create_app`` builds the Flask application; the
service layer under :mod:`session_auth.services` is usable without it.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
