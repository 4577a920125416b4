"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema, ProfileSchema, RefreshSchema, RegisterSchema, TokenPairSchema

__all__ = [
    "LoginSchema",
    "ProfileSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
]
