"""
session_auth.services._shared.ports
===================================

Collection of *ports* (hexagonal interfaces) that define the contracts
for credential lookup, refresh-token persistence and token signing.

Modules
-------
- :mod:`credential_store`:
    Defines :class:`~.CredentialStore` and the :class:`~.Identity` read-model,
    plus :class:`~.InMemoryCredentialStore`.

- :mod:`token_record_store`:
    Defines :class:`~.TokenRecordStore` (with the atomic
    ``compare_and_set_used`` contract), :class:`~.RefreshTokenRecord` and
    :class:`~.InMemoryTokenRecordStore`.

- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`: abstraction for JWT creation and decoding.

Design Notes
------------
Concrete adapters (SQLAlchemy repositories, Redis, PyJWT) live under
``session_auth.repositories`` and ``session_auth.infra``.
"""

from __future__ import annotations

from .credential_store import CredentialStore, Identity, InMemoryCredentialStore
from .token_provider import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenClaims,
    TokenProvider,
)
from .token_record_store import (
    InMemoryTokenRecordStore,
    RefreshTokenRecord,
    TokenRecordStore,
)

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "CredentialStore",
    "Identity",
    "InMemoryCredentialStore",
    "InMemoryTokenRecordStore",
    "RefreshTokenRecord",
    "TokenClaims",
    "TokenProvider",
    "TokenRecordStore",
]
