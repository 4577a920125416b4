from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from session_auth.services._shared.errors import ConflictError


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Store-level view of an authentication identity.

    :ivar id: Opaque unique identifier.
    :ivar email: Login email, unique, compared exactly as stored.
    :ivar password_hash: Salted password hash.
    :ivar first_name: Given name.
    :ivar last_name: Family name.
    :ivar is_active: Account flag.
    :ivar created_at: Creation timestamp (filled by the store).
    """

    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    is_active: bool = True
    created_at: datetime | None = None


class CredentialStore(Protocol):
    """Persistence contract for identity lookup during authentication."""

    def find_by_email(self, email: str) -> Identity | None:
        """Return the identity with exactly this email, if any."""

    def find_by_id(self, identity_id: str) -> Identity | None:
        """Return the identity with this id, if any."""

    def insert(self, identity: Identity) -> Identity:
        """
        Persist a new identity and return the stored view.

        :raises ConflictError: If the email is already taken.
        """


class InMemoryCredentialStore(CredentialStore):
    """Dictionary-backed credential store for tests and local wiring."""

    def __init__(self) -> None:
        self._by_id: dict[str, Identity] = {}
        self._id_by_email: dict[str, str] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Identity | None:
        identity_id = self._id_by_email.get(email)
        return self._by_id.get(identity_id) if identity_id else None

    def find_by_id(self, identity_id: str) -> Identity | None:
        return self._by_id.get(identity_id)

    def insert(self, identity: Identity) -> Identity:
        with self._lock:
            if identity.email in self._id_by_email:
                raise ConflictError("User", "email already in use")
            stored = replace(identity, created_at=identity.created_at or datetime.now(UTC))
            self._by_id[stored.id] = stored
            self._id_by_email[stored.email] = stored.id
            return stored
