"""User repository: SQLAlchemy implementation of the credential store."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from session_auth.models.base import as_utc
from session_auth.models.user import User
from session_auth.repositories.base import BaseRepository
from session_auth.services._shared.errors import ConflictError, violates
from session_auth.services._shared.ports import CredentialStore, Identity


def to_identity(user: User) -> Identity:
    """Map a :class:`User` row to the store-level :class:`Identity`."""
    return Identity(
        id=user.id,
        email=user.email,
        password_hash=user.password_hash,
        first_name=user.first_name,
        last_name=user.last_name,
        is_active=bool(user.is_active),
        created_at=as_utc(user.created_at),
    )


class UserRepository(BaseRepository[User], CredentialStore):
    """Persistence-only repository for :class:`User`.

    Emails are matched exactly as stored; no case folding or trimming.
    It NEVER handles JWT or session creation, only DB-level identity lookup.
    """

    model = User

    def find_by_email(self, email: str) -> Identity | None:
        """Fetch an identity by exact email.

        :param email: Email address as supplied by the caller.
        :type email: str
        :returns: Identity or ``None`` when not found.
        :rtype: Identity | None
        """
        user = self.find_one(email=email)
        return to_identity(user) if user is not None else None

    def find_by_id(self, identity_id: str) -> Identity | None:
        user = self.get(identity_id)
        return to_identity(user) if user is not None else None

    def insert(self, identity: Identity) -> Identity:
        """Insert a new user row and flush so constraint violations surface here.

        :param identity: Identity to persist; ``password_hash`` must already be set.
        :type identity: Identity
        :returns: Stored identity (with ``created_at``).
        :rtype: Identity
        :raises ConflictError: If the email is already taken.
        """
        user = User(
            id=identity.id,
            email=identity.email,
            password_hash=identity.password_hash,
            first_name=identity.first_name,
            last_name=identity.last_name,
            is_active=identity.is_active,
        )
        self.add(user)
        try:
            self.flush()
        except IntegrityError as exc:
            if violates(exc, "uq_users_email"):
                raise ConflictError("User", "email already in use") from exc
            raise
        return to_identity(user)
