"""User model: the authentication identity."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, String, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column, validates

from session_auth.core.extensions import db
from session_auth.core.security import hash_password, verify_password

from .base import ReprMixin, TimestampMixin, UUIDPKMixin


def has_dotted_domain(email: str) -> bool:
    """Return ``True`` when the part after the last ``@`` contains a dot."""
    local, sep, domain = email.rpartition("@")
    return bool(local and sep and "." in domain)


class User(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email, unique and compared exactly as stored (no case folding).
    password_hash : str
        Hashed password (write-only setter via ``password``).
    first_name : str
        Given name.
    last_name : str
        Family name.
    is_active : bool
        Account flag; stored and exposed, not consulted during login.
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).
    """

    __tablename__ = "users"

    # Columns
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    # Constraints (the unique index doubles as the lookup index)
    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        self.password_hash = hash_password(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        return verify_password(self.password_hash, raw)

    # -------------------- Validators --------------------
    @validates("email")
    def _validate_email(self, key: str, value: str) -> str:
        """
        Validate email presence and rough shape; the value is kept verbatim.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        # Minimal sanity check; full validation happens at API layer.
        if not has_dotted_domain(value):
            raise ValueError("Email format looks invalid.")
        return value

    @validates("first_name", "last_name")
    def _normalize_name(self, key: str, value: str) -> str:
        """Trim names and reject blanks."""
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} is required.")
        return value.strip()
