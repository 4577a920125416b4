"""Authentication helpers for tests."""

from __future__ import annotations

from session_auth.services._shared.ports import Identity


def bearer(access_token: str) -> dict[str, str]:
    """Authorization header for ``access_token``."""
    return {"Authorization": f"Bearer {access_token}"}


def register_payload(email: str = "alice@example.com", password: str = "pw1234") -> dict:
    """JSON body accepted by ``POST /auth/register``."""
    return {"email": email, "password": password, "firstName": "Alice", "lastName": "Liddell"}


def make_identity(identity_id: str = "u-1", email: str = "alice@example.com") -> Identity:
    """Build a store-level identity (password hash irrelevant)."""
    return Identity(
        id=identity_id,
        email=email,
        password_hash="unused",
        first_name="Alice",
        last_name="Liddell",
    )
