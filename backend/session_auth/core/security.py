"""Password hashing helpers (werkzeug)."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(raw: str) -> str:
    """
    Hash a plaintext password.

    :param raw: Plain text password.
    :type raw: str
    :returns: Salted hash in werkzeug's ``method$salt$hash`` format.
    :rtype: str
    :raises ValueError: If the password is empty or not a string.
    """
    if not isinstance(raw, str) or not raw:
        raise ValueError("Password must be a non-empty string.")
    return generate_password_hash(raw)


def verify_password(password_hash: str | None, raw: str) -> bool:
    """
    Compare ``raw`` against ``password_hash``.

    The digest comparison is constant-time (``hmac.compare_digest`` inside
    werkzeug).

    :param password_hash: Stored hash; empty values never match.
    :type password_hash: str | None
    :param raw: Plain text password candidate.
    :type raw: str
    :returns: ``True`` if it matches; otherwise ``False``.
    :rtype: bool
    """
    if not password_hash or not isinstance(raw, str):
        return False
    # ``check_password_hash`` is untyped; coerce to bool for mypy.
    return bool(check_password_hash(password_hash, raw))
