"""Model-level tests for :class:`User`."""

from __future__ import annotations

import pytest
from session_auth.models import User
from tests.factories.user import UserFactory


def test_password_is_write_only_and_hashed(session):
    user = UserFactory(password="pw1234")

    assert user.password_hash != "pw1234"
    assert user.verify_password("pw1234") is True
    assert user.verify_password("other") is False
    with pytest.raises(AttributeError):
        _ = user.password


def test_email_is_stored_verbatim(session):
    user = UserFactory(email="Alice.Smith@Example.COM")
    session.flush()

    assert user.email == "Alice.Smith@Example.COM"


@pytest.mark.parametrize("email", ["", "no-at-sign", "user@localhost"])
def test_email_shape_is_validated(email):
    with pytest.raises(ValueError):
        User(email=email)


def test_names_are_trimmed_and_required():
    user = User(first_name="  Alice ", last_name="Liddell")
    assert user.first_name == "Alice"
    with pytest.raises(ValueError):
        User(last_name="   ")


def test_defaults_after_flush(session):
    user = UserFactory()
    session.flush()

    assert len(user.id) == 36
    assert user.is_active is True
    assert user.created_at is not None
    assert "User" in repr(user)
