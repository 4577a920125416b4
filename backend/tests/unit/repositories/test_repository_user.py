"""Tests for :class:`UserRepository` as a credential store."""

from __future__ import annotations

import pytest
from session_auth.core.security import hash_password
from session_auth.repositories import UserRepository
from session_auth.services._shared.errors import ConflictError
from session_auth.services._shared.ports import Identity
from tests.factories.user import UserFactory


def _identity(email: str, identity_id: str = "9f1d3c1e-0000-4000-8000-000000000001") -> Identity:
    return Identity(
        id=identity_id,
        email=email,
        password_hash=hash_password("pw1234"),
        first_name="Alice",
        last_name="Liddell",
    )


def test_find_by_email_is_exact(session):
    repo = UserRepository(session=session)
    user = UserFactory(email="Mixed@Example.com")

    found = repo.find_by_email("Mixed@Example.com")
    assert found is not None
    assert found.id == user.id
    assert repo.find_by_email("mixed@example.com") is None


def test_find_by_id_maps_to_identity(session):
    repo = UserRepository(session=session)
    user = UserFactory()

    identity = repo.find_by_id(user.id)

    assert isinstance(identity, Identity)
    assert identity.email == user.email
    assert identity.password_hash == user.password_hash
    assert identity.created_at is not None
    assert identity.created_at.tzinfo is not None
    assert repo.find_by_id("missing") is None


def test_insert_persists_identity(session):
    repo = UserRepository(session=session)

    stored = repo.insert(_identity("new@example.com"))

    assert stored.id == "9f1d3c1e-0000-4000-8000-000000000001"
    assert repo.find_by_email("new@example.com").id == stored.id


def test_insert_duplicate_email_raises_conflict(session):
    repo = UserRepository(session=session)
    UserFactory(email="taken@example.com")

    with pytest.raises(ConflictError):
        repo.insert(_identity("taken@example.com", "9f1d3c1e-0000-4000-8000-000000000002"))
    session.rollback()
