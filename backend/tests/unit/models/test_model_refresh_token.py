"""Model-level tests for :class:`RefreshToken`."""

from __future__ import annotations

import pytest
from session_auth.models import RefreshToken
from sqlalchemy.exc import IntegrityError
from tests.factories.refresh_token import RefreshTokenFactory


def test_defaults(session):
    row = RefreshTokenFactory()
    session.flush()

    assert row.is_used is False
    assert row.is_revoked is False
    assert row.used_at is None
    assert row.user.id == row.user_id
    assert row.created_at is not None


def test_token_value_is_unique(session):
    existing = RefreshTokenFactory()
    session.add(
        RefreshToken(token=existing.token, user_id=existing.user_id, expires_at=existing.expires_at)
    )
    with pytest.raises(IntegrityError):
        session.flush()
