"""Tests for :class:`RefreshTokenRepository` state transitions."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import pytest
from session_auth.core.extensions import db
from session_auth.models import RefreshToken, User
from session_auth.models.base import new_id
from session_auth.repositories import RefreshTokenRepository
from session_auth.services._shared.ports import RefreshTokenRecord
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


def test_insert_and_find_by_token(session):
    repo = RefreshTokenRepository(session=session)
    user = UserFactory()
    expires = datetime.now(UTC).replace(microsecond=0) + timedelta(days=30)

    stored = repo.insert(
        RefreshTokenRecord(
            id=new_id(), token="tok-1", user_id=user.id, expires_at=expires, ip_address="::1"
        )
    )

    found = repo.find_by_token("tok-1")
    assert found is not None
    assert found.id == stored.id
    assert found.expires_at == expires
    assert found.is_used is False
    assert found.ip_address == "::1"
    assert repo.find_by_token("tok-unknown") is None


def test_find_by_token_filters_on_revocation(session):
    repo = RefreshTokenRepository(session=session)
    row = RefreshTokenFactory(is_revoked=True)

    assert repo.find_by_token(row.token, is_revoked=False) is None
    assert repo.find_by_token(row.token, is_revoked=True).id == row.id
    assert repo.find_by_token(row.token).id == row.id


def test_compare_and_set_used_succeeds_once(session):
    repo = RefreshTokenRepository(session=session)
    row = RefreshTokenFactory()
    now = datetime.now(UTC)

    assert repo.compare_and_set_used(row.id, used_at=now) is True
    assert repo.compare_and_set_used(row.id, used_at=now) is False

    record = repo.find_by_token(row.token)
    assert record.is_used is True
    assert record.used_at is not None


def test_compare_and_set_used_refuses_revoked_and_missing(session):
    repo = RefreshTokenRepository(session=session)
    row = RefreshTokenFactory(is_revoked=True)

    assert repo.compare_and_set_used(row.id, used_at=datetime.now(UTC)) is False
    assert repo.compare_and_set_used("missing", used_at=datetime.now(UTC)) is False


def test_set_revoked(session):
    repo = RefreshTokenRepository(session=session)
    row = RefreshTokenFactory()

    assert repo.set_revoked(row.id) is True
    assert repo.set_revoked(row.id) is True  # idempotent
    assert repo.set_revoked("missing") is False
    assert repo.find_by_token(row.token).is_revoked is True


def test_bulk_set_revoked_for_identity(session):
    repo = RefreshTokenRepository(session=session)
    user = UserFactory()
    other = UserFactory()
    RefreshTokenFactory.create_batch(3, user=user)
    RefreshTokenFactory(user=user, is_revoked=True)
    keep = RefreshTokenFactory(user=other)

    assert repo.bulk_set_revoked_for_identity(user.id) == 3
    assert repo.bulk_set_revoked_for_identity(user.id) == 0
    assert all(r.is_revoked for r in repo.list_for_identity(user.id))
    assert repo.find_by_token(keep.token).is_revoked is False


@pytest.fixture()
def file_engine(tmp_path):
    """File-backed SQLite engine so each thread gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'cas.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    db.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.mark.parametrize("workers", [2, 8])
def test_compare_and_set_used_has_one_winner_across_connections(file_engine, workers):
    """
    GIVEN one live refresh-token row
    WHEN several connections race to consume it
    THEN exactly one UPDATE affects the row.
    """
    with Session(file_engine) as setup:
        user = User(email="race@example.com", first_name="Ada", last_name="Race", password="pw")
        setup.add(user)
        setup.flush()
        row = RefreshToken(
            token="race-token",
            user_id=user.id,
            expires_at=datetime.now(UTC) + timedelta(days=1),
        )
        setup.add(row)
        setup.commit()
        record_id = row.id

    barrier = threading.Barrier(workers)
    results: list[bool] = []
    lock = threading.Lock()

    def consume() -> None:
        with Session(file_engine) as s:
            repo = RefreshTokenRepository(session=s)
            barrier.wait()
            won = repo.compare_and_set_used(record_id, used_at=datetime.now(UTC))
            s.commit()
        with lock:
            results.append(won)

    threads = [threading.Thread(target=consume) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(results) == [False] * (workers - 1) + [True]
    with Session(file_engine) as check:
        assert RefreshTokenRepository(session=check).find_by_token("race-token").is_used is True
