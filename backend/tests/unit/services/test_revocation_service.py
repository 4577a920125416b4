# tests/unit/services/test_revocation_service.py
from __future__ import annotations

import pytest
from session_auth.services.auth.issuer import TokenIssuer
from session_auth.services.auth.revocation import RevocationService
from session_auth.services.auth.rotation import RotationProtocol, RotationRejected
from tests.helpers.auth import make_identity


@pytest.fixture()
def alice(memory_uow):
    return memory_uow.users.insert(make_identity("u-1"))


@pytest.fixture()
def issuer(token_provider, memory_uow) -> TokenIssuer:
    return TokenIssuer(tokens=token_provider, uow_factory=lambda: memory_uow)


@pytest.fixture()
def revocation(memory_uow) -> RevocationService:
    return RevocationService(uow_factory=lambda: memory_uow)


@pytest.fixture()
def rotation(token_provider, issuer, memory_uow) -> RotationProtocol:
    return RotationProtocol(tokens=token_provider, issuer=issuer, uow_factory=lambda: memory_uow)


def test_revoke_one_marks_record_revoked(revocation, issuer, alice, memory_uow, rotation):
    pair = issuer.issue(alice)

    revocation.revoke_one(pair.refresh_token)

    record = memory_uow.refresh_tokens.find_by_token(pair.refresh_token)
    assert record.is_revoked is True
    assert isinstance(rotation.rotate(pair.refresh_token), RotationRejected)


def test_revoke_one_is_idempotent_and_silent(revocation, issuer, alice):
    pair = issuer.issue(alice)

    revocation.revoke_one(pair.refresh_token)
    revocation.revoke_one(pair.refresh_token)
    revocation.revoke_one("never-issued")


def test_revoke_one_applies_to_used_records(revocation, rotation, issuer, alice, memory_uow):
    pair = issuer.issue(alice)
    rotation.rotate(pair.refresh_token)

    revocation.revoke_one(pair.refresh_token)

    record = memory_uow.refresh_tokens.find_by_token(pair.refresh_token)
    assert record.is_used is True
    assert record.is_revoked is True


def test_revoke_all_kills_every_live_token(revocation, rotation, issuer, alice, memory_uow):
    pairs = [issuer.issue(alice) for _ in range(3)]
    bob = memory_uow.users.insert(make_identity("u-2", email="bob@example.com"))
    bob_pair = issuer.issue(bob)

    assert revocation.revoke_all(alice.id) == 3
    assert revocation.revoke_all(alice.id) == 0

    for pair in pairs:
        assert isinstance(rotation.rotate(pair.refresh_token), RotationRejected)
    assert memory_uow.refresh_tokens.find_by_token(bob_pair.refresh_token).is_revoked is False


def test_revoke_all_for_unknown_identity_is_noop(revocation):
    assert revocation.revoke_all("nobody") == 0
