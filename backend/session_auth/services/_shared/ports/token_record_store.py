from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for one issued refresh token.

    :ivar id: Record identifier.
    :ivar token: Serialized refresh token (lookup key, globally unique).
    :ivar user_id: Owning identity id.
    :ivar expires_at: Absolute expiration (UTC), fixed at creation.
    :ivar is_used: Consumed by a rotation; terminal.
    :ivar is_revoked: Revoked by logout; terminal.
    :ivar created_at: Creation timestamp.
    :ivar used_at: Consumption timestamp, when used.
    :ivar ip_address: Caller address at creation (audit only).
    :ivar user_agent: Caller user agent at creation (audit only).
    """

    id: str
    token: str
    user_id: str
    expires_at: datetime
    is_used: bool = False
    is_revoked: bool = False
    created_at: datetime | None = None
    used_at: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    @property
    def is_terminal(self) -> bool:
        """``True`` once the record can never pass validation again."""
        return self.is_used or self.is_revoked

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class TokenRecordStore(Protocol):
    """
    Stateful store for refresh-token records.

    ``compare_and_set_used`` MUST be a single atomic conditional write: of any
    number of concurrent callers for the same record, exactly one observes
    ``True``.
    """

    def insert(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """Persist a brand-new record (``is_used``/``is_revoked`` false)."""

    def find_by_token(
        self, token: str, *, is_revoked: bool | None = None
    ) -> RefreshTokenRecord | None:
        """
        Fetch a record by exact token value.

        :param is_revoked: When not ``None``, only match records in that state.
        """

    def compare_and_set_used(self, record_id: str, *, used_at: datetime) -> bool:
        """
        Flip ``is_used`` false → true for a live record.

        :returns: ``True`` if this call performed the transition, ``False``
            if the record is missing, already used or revoked.
        """

    def set_revoked(self, record_id: str) -> bool:
        """Mark one record revoked. :returns: True if it existed."""

    def bulk_set_revoked_for_identity(self, identity_id: str) -> int:
        """
        Revoke every non-revoked record owned by the identity.

        :returns: Number of records changed.
        """


class InMemoryTokenRecordStore(TokenRecordStore):
    """
    In-memory record store with atomic consume behavior.

    .. note::
       A single lock guards every mutation; reads work on immutable snapshots.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, RefreshTokenRecord] = {}
        self._id_by_token: dict[str, str] = {}
        self._by_user: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def insert(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        with self._lock:
            if record.token in self._id_by_token:
                raise ValueError("Refresh token value already stored.")
            stored = replace(record, created_at=record.created_at or datetime.now(UTC))
            self._by_id[stored.id] = stored
            self._id_by_token[stored.token] = stored.id
            self._by_user.setdefault(stored.user_id, set()).add(stored.id)
            return stored

    def find_by_token(
        self, token: str, *, is_revoked: bool | None = None
    ) -> RefreshTokenRecord | None:
        record_id = self._id_by_token.get(token)
        record = self._by_id.get(record_id) if record_id else None
        if record is None:
            return None
        if is_revoked is not None and record.is_revoked != is_revoked:
            return None
        return record

    def compare_and_set_used(self, record_id: str, *, used_at: datetime) -> bool:
        with self._lock:
            record = self._by_id.get(record_id)
            if record is None or record.is_terminal:
                return False
            self._by_id[record_id] = replace(record, is_used=True, used_at=used_at)
            return True

    def set_revoked(self, record_id: str) -> bool:
        with self._lock:
            record = self._by_id.get(record_id)
            if record is None:
                return False
            self._by_id[record_id] = replace(record, is_revoked=True)
            return True

    def bulk_set_revoked_for_identity(self, identity_id: str) -> int:
        with self._lock:
            changed = 0
            for record_id in self._by_user.get(identity_id, set()):
                record = self._by_id[record_id]
                if not record.is_revoked:
                    self._by_id[record_id] = replace(record, is_revoked=True)
                    changed += 1
            return changed

    def get(self, record_id: str) -> RefreshTokenRecord | None:
        """Fetch a record snapshot by id (inspection helper, not part of the port)."""
        return self._by_id.get(record_id)

    def list_for_identity(self, identity_id: str) -> list[RefreshTokenRecord]:
        """
        Return every record owned by the identity, oldest first.

        Inspection helper outside the :class:`TokenRecordStore` contract.
        """
        records = [self._by_id[j] for j in self._by_user.get(identity_id, set())]
        return sorted(records, key=lambda r: (r.created_at or datetime.min.replace(tzinfo=UTC)))
