"""Refresh-token repository: SQLAlchemy implementation of the record store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update

from session_auth.models.base import as_utc
from session_auth.models.refresh_token import RefreshToken
from session_auth.repositories.base import BaseRepository
from session_auth.services._shared.ports import RefreshTokenRecord, TokenRecordStore


def to_record(row: RefreshToken) -> RefreshTokenRecord:
    """Map a :class:`RefreshToken` row to a :class:`RefreshTokenRecord`."""
    return RefreshTokenRecord(
        id=row.id,
        token=row.token,
        user_id=row.user_id,
        expires_at=as_utc(row.expires_at),
        is_used=bool(row.is_used),
        is_revoked=bool(row.is_revoked),
        created_at=as_utc(row.created_at),
        used_at=as_utc(row.used_at),
        ip_address=row.ip_address,
        user_agent=row.user_agent,
    )


class RefreshTokenRepository(BaseRepository[RefreshToken], TokenRecordStore):
    """Persistence-only repository for :class:`RefreshToken`.

    State transitions are issued as single conditional ``UPDATE`` statements so
    the database, not the Python process, arbitrates concurrent writers.
    """

    model = RefreshToken

    def insert(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        row = RefreshToken(
            id=record.id,
            token=record.token,
            user_id=record.user_id,
            expires_at=record.expires_at,
            is_used=False,
            is_revoked=False,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
        )
        self.add(row)
        self.flush()
        return to_record(row)

    def find_by_token(
        self, token: str, *, is_revoked: bool | None = None
    ) -> RefreshTokenRecord | None:
        """Fetch a record by exact token value.

        :param token: Serialized refresh token.
        :type token: str
        :param is_revoked: Optional revocation-state filter.
        :type is_revoked: bool | None
        :rtype: RefreshTokenRecord | None
        """
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        if is_revoked is not None:
            stmt = stmt.where(RefreshToken.is_revoked.is_(is_revoked))
        # Always read current DB state, not a stale identity-map copy
        stmt = stmt.execution_options(populate_existing=True)
        row = self.session.execute(stmt.limit(1)).scalars().first()
        return to_record(row) if row is not None else None

    def compare_and_set_used(self, record_id: str, *, used_at: datetime) -> bool:
        """Atomically consume a live record.

        Emits ``UPDATE ... SET is_used = true WHERE id = :id AND NOT is_used
        AND NOT is_revoked``; exactly one concurrent caller sees ``rowcount == 1``.

        :returns: ``True`` if this call consumed the record.
        :rtype: bool
        """
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.id == record_id,
                RefreshToken.is_used.is_(False),
                RefreshToken.is_revoked.is_(False),
            )
            .values(is_used=True, used_at=used_at)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def set_revoked(self, record_id: str) -> bool:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == record_id)
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount == 1

    def bulk_set_revoked_for_identity(self, identity_id: str) -> int:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == identity_id, RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def list_for_identity(self, identity_id: str) -> list[RefreshTokenRecord]:
        """
        Return every record owned by the identity, oldest first.

        Inspection helper outside the :class:`TokenRecordStore` contract.
        """
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.user_id == identity_id)
            .order_by(RefreshToken.created_at.asc(), RefreshToken.id.asc())
            .execution_options(populate_existing=True)
        )
        return [to_record(row) for row in self.session.execute(stmt).scalars()]
