# comments in English; reST docstrings
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import redis  # type: ignore[import-untyped]

from session_auth.services._shared.ports import RefreshTokenRecord, TokenRecordStore


def _s(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisTokenRecordStore(TokenRecordStore):
    """
    Redis-backed refresh-token record store.

    Layout:

    - ``rt:{id}``: hash with the record fields;
    - ``rt:tok:{sha256(token)}``: record id, for lookup by token value;
    - ``rt:u:{user_id}``: set of record ids owned by the identity.

    Keys expire together with the record; an expired record and a missing one
    are both unusable, so eviction never changes an outcome.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(record_id: str) -> str:
        return f"rt:{record_id}"

    @staticmethod
    def _kt(token: str) -> str:
        return f"rt:tok:{hashlib.sha256(token.encode()).hexdigest()}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> int:
        # Naive datetimes are labelled UTC (no conversion)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    @staticmethod
    def _from_ts(raw: Any) -> datetime | None:
        text = _s(raw)
        return datetime.fromtimestamp(int(text), tz=UTC) if text else None

    def _load(self, record_id: str) -> RefreshTokenRecord | None:
        h = {_s(k): _s(v) for k, v in self.r.hgetall(self._k(record_id)).items()}
        if "token" not in h:
            # Missing, or a partial hash left without its record fields
            return None
        return RefreshTokenRecord(
            id=record_id,
            token=h["token"],
            user_id=h["user_id"],
            expires_at=self._from_ts(h["expires_at"]),
            is_used=h.get("used", "0") == "1",
            is_revoked=h.get("revoked", "0") == "1",
            created_at=self._from_ts(h.get("created_at")),
            used_at=self._from_ts(h.get("used_at")),
            ip_address=h.get("ip_address") or None,
            user_agent=h.get("user_agent") or None,
        )

    # -------------------- API ------------------------

    def insert(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """
        Store a new record and its lookup keys in one MULTI block.

        :raises ValueError: If the token value is already stored.
        """
        now = datetime.now(UTC)
        ttl = max(1, self._to_ts(record.expires_at) - self._to_ts(now))
        key = self._k(record.id)
        key_tok = self._kt(record.token)

        mapping = {
            "token": record.token,
            "user_id": record.user_id,
            "expires_at": str(self._to_ts(record.expires_at)),
            "created_at": str(self._to_ts(record.created_at or now)),
            "used": "0",
            "revoked": "0",
        }
        if record.ip_address:
            mapping["ip_address"] = record.ip_address
        if record.user_agent:
            mapping["user_agent"] = record.user_agent

        # SET NX on the token key rejects duplicate token values
        if not self.r.set(key_tok, record.id, ex=ttl, nx=True):
            raise ValueError("Refresh token value already stored.")

        pipe = self.r.pipeline(transaction=True)
        pipe.hset(key, mapping=mapping)
        pipe.expire(key, ttl)
        pipe.sadd(self._ku(record.user_id), record.id)
        pipe.execute()
        return self._load(record.id) or record

    def find_by_token(
        self, token: str, *, is_revoked: bool | None = None
    ) -> RefreshTokenRecord | None:
        record_id = self.r.get(self._kt(token))
        if not record_id:
            return None
        record = self._load(_s(record_id))
        if record is None or record.token != token:
            return None
        if is_revoked is not None and record.is_revoked != is_revoked:
            return None
        return record

    def compare_and_set_used(self, record_id: str, *, used_at: datetime) -> bool:
        """
        Flip ``used`` 0 → 1 under WATCH/MULTI/EXEC.

        A concurrent write to the record aborts EXEC (``WatchError``) and the
        check is re-run against the new state, so only one caller can win.
        """
        key = self._k(record_id)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    state = p.hmget(key, "used", "revoked")
                    if state[0] is None or _s(state[0]) == "1" or _s(state[1]) == "1":
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, mapping={"used": "1", "used_at": str(self._to_ts(used_at))})
                    p.execute()
                    return True
            except redis.WatchError:
                continue

    def _revoke(self, record_id: str) -> bool | None:
        """
        Set ``revoked`` under WATCH/MULTI/EXEC.

        The write only lands while the full record still exists; a key that
        expires before EXEC aborts the transaction instead of being recreated
        as a bare hash without a TTL.

        :returns: ``None`` if the record is gone, ``False`` if it was already
            revoked, ``True`` if this call revoked it.
        """
        key = self._k(record_id)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    token, revoked = p.hmget(key, "token", "revoked")
                    if token is None:
                        p.unwatch()
                        return None
                    if _s(revoked) == "1":
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, "revoked", "1")
                    p.execute()
                    return True
            except redis.WatchError:
                continue

    def set_revoked(self, record_id: str) -> bool:
        return self._revoke(record_id) is not None

    def bulk_set_revoked_for_identity(self, identity_id: str) -> int:
        key_u = self._ku(identity_id)
        changed = 0
        stale: list[str] = []
        for member in self.r.smembers(key_u):
            record_id = _s(member)
            outcome = self._revoke(record_id)
            if outcome is None:
                # Hash expired; drop it from the index
                stale.append(record_id)
            elif outcome:
                changed += 1
        if stale:
            self.r.srem(key_u, *stale)
        return changed

    def list_for_identity(self, identity_id: str) -> list[RefreshTokenRecord]:
        """
        Return every live record owned by the identity, oldest first.

        Inspection helper outside the :class:`TokenRecordStore` contract.
        """
        records = [
            record
            for member in self.r.smembers(self._ku(identity_id))
            if (record := self._load(_s(member))) is not None
        ]
        return sorted(records, key=lambda rec: (rec.created_at, rec.id))
