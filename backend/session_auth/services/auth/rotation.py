"""
RotationProtocol
================

Exchanges a refresh token for a new pair exactly once.

Steps, each of which may reject:

1. verify the refresh JWT (signature, expiry, ``type``);
2. find the live (non-revoked) record by exact token value;
3. check the record's own ``expires_at``;
4. consume the record with a single compare-and-set write;
5. load the owning identity and issue a new pair.

Every rejection surfaces as one outcome kind, ``INVALID_TOKEN``; the step that
failed is only logged at DEBUG.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from session_auth.services._shared.base import BaseService, ServiceContext, UnitOfWorkFactory
from session_auth.services._shared.ports import TokenProvider
from session_auth.services.auth.dto import ClientMeta, TokenPairOut
from session_auth.services.auth.issuer import TokenIssuer

log = logging.getLogger(__name__)


class RejectionKind(str, Enum):
    INVALID_TOKEN = "invalid_token"


@dataclass(frozen=True, slots=True)
class Rotated:
    """Successful rotation carrying the replacement pair."""

    pair: TokenPairOut


@dataclass(frozen=True, slots=True)
class RotationRejected:
    """
    Failed rotation.

    :ivar kind: Externally visible kind (always ``INVALID_TOKEN``).
    :ivar reason: Internal step reason, for logs and tests only.
    """

    reason: str
    kind: RejectionKind = RejectionKind.INVALID_TOKEN


RotationOutcome = Rotated | RotationRejected


class RotationProtocol(BaseService):
    """
    Single-use refresh-token rotation.

    :param tokens: Token provider used to verify the presented token.
    :type tokens: TokenProvider
    :param issuer: Issuer minting the replacement pair.
    :type issuer: TokenIssuer
    """

    def __init__(
        self,
        *,
        tokens: TokenProvider,
        issuer: TokenIssuer,
        ctx: ServiceContext | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
    ) -> None:
        super().__init__(ctx=ctx, uow_factory=uow_factory)
        self.tokens = tokens
        self.issuer = issuer

    def _reject(self, reason: str, **extra: str) -> RotationRejected:
        log.debug("Refresh rejected: %s", reason, extra=extra)
        return RotationRejected(reason=reason)

    def rotate(self, refresh_token: str, *, client: ClientMeta | None = None) -> RotationOutcome:
        """
        Consume ``refresh_token`` and issue a new pair.

        :param refresh_token: Presented refresh JWT.
        :type refresh_token: str
        :param client: Optional caller metadata for the new record.
        :type client: ClientMeta | None
        :returns: :class:`Rotated` or :class:`RotationRejected`.
        """
        # 1) Cryptographic check first; no store access for forged tokens
        try:
            self.tokens.decode_refresh_token(refresh_token)
        except Exception as exc:  # any decoding failure is a rejection
            return self._reject(f"token verification failed ({type(exc).__name__})")

        now = datetime.now(UTC)
        with self.rw_uow() as uow:
            # 2) Record lookup
            record = uow.refresh_tokens.find_by_token(refresh_token, is_revoked=False)
            if record is None:
                return self._reject("no live record for token")

            # 3) Server-side expiry
            if record.is_expired(now):
                return self._reject("record expired", record_id=record.id)

            # 4) Atomic consume
            if not uow.refresh_tokens.compare_and_set_used(record.id, used_at=now):
                return self._reject("record already consumed", record_id=record.id)

            # 5) Owner lookup
            identity = uow.users.find_by_id(record.user_id)
            if identity is None:
                return self._reject("owner no longer exists", record_id=record.id)

        log.info("Refresh token consumed", extra={"user_id": identity.id, "record_id": record.id})
        return Rotated(pair=self.issuer.issue(identity, client=client))
