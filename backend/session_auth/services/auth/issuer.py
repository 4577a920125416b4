"""
TokenIssuer
===========

Mints an access/refresh pair and records the refresh token server-side.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from session_auth.models.base import new_id
from session_auth.services._shared.base import BaseService, ServiceContext, UnitOfWorkFactory
from session_auth.services._shared.ports import Identity, RefreshTokenRecord, TokenProvider
from session_auth.services.auth.dto import (
    AuthTokenConfig,
    ClientMeta,
    TokenPairOut,
    UserPublicOut,
)

log = logging.getLogger(__name__)


def to_public(identity: Identity) -> UserPublicOut:
    """Strip the password hash from an identity."""
    return UserPublicOut(
        id=identity.id,
        email=identity.email,
        first_name=identity.first_name,
        last_name=identity.last_name,
        is_active=identity.is_active,
        created_at=identity.created_at,
    )


class TokenIssuer(BaseService):
    """
    Issue token pairs.

    :param tokens: Token provider (signing secrets live there).
    :type tokens: TokenProvider
    :param config: Token lifetimes.
    :type config: AuthTokenConfig
    """

    def __init__(
        self,
        *,
        tokens: TokenProvider,
        config: AuthTokenConfig | None = None,
        ctx: ServiceContext | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
    ) -> None:
        super().__init__(ctx=ctx, uow_factory=uow_factory)
        self.tokens = tokens
        self.config = config or AuthTokenConfig()

    def issue(self, identity: Identity, *, client: ClientMeta | None = None) -> TokenPairOut:
        """
        Mint a fresh pair for ``identity`` and persist the refresh record.

        A single clock reading drives both tokens and the record, so the
        refresh JWT ``exp`` equals the record ``expires_at`` (to the second).

        :param identity: Authenticated identity.
        :type identity: Identity
        :param client: Optional caller metadata stored on the record.
        :type client: ClientMeta | None
        :returns: Token pair with the public identity.
        :rtype: TokenPairOut
        """
        client = client or ClientMeta(
            ip_address=self.ctx.ip_address, user_agent=self.ctx.user_agent
        )
        now = datetime.now(UTC).replace(microsecond=0)

        access_token = self.tokens.create_access_token(
            subject=identity.id,
            email=identity.email,
            issued_at=now,
            expires_delta=self.config.access_expires,
        )
        refresh_token = self.tokens.create_refresh_token(
            subject=identity.id,
            email=identity.email,
            issued_at=now,
            expires_delta=self.config.refresh_expires,
        )

        with self.rw_uow() as uow:
            record = uow.refresh_tokens.insert(
                RefreshTokenRecord(
                    id=new_id(),
                    token=refresh_token,
                    user_id=identity.id,
                    expires_at=now + self.config.refresh_expires,
                    ip_address=client.ip_address,
                    user_agent=client.user_agent,
                )
            )

        log.info(
            "Issued token pair",
            extra={"user_id": identity.id, "record_id": record.id},
        )
        return TokenPairOut(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.config.access_expires.total_seconds()),
            user=to_public(identity),
        )
