"""
RevocationService
=================

Logout primitives: revoke one refresh token, or all of an identity's tokens.
"""

from __future__ import annotations

import logging

from session_auth.services._shared.base import BaseService

log = logging.getLogger(__name__)


class RevocationService(BaseService):
    """Idempotent refresh-token revocation; missing records are not errors."""

    def revoke_one(self, refresh_token: str) -> None:
        """
        Revoke the record for ``refresh_token`` in whatever state it is.

        :param refresh_token: Serialized refresh token.
        :type refresh_token: str
        """
        with self.rw_uow() as uow:
            record = uow.refresh_tokens.find_by_token(refresh_token)
            if record is None:
                log.debug("Revoke requested for unknown token")
                return
            uow.refresh_tokens.set_revoked(record.id)
        log.info("Revoked refresh token", extra={"user_id": record.user_id, "record_id": record.id})

    def revoke_all(self, identity_id: str) -> int:
        """
        Revoke every non-revoked record owned by ``identity_id``.

        :returns: Number of records changed.
        :rtype: int
        """
        with self.rw_uow() as uow:
            count = uow.refresh_tokens.bulk_set_revoked_for_identity(identity_id)
        log.info("Revoked %d refresh token(s)", count, extra={"user_id": identity_id})
        return count
