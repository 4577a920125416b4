"""
CredentialVerifier
==================

Checks an email/password pair against the credential store.
"""

from __future__ import annotations

import logging

from session_auth.core.security import verify_password
from session_auth.services._shared.base import BaseService
from session_auth.services._shared.ports import Identity

log = logging.getLogger(__name__)


class CredentialVerifier(BaseService):
    """
    Read-only password verification.

    Unknown email and wrong password produce the same ``None`` outcome; the
    caller cannot tell them apart.
    """

    def verify(self, email: str, password: str) -> Identity | None:
        """
        Return the matching identity, or ``None`` when verification fails.

        :param email: Email exactly as supplied (no normalization).
        :type email: str
        :param password: Raw password candidate.
        :type password: str
        :rtype: Identity | None
        """
        with self.ro_uow() as uow:
            identity = uow.users.find_by_email(email)

        if identity is None:
            log.debug("Credential check failed: unknown email")
            return None
        if not verify_password(identity.password_hash, password):
            log.debug("Credential check failed: bad password", extra={"user_id": identity.id})
            return None
        return identity
