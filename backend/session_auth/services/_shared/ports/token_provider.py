from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

# Token type identifiers (the ``type`` claim, same values flask-jwt-extended uses)
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claim set of a decoded token.

    :ivar subject: Identity id (``sub``).
    :ivar email: Identity email at issuance.
    :ivar token_type: ``"access"`` or ``"refresh"``.
    :ivar jti: Unique token identifier.
    :ivar issued_at: ``iat`` as an aware UTC datetime.
    :ivar expires_at: ``exp`` as an aware UTC datetime.
    """

    subject: str
    email: str
    token_type: str
    jti: str
    issued_at: datetime
    expires_at: datetime


class TokenProvider(Protocol):
    """
    Port for minting and verifying signed tokens.

    Access and refresh tokens are signed with distinct secrets; each decode
    method only accepts its own kind. Decoding failures of any sort raise
    :class:`~session_auth.services._shared.errors.InvalidTokenError`.
    """

    def create_access_token(
        self,
        *,
        subject: str,
        email: str,
        issued_at: datetime,
        expires_delta: timedelta,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        subject: str,
        email: str,
        issued_at: datetime,
        expires_delta: timedelta,
    ) -> str: ...

    def decode_access_token(self, token: str) -> TokenClaims: ...

    def decode_refresh_token(self, token: str) -> TokenClaims: ...
