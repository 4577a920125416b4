# session_auth/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from session_auth.services._shared.errors import InvalidTokenError
from session_auth.services._shared.ports import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenClaims,
    TokenProvider,
)
from session_auth.services.auth.dto import TokenSigningConfig

REQUIRED_CLAIMS = ("sub", "email", "type", "jti", "iat", "exp")


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    PyJWT adapter signing access and refresh tokens with separate secrets.

    Access tokens carry the claim layout flask-jwt-extended expects
    (``sub``/``type``/``fresh``/``jti``), so the same access secret configured
    as ``JWT_SECRET_KEY`` lets ``@jwt_required`` guard routes with them.

    .. note::
       Every token embeds a random ``jti``; two tokens minted for the same
       identity within one second therefore still serialize differently.
    """

    config: TokenSigningConfig

    def _encode(
        self,
        *,
        subject: str,
        email: str,
        token_type: str,
        issued_at: datetime,
        expires_delta: timedelta,
        secret: str,
        extra: dict[str, Any] | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "sub": str(subject),
            "email": email,
            "type": token_type,
            "jti": uuid4().hex,
            "iat": int(issued_at.timestamp()),
            "nbf": int(issued_at.timestamp()),
            "exp": int((issued_at + expires_delta).timestamp()),
        }
        if extra:
            payload.update(extra)
        return jwt.encode(payload, secret, algorithm=self.config.algorithm)

    def _decode(self, token: str, *, secret: str, expected_type: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.config.algorithm],
                leeway=self.config.leeway,
                options={"require": list(REQUIRED_CLAIMS)},
            )
            if payload["type"] != expected_type:
                raise InvalidTokenError(f"Wrong token type: {expected_type} token required.")
            return TokenClaims(
                subject=str(payload["sub"]),
                email=str(payload["email"]),
                token_type=str(payload["type"]),
                jti=str(payload["jti"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc
        except (TypeError, ValueError, KeyError) as exc:
            # Well-signed but malformed claim values
            raise InvalidTokenError("Malformed token claims.") from exc

    def create_access_token(
        self,
        *,
        subject: str,
        email: str,
        issued_at: datetime,
        expires_delta: timedelta,
    ) -> str:
        return self._encode(
            subject=subject,
            email=email,
            token_type=ACCESS_TOKEN_TYPE,
            issued_at=issued_at,
            expires_delta=expires_delta,
            secret=self.config.access_secret,
            extra={"fresh": False},
        )

    def create_refresh_token(
        self,
        *,
        subject: str,
        email: str,
        issued_at: datetime,
        expires_delta: timedelta,
    ) -> str:
        return self._encode(
            subject=subject,
            email=email,
            token_type=REFRESH_TOKEN_TYPE,
            issued_at=issued_at,
            expires_delta=expires_delta,
            secret=self.config.refresh_secret,
        )

    def decode_access_token(self, token: str) -> TokenClaims:
        return self._decode(
            token, secret=self.config.access_secret, expected_type=ACCESS_TOKEN_TYPE
        )

    def decode_refresh_token(self, token: str) -> TokenClaims:
        return self._decode(
            token, secret=self.config.refresh_secret, expected_type=REFRESH_TOKEN_TYPE
        )
