# session_auth/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: Login email (stored verbatim).
    :type email: str
    :param password: Raw password (hashed before storage).
    :type password: str
    :param first_name: Given name.
    :type first_name: str
    :param last_name: Family name.
    :type last_name: str
    """

    email: str
    password: str
    first_name: str
    last_name: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Encoded refresh JWT to revoke.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class ClientMeta:
    """
    Caller metadata captured on issued refresh tokens for audit.

    :param ip_address: Origin address.
    :type ip_address: str | None
    :param user_agent: Raw ``User-Agent`` header.
    :type user_agent: str | None
    """

    ip_address: str | None = None
    user_agent: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """Public-safe identity payload (never carries the password hash)."""

    id: str
    email: str
    first_name: str
    last_name: str
    is_active: bool
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    :param expires_in: Access token lifetime in seconds.
    :type expires_in: int
    :param user: Identity the pair was issued for.
    :type user: UserPublicOut
    :param token_type: Authorization scheme for the access token.
    :type token_type: str
    """

    access_token: str
    refresh_token: str
    expires_in: int
    user: UserPublicOut
    token_type: str = "Bearer"


# ------------------------------ Config DTOs ------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token (and record) lifetime.
    :type refresh_expires: timedelta
    """

    access_expires: timedelta = timedelta(minutes=5)
    refresh_expires: timedelta = timedelta(days=30)

    def __post_init__(self) -> None:
        if self.access_expires <= timedelta(0) or self.refresh_expires <= timedelta(0):
            raise ValueError("Token lifetimes must be positive.")


@dataclass(frozen=True, slots=True)
class TokenSigningConfig:
    """
    Signing material for both token kinds.

    :param access_secret: HMAC key for access tokens.
    :type access_secret: str
    :param refresh_secret: HMAC key for refresh tokens; must differ from
        ``access_secret`` so one kind can never be forged from the other.
    :type refresh_secret: str
    :param algorithm: JWS algorithm.
    :type algorithm: str
    :param leeway: Clock skew tolerated on ``exp``.
    :type leeway: timedelta
    """

    access_secret: str = field(repr=False)
    refresh_secret: str = field(repr=False)
    algorithm: str = "HS256"
    leeway: timedelta = timedelta(0)

    def __post_init__(self) -> None:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Both signing secrets are required.")
        if self.access_secret == self.refresh_secret:
            raise ValueError("Access and refresh tokens must use distinct signing secrets.")
