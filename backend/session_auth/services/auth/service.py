# session_auth/services/auth/service.py
from __future__ import annotations

import logging

from session_auth.core.security import hash_password
from session_auth.models.base import new_id
from session_auth.models.user import has_dotted_domain
from session_auth.services._shared.base import BaseService, ServiceContext, UnitOfWorkFactory
from session_auth.services._shared.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from session_auth.services._shared.ports import Identity, TokenProvider
from session_auth.services.auth.credentials import CredentialVerifier
from session_auth.services.auth.dto import (
    AuthTokenConfig,
    ClientMeta,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
    UserPublicOut,
)
from session_auth.services.auth.issuer import TokenIssuer, to_public
from session_auth.services.auth.revocation import RevocationService
from session_auth.services.auth.rotation import RotationProtocol, RotationRejected

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication lifecycle facade (register / login / refresh / logout).

    Composes :class:`CredentialVerifier`, :class:`TokenIssuer`,
    :class:`RotationProtocol` and :class:`RevocationService` over one Unit of
    Work factory, so every component sees the same stores.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        token_cfg: AuthTokenConfig | None = None,
        ctx: ServiceContext | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
    ) -> None:
        """
        Initialize the facade and its components.

        :param token_provider: Adapter for issuing/decoding JWTs.
        :param token_cfg: Access/Refresh expiry configuration.
        :param ctx: Request-scoped context (client metadata).
        :param uow_factory: Unit of Work factory shared by all components.
        """
        super().__init__(ctx=ctx, uow_factory=uow_factory)
        self.tokens = token_provider
        self.cfg = token_cfg or AuthTokenConfig()

        shared = {"ctx": self.ctx, "uow_factory": uow_factory}
        self.verifier = CredentialVerifier(**shared)
        self.issuer = TokenIssuer(tokens=token_provider, config=self.cfg, **shared)
        self.rotation = RotationProtocol(tokens=token_provider, issuer=self.issuer, **shared)
        self.revocation = RevocationService(**shared)

    def _client(self) -> ClientMeta:
        return ClientMeta(ip_address=self.ctx.ip_address, user_agent=self.ctx.user_agent)

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> TokenPairOut:
        """
        Create an identity and issue its first token pair.

        :param dto: Registration input.
        :returns: Access/Refresh token pair.
        :raises InvalidInputError: If the email or a name would be refused by the store.
        :raises ConflictError: If the email is already registered.
        """
        first_name, last_name = dto.first_name.strip(), dto.last_name.strip()
        if not has_dotted_domain(dto.email):
            raise InvalidInputError("Email format looks invalid.")
        if not first_name or not last_name:
            raise InvalidInputError("First and last name are required.")

        with self.rw_uow() as uow:
            if uow.users.find_by_email(dto.email) is not None:
                raise ConflictError("User", "email already in use")
            identity = uow.users.insert(
                Identity(
                    id=new_id(),
                    email=dto.email,
                    password_hash=hash_password(dto.password),
                    first_name=first_name,
                    last_name=last_name,
                )
            )
        log.info("Registered user", extra={"user_id": identity.id})
        return self.issuer.issue(identity, client=self._client())

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: Access/Refresh token pair.
        :raises UnauthorizedError: If credentials are invalid.
        """
        identity = self.verifier.verify(dto.email, dto.password)
        if identity is None:
            raise UnauthorizedError("Invalid credentials")
        return self.issuer.issue(identity, client=self._client())

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token into a new pair.

        :param dto: Refresh input.
        :returns: New Access/Refresh token pair.
        :raises UnauthorizedError: On any rejection.
        """
        outcome = self.rotation.rotate(dto.refresh_token, client=self._client())
        if isinstance(outcome, RotationRejected):
            raise UnauthorizedError("Invalid refresh token")
        return outcome.pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke one refresh token. Always succeeds.

        :param dto: Logout input.
        """
        self.revocation.revoke_one(dto.refresh_token)

    def logout_all(self, identity_id: str) -> int:
        """
        Revoke every outstanding refresh token of an identity.

        :param identity_id: Identity whose sessions end.
        :returns: Number of records revoked.
        """
        return self.revocation.revoke_all(identity_id)

    # ------------------------------------------------------------------ #
    # Profile
    # ------------------------------------------------------------------ #

    def get_profile(self, identity_id: str) -> UserPublicOut:
        """
        Return the public view of an identity.

        :raises NotFoundError: If the identity does not exist.
        """
        with self.ro_uow() as uow:
            identity = uow.users.find_by_id(identity_id)
        if identity is None:
            raise NotFoundError("User", identity_id)
        return to_public(identity)
