# tests/unit/services/test_auth_service.py
from __future__ import annotations

import pytest
from session_auth.services._shared.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from session_auth.services.auth.dto import (
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
)
from session_auth.services.auth.service import AuthService
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


def _register(service: AuthService, email: str = "alice@example.com") -> TokenPairOut:
    return service.register(
        RegisterIn(email=email, password="pw1234", first_name="Alice", last_name="Liddell")
    )


# ---------------------------- In-memory stores ---------------------------- #
class TestAuthServiceInMemory:
    def test_register_issues_pair_for_new_identity(self, memory_auth, token_provider):
        pair = _register(memory_auth)

        claims = token_provider.decode_access_token(pair.access_token)
        assert claims.subject == pair.user.id
        assert pair.user.email == "alice@example.com"
        assert pair.user.first_name == "Alice"

    def test_register_duplicate_email_conflicts(self, memory_auth):
        _register(memory_auth)
        with pytest.raises(ConflictError):
            _register(memory_auth)

    def test_register_keeps_email_case(self, memory_auth):
        _register(memory_auth, "Alice@Example.com")
        pair = _register(memory_auth, "alice@example.com")  # distinct identity
        assert pair.user.email == "alice@example.com"

    @pytest.mark.parametrize(
        "email,first_name",
        [("alice@localhost", "Alice"), ("alice@example.com", "   ")],
    )
    def test_register_rejects_values_the_store_refuses(
        self, memory_auth, memory_uow, email, first_name
    ):
        with pytest.raises(InvalidInputError):
            memory_auth.register(
                RegisterIn(email=email, password="pw1234", first_name=first_name, last_name="L")
            )
        assert memory_uow.users.find_by_email(email) is None

    def test_login_with_right_password(self, memory_auth):
        registered = _register(memory_auth)

        pair = memory_auth.login(LoginIn(email="alice@example.com", password="pw1234"))

        assert pair.user.id == registered.user.id
        assert pair.refresh_token != registered.refresh_token

    def test_login_failures_are_indistinguishable(self, memory_auth):
        _register(memory_auth)

        with pytest.raises(UnauthorizedError) as wrong_password:
            memory_auth.login(LoginIn(email="alice@example.com", password="nope"))
        with pytest.raises(UnauthorizedError) as unknown_email:
            memory_auth.login(LoginIn(email="nobody@example.com", password="pw1234"))

        assert str(wrong_password.value) == str(unknown_email.value)

    def test_refresh_rotation_example(self, memory_auth):
        """register -> A; refresh(A) -> B; refresh(A) fails; refresh(B) -> C."""
        a = _register(memory_auth)
        b = memory_auth.refresh(RefreshIn(refresh_token=a.refresh_token))

        with pytest.raises(UnauthorizedError):
            memory_auth.refresh(RefreshIn(refresh_token=a.refresh_token))

        c = memory_auth.refresh(RefreshIn(refresh_token=b.refresh_token))
        assert len({a.refresh_token, b.refresh_token, c.refresh_token}) == 3

    def test_refresh_with_garbage_is_unauthorized(self, memory_auth):
        with pytest.raises(UnauthorizedError):
            memory_auth.refresh(RefreshIn(refresh_token="garbage"))

    def test_logout_then_refresh_fails(self, memory_auth):
        pair = _register(memory_auth)

        memory_auth.logout(LogoutIn(refresh_token=pair.refresh_token))

        with pytest.raises(UnauthorizedError):
            memory_auth.refresh(RefreshIn(refresh_token=pair.refresh_token))

    def test_logout_always_succeeds(self, memory_auth):
        pair = _register(memory_auth)
        memory_auth.logout(LogoutIn(refresh_token=pair.refresh_token))
        memory_auth.logout(LogoutIn(refresh_token=pair.refresh_token))
        memory_auth.logout(LogoutIn(refresh_token="does-not-exist"))

    def test_logout_all_revokes_every_session(self, memory_auth):
        first = _register(memory_auth)
        second = memory_auth.login(LoginIn(email="alice@example.com", password="pw1234"))

        assert memory_auth.logout_all(first.user.id) == 2

        for pair in (first, second):
            with pytest.raises(UnauthorizedError):
                memory_auth.refresh(RefreshIn(refresh_token=pair.refresh_token))

    def test_get_profile(self, memory_auth):
        pair = _register(memory_auth)

        profile = memory_auth.get_profile(pair.user.id)

        assert profile.email == "alice@example.com"
        assert profile.is_active is True

    def test_get_profile_missing_identity(self, memory_auth):
        with pytest.raises(NotFoundError):
            memory_auth.get_profile("missing")


# ------------------------------ SQL stores -------------------------------- #
@pytest.fixture()
def sql_auth(token_provider, session) -> AuthService:
    """AuthService on the default SQLAlchemy units of work."""
    return AuthService(token_provider=token_provider)


class TestAuthServiceSQL:
    def test_login_existing_user(self, sql_auth, session, token_provider):
        user = UserFactory(email="carol@example.com")
        session.flush()

        pair = sql_auth.login(LoginIn(email="carol@example.com", password=DEFAULT_PASSWORD))

        assert token_provider.decode_access_token(pair.access_token).subject == user.id

    def test_register_then_duplicate(self, sql_auth):
        _register(sql_auth, "dave@example.com")
        with pytest.raises(ConflictError):
            _register(sql_auth, "dave@example.com")

    def test_refresh_single_use_and_logout(self, sql_auth):
        a = _register(sql_auth, "erin@example.com")
        b = sql_auth.refresh(RefreshIn(refresh_token=a.refresh_token))

        with pytest.raises(UnauthorizedError):
            sql_auth.refresh(RefreshIn(refresh_token=a.refresh_token))

        sql_auth.logout(LogoutIn(refresh_token=b.refresh_token))
        with pytest.raises(UnauthorizedError):
            sql_auth.refresh(RefreshIn(refresh_token=b.refresh_token))

    def test_profile_roundtrip(self, sql_auth):
        pair = _register(sql_auth, "frank@example.com")

        profile = sql_auth.get_profile(pair.user.id)

        assert profile.id == pair.user.id
        assert profile.last_name == "Liddell"

    @pytest.mark.parametrize(
        "email,last_name",
        [("grace@localhost", "Hopper"), ("grace@example.com", " \t ")],
    )
    def test_register_rejects_before_insert(self, sql_auth, email, last_name):
        with pytest.raises(InvalidInputError):
            sql_auth.register(
                RegisterIn(email=email, password="pw1234", first_name="Grace", last_name=last_name)
            )
