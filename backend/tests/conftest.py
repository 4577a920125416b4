"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Service-level tests
that do not need a database use the in-memory stores instead.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import pytest
from session_auth.core.extensions import db as _db  # Flask-SQLAlchemy instance
from session_auth.factory import create_app  # application factory under test
from session_auth.infra.jwt.pyjwt_token_provider import JWTTokenProvider
from session_auth.services.auth.dto import AuthTokenConfig, TokenSigningConfig
from session_auth.services.auth.service import AuthService
from session_auth.uow import InMemoryUnitOfWork
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

ACCESS_SECRET = "test-access-secret-0123456789abcdef"
REFRESH_SECRET = "test-refresh-secret-fedcba9876543210"


class TestConfig:
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Never talks to Redis.
    - Uses fixed, distinct signing secrets.
    """

    TESTING = True
    DEBUG = False
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = None
    JWT_ACCESS_SECRET = ACCESS_SECRET
    JWT_REFRESH_SECRET = REFRESH_SECRET
    JWT_SECRET_KEY = ACCESS_SECRET
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ALGORITHM = "HS256"
    ACCESS_TOKEN_TTL_SECONDS = 300
    REFRESH_TOKEN_TTL_DAYS = 30
    LOG_LEVEL = "WARNING"
    CORS_ORIGINS = "http://localhost:5173"
    USE_PROXYFIX = False


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    Begins a top-level transaction, starts a SAVEPOINT per test, and
    reinstalls the SAVEPOINT whenever SQLAlchemy ends one. ``db.session`` is
    swapped for the scoped session so application code joins the same
    transaction.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01"):
    ...         ...
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory


# -- Token & in-memory service wiring ----------------------------------------
@pytest.fixture()
def signing() -> TokenSigningConfig:
    return TokenSigningConfig(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture()
def token_provider(signing) -> JWTTokenProvider:
    return JWTTokenProvider(signing)


@pytest.fixture()
def memory_uow() -> InMemoryUnitOfWork:
    """A fresh in-memory Unit of Work (shared stores for one test)."""
    return InMemoryUnitOfWork()


@pytest.fixture()
def memory_auth(token_provider, memory_uow) -> AuthService:
    """AuthService running entirely on in-memory stores."""
    return AuthService(
        token_provider=token_provider,
        token_cfg=AuthTokenConfig(),
        uow_factory=lambda: memory_uow,
    )


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper to the transactional session fixture.

    Only tests that request ``session`` touch the database; in-memory tests
    never build the Flask app.
    """
    from tests.factories import SQLAlchemySession

    if "session" not in request.fixturenames:
        SQLAlchemySession.set(None)
        yield
        return
    SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
