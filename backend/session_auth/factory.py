"""Application factory wiring Flask extensions, services and blueprints."""

from __future__ import annotations

from datetime import timedelta

from flask import Flask

from session_auth.core.config import BaseConfig, get_config
from session_auth.core.logger import configure_logging, init_app as init_logging


def init_auth(app: Flask) -> None:
    """Build the token provider, lifetimes and record-store wiring once.

    Signing secrets are read from the Flask config here and nowhere else; the
    services receive them through :class:`TokenSigningConfig`.
    """
    from session_auth.api.deps import AUTH_EXTENSION
    from session_auth.core import extensions
    from session_auth.infra.jwt.pyjwt_token_provider import JWTTokenProvider
    from session_auth.services.auth.dto import AuthTokenConfig, TokenSigningConfig

    signing = TokenSigningConfig(
        access_secret=app.config["JWT_ACCESS_SECRET"],
        refresh_secret=app.config["JWT_REFRESH_SECRET"],
        algorithm=app.config.get("JWT_ALGORITHM", "HS256"),
    )
    token_cfg = AuthTokenConfig(
        access_expires=timedelta(seconds=int(app.config["ACCESS_TOKEN_TTL_SECONDS"])),
        refresh_expires=timedelta(days=int(app.config["REFRESH_TOKEN_TTL_DAYS"])),
    )

    uow_factory = None
    if extensions.redis_client is not None:
        from session_auth.infra.redis.redis_token_record_store import RedisTokenRecordStore
        from session_auth.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

        record_store = RedisTokenRecordStore(extensions.redis_client)

        def uow_factory() -> SQLAlchemyUnitOfWork:
            return SQLAlchemyUnitOfWork(refresh_tokens=record_store)

    app.extensions[AUTH_EXTENSION] = {
        "token_provider": JWTTokenProvider(signing),
        "token_cfg": token_cfg,
        "uow_factory": uow_factory,
    }


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application."""
    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Proxy headers if running behind a reverse proxy
    from session_auth.core import proxy

    proxy.init_app(app)

    from session_auth.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from session_auth.core import cors

    cors.init_app(app)

    init_auth(app)

    from session_auth.api import init_app as init_api

    init_api(app)

    from session_auth.core import errors

    errors.init_app(app)

    from session_auth import cli as app_cli

    app_cli.init_app(app)

    return app
