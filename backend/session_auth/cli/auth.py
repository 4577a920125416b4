"""Flask CLI commands for operator-side session management."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from session_auth.api.deps import AUTH_EXTENSION
from session_auth.services._shared.base import ServiceContext
from session_auth.services.auth.service import AuthService

LOGGER = logging.getLogger(__name__)


def _service() -> AuthService:
    wiring = current_app.extensions[AUTH_EXTENSION]
    return AuthService(
        token_provider=wiring["token_provider"],
        token_cfg=wiring["token_cfg"],
        ctx=ServiceContext(),
        uow_factory=wiring.get("uow_factory"),
    )


@click.group("auth")
def auth_cli() -> None:
    """Session management commands."""


@auth_cli.command("revoke-all")
@click.argument("email")
@with_appcontext
def revoke_all(email: str) -> None:
    """Revoke every refresh token of the user registered as EMAIL."""
    service = _service()
    with service.ro_uow() as uow:
        identity = uow.users.find_by_email(email)
    if identity is None:
        raise click.ClickException(f"No user registered as {email!r}.")

    count = service.logout_all(identity.id)
    LOGGER.info("CLI revoke-all", extra={"user_id": identity.id})
    click.echo(f"Revoked {count} refresh token(s) for {email}.")
