"""Flask CLI commands for inspecting and revoking refresh sessions."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from vidtube.core.sessions import get_refresh_token_store
from vidtube.services._shared.dto import PrincipalRecord
from vidtube.services._shared.errors import StoreUnavailableError

LOGGER = logging.getLogger(__name__)


def _principal_or_fail(username: str) -> PrincipalRecord:
    directory = current_app.extensions["principal_directory"]
    principal = directory.find_by_handle_or_contact(username=username)
    if principal is None:
        raise click.ClickException(f"No user named {username!r}.")
    return principal


@click.group("sessions")
def sessions_cli() -> None:
    """Inspect or revoke a user's refresh session."""


@sessions_cli.command("revoke")
@click.argument("username")
@with_appcontext
def revoke(username: str) -> None:
    """Clear USERNAME's refresh token; outstanding access tokens run to expiry."""
    principal = _principal_or_fail(username)
    try:
        get_refresh_token_store().clear_current_refresh_token(principal.id)
    except StoreUnavailableError as exc:
        raise click.ClickException(f"Session store unavailable ({exc.store}).") from exc
    LOGGER.info("sessions.revoked", extra={"event": "revoke", "principal_id": principal.id})
    click.echo(f"Revoked refresh session for {principal.username}.")


@sessions_cli.command("show")
@click.argument("username")
@with_appcontext
def show(username: str) -> None:
    """Report whether USERNAME currently holds a refresh token (never prints it)."""
    principal = _principal_or_fail(username)
    store = get_refresh_token_store()
    try:
        active = store.get_current_refresh_token(principal.id) is not None
    except StoreUnavailableError as exc:
        raise click.ClickException(f"Session store unavailable ({exc.store}).") from exc
    state = "active" if active else "none"
    click.echo(f"{principal.username}: session={state} store={store.backend}")
