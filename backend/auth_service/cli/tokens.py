"""Flask CLI commands for token maintenance."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from auth_service.api.deps import build_auth_service

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
@click.option("--verbose", is_flag=True, help="Enable verbose logging for token commands.")
def tokens_cli(verbose: bool) -> None:
    """Refresh/access token maintenance commands."""
    LOGGER.setLevel(logging.DEBUG if verbose else logging.INFO)


@tokens_cli.command("purge-expired")
@with_appcontext
def purge_expired() -> None:
    """Delete every refresh token past its expiry date."""
    removed = build_auth_service().purge_expired_refresh_tokens()
    LOGGER.debug("tokens.purge_expired removed=%s", removed)
    click.echo(f"Removed {removed} expired refresh token(s).")


@tokens_cli.command("revoke-user")
@click.argument("user_id", type=int)
@with_appcontext
def revoke_user(user_id: int) -> None:
    """Force a logout of USER_ID: deactivate its access token, drop its refresh token."""
    if build_auth_service().revoke_user(user_id):
        click.echo(f"Revoked session of user {user_id}.")
    else:
        click.echo(f"User {user_id} has no active session.")
