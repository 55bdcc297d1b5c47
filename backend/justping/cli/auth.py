"""Flask CLI commands for schema setup and blacklist maintenance."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from justping.core.extensions import db, get_token_blacklist
from justping.services._shared.errors import ServiceUnavailableError
from justping.services.tokens import AccessTokenRevocation

LOGGER = logging.getLogger(__name__)


def _ensure_non_production() -> None:
    """Abort destructive commands when running in production."""
    config = current_app.config
    is_debug = bool(config.get("DEBUG"))
    is_testing = bool(config.get("TESTING"))
    if not is_debug and not is_testing:
        raise click.UsageError("Dropping tables is restricted to non-production environments.")


@click.group("auth")
def auth_cli() -> None:
    """Authentication maintenance commands."""


@auth_cli.command("init-db")
@click.option("--drop", is_flag=True, help="Drop existing tables first (non-production only).")
@click.option("--yes", is_flag=True, help="Skip the destructive confirmation prompt.")
@with_appcontext
def init_db_command(drop: bool, yes: bool) -> None:
    """Create the authentication schema for local development."""
    if drop:
        _ensure_non_production()
        if not yes:
            click.confirm("This will DROP all application tables. Continue?", abort=True)
        LOGGER.info("Dropping database schema...")
        db.session.remove()
        db.drop_all()
    LOGGER.info("Creating database schema...")
    db.create_all()
    click.echo("Schema ready.")


@auth_cli.command("purge-blacklist")
@with_appcontext
def purge_blacklist_command() -> None:
    """Delete blacklist entries whose access token has already expired."""
    try:
        removed = AccessTokenRevocation(get_token_blacklist()).purge_expired()
    except ServiceUnavailableError as exc:
        raise click.ClickException(f"Purge failed: {exc}") from exc
    click.echo(f"Removed {removed} expired blacklist entries.")
