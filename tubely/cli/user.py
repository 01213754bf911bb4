"""CLI commands for managing users."""

from __future__ import annotations

import datetime
import secrets

import pydantic as p

import tubely.lib.cli as click
from tubely.auth import jwt
from tubely.core import di
from tubely.storage import Session
from tubely.storage import user as user_storage


@click.group("user")
def user():
    """Manage users."""
    ...


@user.command("create")
@click.argument("email")
@click.option("--password", "-p", help="Password (if not provided, a random one is generated)")
@di.inject
def user_create(email: str, password: str | None, session: Session = di.Provide["storage.persistent.session"]) -> None:
    """Create a new user.

    EMAIL is the user's email address (used for login).
    """
    generated_password = None
    if not password:
        generated_password = password = secrets.token_urlsafe(12)

    with session.begin():
        if user_storage.get(email=email, session=session):
            click.echo(f"Error: User with email '{email}' already exists.", err=True)
            raise SystemExit(1)
        new_user = user_storage.create(email=email, password=p.Secret(password), session=session)

    click.echo(f"Created user: {new_user.email}")
    click.echo(f"  ID: {new_user.user_id}")
    if generated_password:
        click.echo(f"  Generated password: {generated_password}")


@user.command("token")
@click.argument("email")
@click.option("--minutes", "-m", type=click.IntRange(min=2), default=None, help="Token lifetime")
@di.inject
def user_token(email: str, minutes: int | None, session: Session = di.Provide["storage.persistent.session"]) -> None:
    """Mint an access token for EMAIL without a password, e.g. for scripting uploads."""
    with session.begin():
        found = user_storage.get(email=email, session=session)
    if found is None:
        click.echo(f"Error: User '{email}' not found.", err=True)
        raise SystemExit(1)

    expires_delta = datetime.timedelta(minutes=minutes) if minutes else None
    click.echo(jwt.create_access_token(found.user_id, expires_delta=expires_delta))
