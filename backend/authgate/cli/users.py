"""Flask CLI commands for managing staff accounts."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy import select

from authgate.core.extensions import db
from authgate.models.user import ROLE_ADMIN, ROLE_CLERK, ROLE_CUSTOMER, User
from authgate.services._shared.errors import ValidationFailure
from authgate.services.auth import StaffIn

LOGGER = logging.getLogger(__name__)


@click.group("users")
def users_cli() -> None:
    """Account administration commands."""


@users_cli.command("create")
@click.option("--email", required=True, help="Login email of the new account.")
@click.option(
    "--role",
    type=click.Choice([ROLE_CLERK, ROLE_ADMIN]),
    default=ROLE_CLERK,
    show_default=True,
)
@click.option("--first-name", default=None)
@click.option("--last-name", default=None)
@click.option("--phone", default=None)
@click.password_option()
@with_appcontext
def create_user(
    email: str,
    role: str,
    first_name: str | None,
    last_name: str | None,
    phone: str | None,
    password: str,
) -> None:
    """Provision a clerk or admin account."""
    from authgate.api.deps import auth_service

    try:
        user = auth_service().provision_staff(
            StaffIn(
                email=email,
                password=password,
                role=role,
                first_name=first_name,
                last_name=last_name,
                phone=phone,
            )
        )
    except ValidationFailure as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(f"Created {user.role} account #{user.id} <{user.email}>")


@users_cli.command("list")
@click.option(
    "--role",
    type=click.Choice([ROLE_CUSTOMER, ROLE_CLERK, ROLE_ADMIN]),
    default=None,
    help="Only list accounts with this role.",
)
@with_appcontext
def list_users(role: str | None) -> None:
    """Print accounts as ``id  role  email``."""
    stmt = select(User).order_by(User.id.asc())
    if role:
        stmt = stmt.where(User.role == role)
    users = list(db.session.execute(stmt).scalars())
    if not users:
        click.echo("(no accounts)")
        return
    for user in users:
        click.echo(f"{user.id:>5}  {user.role:<8}  {user.email}")
    LOGGER.debug("Listed %d accounts", len(users))
