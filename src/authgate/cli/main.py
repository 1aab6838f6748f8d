"""AuthGate admin CLI — account maintenance outside the request pipeline.

Usage:
    authgate-admin reset-password alice@example.com 'n3w-passw0rd'
    authgate-admin create-admin root@example.com 'passw0rd!' --name "Root"

Talks to the database directly (AUTHGATE_DATABASE_URL), not to the API.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys

import click

from authgate import __version__
from authgate.db.engine import async_session_factory, engine
from authgate.services.user_service import UserService

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


async def _reset_password(email: str, new_password: str) -> bool:
    """Returns False when no user has that email."""
    try:
        async with async_session_factory() as db:
            user = await UserService(db).reset_password(email, new_password)
            return user is not None
    finally:
        await engine.dispose()


async def _create_admin(email: str, password: str, name: str) -> bool:
    """Returns False when the email is already taken."""
    try:
        async with async_session_factory() as db:
            svc = UserService(db)
            if await svc.get_by_email(email):
                return False
            await svc.create_user(email=email, full_name=name, password=password, role="admin")
            return True
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="authgate-admin")
def main():
    """AuthGate administration — user credentials and admin accounts."""


@main.command("reset-password")
@click.argument("email")
@click.argument("new_password")
def reset_password(email: str, new_password: str):
    """Overwrite the stored password of the user with EMAIL."""
    click.echo(f"Resetting password for user: {email}")
    if not _run(_reset_password(email, new_password)):
        click.secho(f"User not found: {email}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Password updated successfully for {email}", fg="green")


@main.command("create-admin")
@click.argument("email")
@click.argument("password")
@click.option("--name", default="Administrator", show_default=True, help="Full name")
def create_admin(email: str, password: str, name: str):
    """Create a user with the admin role."""
    click.echo(f"Creating admin account {email} ({name})")
    if not _run(_create_admin(email, password, name)):
        click.secho(f"Error: User with email {email} already exists.", fg="red", err=True)
        sys.exit(1)
    click.secho("Admin account created.", fg="green")


if __name__ == "__main__":
    main()
