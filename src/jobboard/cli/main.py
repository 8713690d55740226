"""jobboard CLI: bootstrap the database, manage admins and tokens, run ingestion.

Usage:
    jobboard init-db                                 # Create missing tables
    jobboard create-admin ada@example.com --name Ada  # Create or promote an admin
    jobboard create-token ada@example.com "Partner feed" --expires-days 90
    jobboard run-query <saved-query-id>              # Execute a saved query now
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Optional

import click
import httpx
from sqlalchemy import select

from jobboard import __version__
from jobboard.auth.password import hash_password
from jobboard.config import settings
from jobboard.db.engine import Database
from jobboard.db.models import User
from jobboard.errors import AppError
from jobboard.ingest.client import FantasticJobsClient
from jobboard.services.query_service import QueryService
from jobboard.services.token_service import TokenService


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Inside an already running loop (e.g. CliRunner in an async test) the
    coroutine is offloaded to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _database() -> Database:
    return Database(settings.database_url, echo=settings.debug)


def _fail(message: str):
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


async def _user_by_email(db, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalars().first()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="jobboard")
def main():
    """Job board administration."""


@main.command("init-db")
def init_db():
    """Create every table that doesn't exist yet.

    Production deployments should run `alembic upgrade head` instead.
    """
    _run(_init_db_impl())
    click.secho("Database tables created.", fg="green")


async def _init_db_impl():
    database = _database()
    try:
        await database.create_all()
    finally:
        await database.dispose()


@main.command("create-admin")
@click.argument("email")
@click.option("--name", "-n", default=None, help="Display name (defaults to the email's local part)")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password for a new account (prompted when omitted)",
)
def create_admin(email: str, name: Optional[str], password: str):
    """Create an admin account, or promote an existing user to admin."""
    created = _run(_create_admin_impl(email, name, password))
    if created:
        click.secho(f"Admin {email} created.", fg="green")
    else:
        click.secho(f"{email} promoted to admin.", fg="green")


async def _create_admin_impl(email: str, name: Optional[str], password: str) -> bool:
    database = _database()
    try:
        async with database.session_factory() as db:
            user = await _user_by_email(db, email)
            if user is not None:
                user.is_admin = True
                await db.commit()
                return False
            db.add(
                User(
                    email=email.lower(),
                    name=name or email.split("@")[0],
                    password_hash=hash_password(password),
                    is_admin=True,
                )
            )
            await db.commit()
            return True
    finally:
        await database.dispose()


@main.command("create-token")
@click.argument("email")
@click.argument("name")
@click.option("--expires-days", "-e", type=int, default=None, help="Days until the token expires")
def create_token(email: str, name: str, expires_days: Optional[int]):
    """Issue an API token for EMAIL. The raw token is printed once."""
    raw = _run(_create_token_impl(email, name, expires_days))
    if raw is None:
        _fail(f"No user with email {email}")
    click.echo(raw)
    click.secho("Save this token securely. It will not be shown again.", fg="yellow", err=True)


async def _create_token_impl(email: str, name: str, expires_days: Optional[int]) -> Optional[str]:
    database = _database()
    try:
        async with database.session_factory() as db:
            user = await _user_by_email(db, email)
            if user is None:
                return None
            _, raw = await TokenService(db).create_token(user.id, name, expires_days)
            return raw
    finally:
        await database.dispose()


@main.command("run-query")
@click.argument("query_id")
def run_query(query_id: str):
    """Execute a saved query against the ingestion API and print the outcome."""
    try:
        result = _run(_run_query_impl(query_id))
    except AppError as e:
        _fail(e.message)
    except httpx.HTTPError as e:
        _fail(f"Ingestion request failed: {e}")
    color = {"success": "green", "partial": "yellow"}.get(result.status, "red")
    click.secho(f"Status: {result.status}", fg=color, bold=True)
    click.echo(
        f"  fetched={result.jobs_fetched}  created={result.jobs_created}  "
        f"updated={result.jobs_updated}  orgs_created={result.orgs_created}  "
        f"orgs_updated={result.orgs_updated}  duration={result.duration}ms"
    )


async def _run_query_impl(query_id: str):
    database = _database()
    try:
        async with database.session_factory() as db, FantasticJobsClient() as client:
            _, result = await QueryService(db).execute_query(query_id, client)
            return result
    finally:
        await database.dispose()


if __name__ == "__main__":
    main()
