"""Test fixtures: a throwaway database per test and HTTP clients per role.

Every test gets its own SQLite file under tmp_path, so commits made by the
services are real and nothing leaks between tests. The app is built with
create_app(database=...) and each request opens its own session, the same
way production does. Tests that inspect state afterwards should read
columns (select(Job.expired_at)...) rather than reuse ORM objects loaded
before the request.

Authenticated clients carry a real signed session cookie, so the auth gate
runs exactly as it does for a browser.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from jobboard.auth.password import hash_password
from jobboard.auth.sessions import create_session_token
from jobboard.config import settings
from jobboard.db.engine import Database
from jobboard.db.models import Job, JobBoard, Organization, User
from jobboard.main import create_app
from jobboard.services.token_service import TokenService

ADMIN_PASSWORD = "admin-password-123"


@pytest_asyncio.fixture()
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await database.create_all()
    yield database
    await database.dispose()


@pytest_asyncio.fixture()
async def db_session(database):
    """Session for arranging data and checking results outside requests."""
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def app(database):
    return create_app(database=database)


def _client(app, cookies: Optional[dict] = None) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies=cookies,
    )


@pytest_asyncio.fixture()
async def client(app):
    """Anonymous HTTP client."""
    async with _client(app) as ac:
        yield ac


# ─── Users and sessions ─────────────────────────────────


async def _create_user(db_session, email: str, name: str, is_admin: bool) -> User:
    user = User(
        email=email,
        name=name,
        password_hash=hash_password(ADMIN_PASSWORD),
        is_admin=is_admin,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture()
async def admin_password() -> str:
    return ADMIN_PASSWORD


@pytest_asyncio.fixture()
async def admin_user(db_session):
    return await _create_user(db_session, "admin@example.com", "Admin", is_admin=True)


@pytest_asyncio.fixture()
async def member_user(db_session):
    return await _create_user(db_session, "member@example.com", "Member", is_admin=False)


@pytest_asyncio.fixture()
async def admin_client(app, admin_user):
    """Client signed in as an admin."""
    cookies = {settings.session_cookie_name: create_session_token(admin_user.id)}
    async with _client(app, cookies) as ac:
        yield ac


@pytest_asyncio.fixture()
async def member_client(app, member_user):
    """Client signed in as a regular (non-admin) user."""
    cookies = {settings.session_cookie_name: create_session_token(member_user.id)}
    async with _client(app, cookies) as ac:
        yield ac


@pytest_asyncio.fixture()
async def api_token(db_session, admin_user) -> str:
    """A valid raw bearer token."""
    _, raw = await TokenService(db_session).create_token(admin_user.id, "test token")
    return raw


@pytest_asyncio.fixture()
async def token_client(app, api_token):
    """Anonymous client that sends a valid bearer token."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {api_token}"},
    ) as ac:
        yield ac


# ─── Listings factories ─────────────────────────────────


@pytest_asyncio.fixture()
async def make_org(db_session):
    async def _make(name: str = "Acme", **fields) -> Organization:
        org = Organization(name=name, **fields)
        db_session.add(org)
        await db_session.commit()
        return org
    return _make


@pytest_asyncio.fixture()
async def make_job(db_session, make_org):
    async def _make(
        title: str = "Backend Engineer",
        organization: Optional[Organization] = None,
        posted_days_ago: int = 0,
        **fields,
    ) -> Job:
        organization = organization or await make_org()
        job = Job(
            title=title,
            url=f"https://jobs.example.com/{title.lower().replace(' ', '-')}",
            organization_id=organization.id,
            date_posted=datetime.now(timezone.utc) - timedelta(days=posted_days_ago),
            **fields,
        )
        db_session.add(job)
        await db_session.commit()
        return job
    return _make


@pytest_asyncio.fixture()
async def make_board(db_session):
    async def _make(slug: str = "remote-jobs", name: str = "Remote Jobs", **fields) -> JobBoard:
        board = JobBoard(slug=slug, name=name, **fields)
        db_session.add(board)
        await db_session.commit()
        return board
    return _make
