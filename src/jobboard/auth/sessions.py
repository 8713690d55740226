"""Session resolution for browser (cookie) authentication.

Sign-in issues a signed JWT (`type="session"`) that travels in an HTTP-only
cookie. Resolving it verifies the signature and expiry, then re-reads the
user row: a deleted user has no session, and `is_admin` always reflects the
database, not what was true at sign-in.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.config import settings
from jobboard.db.engine import get_db
from jobboard.db.models import User

logger = structlog.get_logger()


class SessionError(Exception):
    """Raised when a session token can't be verified."""


@dataclass(frozen=True)
class Session:
    user_id: str
    is_admin: bool
    expires_at: datetime


def create_session_token(user_id: str, expires_days: Optional[int] = None) -> str:
    """Create a signed session token for a user."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "type": "session",
        "iat": now,
        "exp": now + timedelta(days=expires_days or settings.session_expire_days),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> dict:
    """Verify and decode a session token.

    Returns the payload dict on success.
    Raises SessionError on failure.
    """
    try:
        payload = jwt.decode(
            token, settings.session_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        raise SessionError("Session has expired")
    except jwt.InvalidTokenError as e:
        raise SessionError(f"Invalid session: {e}")
    if payload.get("type") != "session" or not payload.get("sub"):
        raise SessionError("Not a session token")
    return payload


async def resolve_session(token: Optional[str], db: AsyncSession) -> Optional[Session]:
    """Turn a raw session token into a Session, or None if there isn't a valid one."""
    if not token:
        return None
    try:
        payload = decode_session_token(token)
    except SessionError as e:
        logger.info("auth.session_rejected", reason=str(e))
        return None

    user = await db.get(User, payload["sub"])
    if not user:
        return None

    return Session(
        user_id=user.id,
        is_admin=user.is_admin,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


async def get_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Optional[Session]:
    """FastAPI dependency — the caller's session, or None."""
    return await resolve_session(request.cookies.get(settings.session_cookie_name), db)
