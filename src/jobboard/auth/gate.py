"""Authorization gate — one decision, several failure surfaces.

authorize() is the single place that decides whether a session satisfies a
required access level. The FastAPI dependencies below wrap that decision
for each surface:

- JSON API routes get `{"error": ...}` with 401 (admin API routes answer a
  non-admin session with 401 plus an explanatory message)
- HTML page routes get a redirect to /login or /unauthorized
- public v1 routes protected by bearer tokens get 401 with the validator's
  message and a WWW-Authenticate challenge
"""

import enum
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.auth.sessions import Session, get_session
from jobboard.auth.tokens import TokenValidation, validate_bearer_token
from jobboard.db.engine import get_db
from jobboard.errors import Forbidden, PageRedirect, Unauthenticated

ADMIN_REQUIRED = "Unauthorized - Admin access required"


class AccessLevel(str, enum.Enum):
    NONE = "none"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


def authorize(session: Optional[Session], required: AccessLevel) -> Optional[Session]:
    """Decide whether `session` satisfies `required`.

    Returns the session (None only for AccessLevel.NONE without one).
    Raises Unauthenticated when a session is needed but missing, and
    Forbidden when an admin is needed but the session isn't one.
    """
    if required is AccessLevel.NONE:
        return session
    if session is None:
        raise Unauthenticated("Unauthorized")
    if required is AccessLevel.ADMIN and not session.is_admin:
        raise Forbidden(ADMIN_REQUIRED)
    return session


# ─── JSON API surface ───────────────────────────────────


async def require_session(
    session: Optional[Session] = Depends(get_session),
) -> Session:
    return authorize(session, AccessLevel.AUTHENTICATED)


async def require_admin(
    session: Optional[Session] = Depends(get_session),
) -> Session:
    """Admin API routes: missing session and non-admin session are both 401."""
    try:
        return authorize(session, AccessLevel.ADMIN)
    except Forbidden as e:
        raise Unauthenticated(e.message) from e


async def require_api_token(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> TokenValidation:
    """Public v1 routes that need a bearer token."""
    validation = await validate_bearer_token(authorization, db)
    if not validation.valid:
        raise Unauthenticated(
            validation.error or "Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return validation


# ─── HTML page surface ──────────────────────────────────


async def require_admin_page(
    request: Request,
    session: Optional[Session] = Depends(get_session),
) -> Session:
    """Admin pages redirect instead of rendering an error body."""
    try:
        return authorize(session, AccessLevel.ADMIN)
    except Unauthenticated:
        raise PageRedirect(f"/login?next={quote(request.url.path)}")
    except Forbidden:
        raise PageRedirect("/unauthorized")
