"""Auth API — browser sign-in/sign-out and the current session.

- POST /auth/sign-in  → email/password → session cookie
- POST /auth/sign-out → clears the cookie
- GET  /auth/session  → who the cookie belongs to
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.auth.gate import require_session
from jobboard.auth.password import verify_password
from jobboard.auth.sessions import Session, create_session_token, decode_session_token
from jobboard.config import settings
from jobboard.db.engine import get_db
from jobboard.db.models import User
from jobboard.errors import NotFound, Unauthenticated, persistence_errors
from jobboard.schemas.auth import SessionRead, SignInRequest

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


@router.post("/sign-in", response_model=SessionRead)
async def sign_in(
    body: SignInRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    with persistence_errors("auth.sign_in", "Failed to sign in", email=body.email):
        result = await db.execute(select(User).where(User.email == body.email.strip().lower()))
        user = result.scalars().first()

    if not user or not user.password_hash or not verify_password(
        body.password, user.password_hash
    ):
        logger.info("auth.sign_in_rejected", email=body.email)
        raise Unauthenticated("Invalid email or password")

    token = create_session_token(user.id)
    _set_session_cookie(response, token)
    logger.info("auth.signed_in", user_id=user.id, is_admin=user.is_admin)

    expires = datetime.fromtimestamp(decode_session_token(token)["exp"], tz=timezone.utc)
    return SessionRead(
        user_id=user.id,
        email=user.email,
        name=user.name,
        is_admin=user.is_admin,
        expires_at=expires,
    )


@router.post("/sign-out")
async def sign_out(response: Response):
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"success": True}


@router.get("/session", response_model=SessionRead)
async def current_session(
    session: Session = Depends(require_session),
    db: AsyncSession = Depends(get_db),
):
    with persistence_errors("auth.session", "Failed to load session", user_id=session.user_id):
        user = await db.get(User, session.user_id)
    if user is None:
        raise NotFound("User not found")
    return SessionRead(
        user_id=user.id,
        email=user.email,
        name=user.name,
        is_admin=user.is_admin,
        expires_at=session.expires_at,
    )
