"""Bearer token validation for the public v1 API.

Machine clients send `Authorization: Bearer rmj_<hex>`. Tokens are looked
up by SHA-256 hash, rejected when expired, and stamped with last_used_at on
every successful use.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.db.models import ApiToken

logger = structlog.get_logger()

TOKEN_PREFIX = "rmj_"


@dataclass(frozen=True)
class TokenValidation:
    valid: bool
    user_id: Optional[str] = None
    error: Optional[str] = None


def generate_api_token() -> str:
    return f"{TOKEN_PREFIX}{secrets.token_hex(32)}"


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def validate_bearer_token(
    authorization: Optional[str], db: AsyncSession
) -> TokenValidation:
    """Validate an Authorization header value against the token store."""
    if not authorization:
        return TokenValidation(valid=False, error="No authorization header")
    if not authorization.startswith("Bearer "):
        return TokenValidation(valid=False, error="Invalid authorization format")

    raw_token = authorization[len("Bearer "):].strip()
    if not raw_token:
        return TokenValidation(valid=False, error="No token provided")

    try:
        result = await db.execute(
            select(ApiToken).where(ApiToken.token_hash == hash_token(raw_token))
        )
        api_token = result.scalars().first()
        if not api_token:
            return TokenValidation(valid=False, error="Invalid token")

        now = datetime.now(timezone.utc)
        if api_token.expires_at and as_utc(api_token.expires_at) < now:
            return TokenValidation(valid=False, error="Token expired")

        user_id = api_token.user_id
        api_token.last_used_at = now
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("auth.token_validation_failed", error=str(e))
        return TokenValidation(valid=False, error="Token validation failed")

    return TokenValidation(valid=True, user_id=user_id)
