"""API token service — issue, list and revoke bearer tokens.

The raw token is returned exactly once from create_token(); only its
SHA-256 hash and a short display prefix are stored.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.auth.tokens import generate_api_token, hash_token
from jobboard.db.models import ApiToken
from jobboard.errors import NotFound

logger = structlog.get_logger()

DISPLAY_PREFIX_LENGTH = 12


class TokenService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_tokens(self, user_id: str) -> list[ApiToken]:
        result = await self.db.execute(
            select(ApiToken)
            .where(ApiToken.user_id == user_id)
            .order_by(ApiToken.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_token(
        self, user_id: str, name: str, expires_in_days: Optional[int] = None
    ) -> tuple[ApiToken, str]:
        """Create a token. Returns (row, raw_token)."""
        raw = generate_api_token()
        expires_at = None
        if expires_in_days:
            expires_at = datetime.now(timezone.utc) + timedelta(days=expires_in_days)

        token = ApiToken(
            name=name,
            token_hash=hash_token(raw),
            prefix=raw[:DISPLAY_PREFIX_LENGTH],
            user_id=user_id,
            expires_at=expires_at,
        )
        self.db.add(token)
        await self.db.commit()

        logger.info("tokens.created", token_id=token.id, user_id=user_id, expires_at=expires_at)
        return token, raw

    async def revoke_token(self, user_id: str, token_id: str) -> None:
        """Delete a token. Only its owner can revoke it."""
        result = await self.db.execute(
            select(ApiToken).where(ApiToken.id == token_id, ApiToken.user_id == user_id)
        )
        token = result.scalars().first()
        if token is None:
            raise NotFound("Token not found")
        await self.db.delete(token)
        await self.db.commit()
        logger.info("tokens.revoked", token_id=token_id, user_id=user_id)
