"""Admin API token routes — tokens belong to the signed-in admin.

- GET    /admin/tokens        → list (never includes the raw token)
- POST   /admin/tokens        → create; the raw token is returned ONCE
- DELETE /admin/tokens?id=... → revoke
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.auth.gate import require_admin
from jobboard.auth.sessions import Session
from jobboard.db.engine import get_db
from jobboard.errors import InvalidArgument, persistence_errors
from jobboard.schemas.auth import TokenCreate, TokenCreated, TokenRead
from jobboard.services.token_service import TokenService

router = APIRouter(prefix="/admin/tokens")


def _svc(db: AsyncSession = Depends(get_db)) -> TokenService:
    return TokenService(db)


@router.get("")
async def list_tokens(
    session: Session = Depends(require_admin),
    svc: TokenService = Depends(_svc),
):
    with persistence_errors("tokens.list", "Failed to fetch tokens", user_id=session.user_id):
        tokens = await svc.list_tokens(session.user_id)
    return {"tokens": [TokenRead.model_validate(t) for t in tokens]}


@router.post("", response_model=TokenCreated, status_code=201)
async def create_token(
    body: TokenCreate,
    session: Session = Depends(require_admin),
    svc: TokenService = Depends(_svc),
):
    with persistence_errors("tokens.create", "Failed to create token", user_id=session.user_id):
        token, raw = await svc.create_token(
            session.user_id, body.name, expires_in_days=body.expires_in_days
        )
    return TokenCreated(
        id=token.id,
        name=token.name,
        token=raw,
        prefix=token.prefix,
        expires_at=token.expires_at,
    )


@router.delete("")
async def revoke_token(
    token_id: Optional[str] = Query(None, alias="id"),
    session: Session = Depends(require_admin),
    svc: TokenService = Depends(_svc),
):
    if not token_id:
        raise InvalidArgument("Token ID is required")
    with persistence_errors("tokens.revoke", "Failed to delete token", token_id=token_id):
        await svc.revoke_token(session.user_id, token_id)
    return {"message": "Token revoked successfully"}
