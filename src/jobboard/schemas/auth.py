"""Pydantic schemas for sign-in, sessions and API tokens."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SignInRequest(BaseModel):
    email: str
    password: str


class SessionRead(BaseModel):
    user_id: str
    email: str
    name: str
    is_admin: bool
    expires_at: datetime


# ─── API tokens ─────────────────────────────────────────

class TokenCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    expires_in_days: Optional[int] = Field(None, ge=1, description="Expire in N days (None = never)")


class TokenCreated(BaseModel):
    """Response for token creation — the raw token is only shown ONCE."""
    id: str
    name: str
    token: str
    prefix: str
    expires_at: Optional[datetime] = None
    message: str = "Save this token securely. It will not be shown again."


class TokenRead(BaseModel):
    """Token info (without the token itself)."""
    id: str
    name: str
    prefix: str
    last_used_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}
