"""Pydantic schemas for saved ingestion queries and fetch logs."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class SavedQueryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    parameters: dict[str, Any] = {}
    is_active: bool = True


class SavedQueryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    parameters: Optional[dict[str, Any]] = None
    is_active: Optional[bool] = None


class SavedQueryRead(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    parameters: dict[str, Any]
    is_active: bool
    last_run: Optional[datetime] = None
    result_count: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SavedQueryRef(BaseModel):
    id: str
    name: str

    model_config = {"from_attributes": True}


class FetchLogRead(BaseModel):
    id: str
    status: str
    jobs_fetched: int
    jobs_created: int
    jobs_updated: int
    orgs_created: int
    orgs_updated: int
    parameters: dict[str, Any]
    saved_query_id: Optional[str] = None
    error_message: Optional[str] = None
    duration: int
    created_at: datetime

    model_config = {"from_attributes": True}


class FetchLogWithQuery(FetchLogRead):
    saved_query: Optional[SavedQueryRef] = None


class SavedQueryDetail(SavedQueryRead):
    fetch_logs: list[FetchLogRead] = []
