"""Pydantic schemas for job boards and their job/organization assignments."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from jobboard.schemas.job import JobListItem
from jobboard.schemas.organization import OrganizationSummary


# ─── Boards ─────────────────────────────────────────────

class BoardCreate(BaseModel):
    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9-]+$")
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    logo: Optional[str] = None
    primary_color: Optional[str] = None
    domain: Optional[str] = None
    is_active: bool = True


class BoardUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    logo: Optional[str] = None
    primary_color: Optional[str] = None
    domain: Optional[str] = None
    is_active: Optional[bool] = None


class BoardRead(BaseModel):
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    logo: Optional[str] = None
    primary_color: Optional[str] = None
    domain: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BoardWithCounts(BoardRead):
    job_count: int
    organization_count: int


# ─── Assignments ────────────────────────────────────────

class BoardJobAssign(BaseModel):
    """Assign one job (`job_id`) or several (`job_ids`) to a board."""
    job_id: Optional[str] = None
    job_ids: Optional[list[str]] = None
    featured: bool = False
    pinned_until: Optional[datetime] = None


class BoardJobRead(BaseModel):
    id: str
    job_board_id: str
    job_id: str
    featured: bool
    pinned_until: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BoardJobDetail(BoardJobRead):
    job: JobListItem


class BoardOrgAssign(BaseModel):
    """Assign one organization or several to a board."""
    organization_id: Optional[str] = None
    organization_ids: Optional[list[str]] = None
    is_featured: bool = False
    tier: Optional[str] = None


class BoardOrgRead(BaseModel):
    id: str
    job_board_id: str
    organization_id: str
    is_featured: bool
    tier: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BoardOrgDetail(BoardOrgRead):
    organization: OrganizationSummary


class BoardDetail(BoardWithCounts):
    """Board with its 10 most recent job and organization assignments."""
    jobs: list[BoardJobDetail] = []
    organizations: list[BoardOrgDetail] = []


class AssignmentCount(BaseModel):
    message: str
    count: int


# ─── Per-job board status ───────────────────────────────

class JobBoardStatus(BaseModel):
    id: str
    name: str
    slug: str
    is_assigned: bool
    featured: bool
    pinned_until: Optional[datetime] = None


class JobBoardAssign(BaseModel):
    board_id: str
    featured: bool = False
    pinned_until: Optional[datetime] = None
