"""Pydantic schemas for jobs and bulk job operations."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from jobboard.schemas.organization import OrganizationRead, OrganizationSummary


class JobRead(BaseModel):
    id: str
    external_id: Optional[str] = None
    organization_id: str
    title: str
    url: str
    description_text: Optional[str] = None
    date_posted: datetime
    date_created: datetime
    date_valid_through: Optional[datetime] = None
    cities: list[str] = []
    counties: list[str] = []
    regions: list[str] = []
    countries: list[str] = []
    locations_full: list[str] = []
    timezones: list[str] = []
    latitude: list[float] = []
    longitude: list[float] = []
    is_remote: bool
    employment_type: list[str] = []
    salary_raw: Optional[dict[str, Any]] = None
    source_type: Optional[str] = None
    source: Optional[str] = None
    source_domain: Optional[str] = None
    last_fetched_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class JobListItem(JobRead):
    """Job row in public listings, with the organization summary attached."""
    organization: OrganizationSummary


class JobDetail(JobRead):
    organization: OrganizationRead


# ─── Bulk operations ────────────────────────────────────


class BulkJobIds(BaseModel):
    """Body of the bulk endpoints: `{"jobIds": [...]}`."""
    job_ids: list[str] = Field(alias="jobIds")

    model_config = {"populate_by_name": True}


class BulkResult(BaseModel):
    success: bool = True
    count: int
    message: str


class BulkDeleteResult(BulkResult):
    orphaned_orgs_deleted: int
