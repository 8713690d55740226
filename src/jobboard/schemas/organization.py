"""Pydantic schemas for organizations."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class OrganizationSummary(BaseModel):
    """The slice of an organization embedded in job listings."""
    id: str
    name: str
    logo: Optional[str] = None
    domain: Optional[str] = None
    url: Optional[str] = None
    linkedin_url: Optional[str] = None
    linkedin_industry: Optional[str] = None
    linkedin_size: Optional[str] = None

    model_config = {"from_attributes": True}


class OrganizationRead(OrganizationSummary):
    linkedin_slug: Optional[str] = None
    linkedin_employees: Optional[int] = None
    linkedin_type: Optional[str] = None
    linkedin_founded_date: Optional[str] = None
    linkedin_followers: Optional[int] = None
    linkedin_headquarters: Optional[str] = None
    linkedin_specialties: list[str] = []
    linkedin_locations: list[str] = []
    linkedin_description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrganizationWithCount(OrganizationRead):
    job_count: int
