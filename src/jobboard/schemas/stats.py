"""Pydantic schema for the public statistics endpoint."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CityCount(BaseModel):
    city: str
    count: int


class TypeCount(BaseModel):
    type: str
    count: int


class TopOrganization(BaseModel):
    id: str
    name: str
    logo: Optional[str] = None
    job_count: int


class StatsRead(BaseModel):
    total_jobs: int
    total_organizations: int
    remote_jobs: int
    recent_jobs: int
    top_locations: list[CityCount]
    top_organizations: list[TopOrganization]
    employment_types: list[TypeCount]
    last_updated: datetime
