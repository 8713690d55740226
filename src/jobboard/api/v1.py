"""Public v1 API — read-only access to jobs, organizations and boards.

Listing and search are open. Single-record lookups, boards and stats need a
bearer API token (`Authorization: Bearer rmj_...`); the token is checked
before any record query runs. /api/v1/* is rate limited per client IP.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.auth.gate import require_api_token
from jobboard.db.engine import get_db
from jobboard.errors import persistence_errors
from jobboard.pagination import Page, Pagination, get_pagination
from jobboard.schemas.board import BoardWithCounts
from jobboard.schemas.job import JobDetail, JobListItem
from jobboard.schemas.organization import OrganizationWithCount
from jobboard.schemas.stats import StatsRead
from jobboard.services.board_service import BoardService
from jobboard.services.job_service import JobFilters, JobService
from jobboard.services.organization_service import OrganizationService

router = APIRouter(prefix="/v1")

_token = [Depends(require_api_token)]


# ─── Jobs ───────────────────────────────────────────────

@router.get("/jobs", response_model=Page[JobListItem])
async def list_jobs(
    location: Optional[str] = None,
    remote: Optional[bool] = None,
    employment_type: Optional[str] = Query(None, alias="employmentType"),
    search: Optional[str] = None,
    organization_id: Optional[str] = Query(None, alias="organizationId"),
    board_slug: Optional[str] = Query(None, alias="boardSlug"),
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
):
    filters = JobFilters(
        location=location,
        remote=remote,
        employment_type=employment_type,
        search=search,
        organization_id=organization_id,
        board_slug=board_slug,
    )
    with persistence_errors("jobs.list", "Failed to fetch jobs"):
        return await JobService(db).list_jobs(filters, pagination)


@router.get("/jobs/search", response_model=Page[JobListItem])
async def search_jobs(
    q: Optional[str] = None,
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
):
    with persistence_errors("jobs.search", "Failed to search jobs", q=q):
        return await JobService(db).search_jobs(q, pagination)


@router.get("/jobs/{job_id}", response_model=JobDetail, dependencies=_token)
async def get_job(job_id: str, db: AsyncSession = Depends(get_db)):
    with persistence_errors("jobs.get", "Failed to fetch job", job_id=job_id):
        return await JobService(db).get_job(job_id)


# ─── Organizations ──────────────────────────────────────

@router.get("/organizations", response_model=Page[OrganizationWithCount])
async def list_organizations(
    search: Optional[str] = None,
    board_slug: Optional[str] = Query(None, alias="boardSlug"),
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
):
    with persistence_errors("organizations.list", "Failed to fetch organizations"):
        return await OrganizationService(db).list_organizations(
            pagination, search=search, board_slug=board_slug
        )


@router.get(
    "/organizations/{organization_id}",
    response_model=OrganizationWithCount,
    dependencies=_token,
)
async def get_organization(organization_id: str, db: AsyncSession = Depends(get_db)):
    with persistence_errors(
        "organizations.get", "Failed to fetch organization", organization_id=organization_id
    ):
        return await OrganizationService(db).get_organization(organization_id)


@router.get("/organizations/{organization_id}/jobs", response_model=Page[JobListItem])
async def organization_jobs(
    organization_id: str,
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
):
    """Active jobs of one organization, newest first."""
    with persistence_errors(
        "organizations.jobs", "Failed to fetch organization jobs", organization_id=organization_id
    ):
        return await JobService(db).list_jobs_by_organization(organization_id, pagination)


# ─── Boards and stats ───────────────────────────────────

@router.get("/boards", response_model=Page[BoardWithCounts], dependencies=_token)
async def list_boards(
    active_only: bool = Query(True, alias="activeOnly"),
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
):
    with persistence_errors("boards.list_public", "Failed to fetch job boards"):
        return await BoardService(db).list_boards_page(pagination, active_only=active_only)


@router.get("/stats", response_model=StatsRead, dependencies=_token)
async def stats(db: AsyncSession = Depends(get_db)):
    with persistence_errors("stats.get", "Failed to fetch statistics"):
        return await JobService(db).stats()
