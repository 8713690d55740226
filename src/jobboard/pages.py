"""Server-rendered admin pages.

Pages share the authorization decision with the JSON API but fail
differently: no session redirects to /login?next=<path>, a non-admin
session redirects to /unauthorized.
"""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jobboard.auth.gate import require_admin_page
from jobboard.auth.sessions import Session
from jobboard.db.engine import get_db
from jobboard.db.models import FetchLog, Job, JobBoard, Organization
from jobboard.errors import persistence_errors
from jobboard.pagination import Pagination, get_pagination

router = APIRouter(include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def _safe_next(next_path: Optional[str]) -> str:
    # Only same-site relative paths.
    if next_path and next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return "/admin"


@router.get("/login")
async def login_page(request: Request, next: Optional[str] = None):
    return templates.TemplateResponse(
        request, "login.html", {"next_path": _safe_next(next)}
    )


@router.get("/unauthorized")
async def unauthorized_page(request: Request):
    return templates.TemplateResponse(request, "unauthorized.html")


@router.get("/admin")
async def admin_dashboard(
    request: Request,
    session: Session = Depends(require_admin_page),
    db: AsyncSession = Depends(get_db),
):
    with persistence_errors("pages.dashboard", "Failed to load dashboard"):
        active_jobs = (
            await db.execute(select(func.count(Job.id)).where(Job.expired_at.is_(None)))
        ).scalar_one()
        expired_jobs = (
            await db.execute(select(func.count(Job.id)).where(Job.expired_at.is_not(None)))
        ).scalar_one()
        organizations = (await db.execute(select(func.count(Organization.id)))).scalar_one()
        boards = (await db.execute(select(func.count(JobBoard.id)))).scalar_one()
        recent_logs = (
            await db.execute(select(FetchLog).order_by(FetchLog.created_at.desc()).limit(5))
        ).scalars().all()

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "active_jobs": active_jobs,
            "expired_jobs": expired_jobs,
            "organizations": organizations,
            "boards": boards,
            "recent_logs": recent_logs,
        },
    )


@router.get("/admin/jobs")
async def admin_jobs_page(
    request: Request,
    session: Session = Depends(require_admin_page),
    pagination: Pagination = Depends(get_pagination),
    db: AsyncSession = Depends(get_db),
):
    """Job list with bulk expire/restore wired to the admin bulk endpoints."""
    with persistence_errors("pages.jobs", "Failed to load jobs"):
        total = (await db.execute(select(func.count(Job.id)))).scalar_one()
        jobs = (
            await db.execute(
                select(Job)
                .options(selectinload(Job.organization))
                .order_by(Job.date_posted.desc(), Job.id)
                .offset(pagination.skip)
                .limit(pagination.limit)
            )
        ).scalars().all()

    return templates.TemplateResponse(
        request,
        "jobs.html",
        {
            "jobs": jobs,
            "total": total,
            "page": pagination.page,
            "pages": max(pagination.total_pages(total), 1),
        },
    )
