"""Job service — listings, lookups and bulk mutations over jobs.

Public listings only ever show active jobs (`expired_at IS NULL`). Admins
flip that column in bulk; the update statements carry the precondition in
their WHERE clause so the returned count is the number of rows that actually
changed state, and running the same request twice is harmless.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy import String, cast, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jobboard.db.models import (
    Job,
    JobBoard,
    JobBoardJob,
    JobBoardOrganization,
    Organization,
    utcnow,
)
from jobboard.errors import InvalidArgument, NotFound
from jobboard.pagination import Pagination, paginate

logger = structlog.get_logger()

STATS_SAMPLE_SIZE = 1000
RECENT_DAYS = 7


@dataclass
class JobFilters:
    """Optional narrowing for the public job listing."""
    location: Optional[str] = None
    remote: Optional[bool] = None
    employment_type: Optional[str] = None
    search: Optional[str] = None
    organization_id: Optional[str] = None
    board_slug: Optional[str] = None


def _json_contains(column, needle: str):
    """Case-insensitive match of `needle` inside a JSON list column."""
    return cast(column, String).ilike(f"%{needle}%")


class JobService:
    """Business logic for jobs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Bulk mutations ─────────────────────────────────

    async def bulk_set_expiry(self, job_ids: list[str], expire: bool) -> int:
        """Expire (or reactivate) the given jobs; return how many changed.

        Only rows not already in the target state are touched, so ids that
        don't exist or are already expired/active are silently skipped.
        """
        if not job_ids:
            raise InvalidArgument("Invalid job IDs provided")

        stmt = update(Job).where(Job.id.in_(job_ids))
        if expire:
            stmt = stmt.where(Job.expired_at.is_(None)).values(expired_at=utcnow())
        else:
            stmt = stmt.where(Job.expired_at.is_not(None)).values(expired_at=None)

        result = await self.db.execute(
            stmt.execution_options(synchronize_session=False)
        )
        await self.db.commit()

        count = result.rowcount
        logger.info(
            "jobs.bulk_expire" if expire else "jobs.bulk_unexpire",
            requested=len(job_ids),
            changed=count,
        )
        return count

    async def bulk_delete(self, job_ids: list[str]) -> tuple[int, int]:
        """Delete jobs, then any organization left without jobs.

        Returns (jobs_deleted, orphaned_orgs_deleted).
        """
        if not job_ids:
            raise InvalidArgument("Invalid job IDs provided")

        await self.db.execute(delete(JobBoardJob).where(JobBoardJob.job_id.in_(job_ids)))
        result = await self.db.execute(
            delete(Job).where(Job.id.in_(job_ids)).execution_options(
                synchronize_session=False
            )
        )
        count = result.rowcount

        orphaned = list(
            (
                await self.db.execute(
                    select(Organization.id).where(~Organization.jobs.any())
                )
            ).scalars().all()
        )
        if orphaned:
            await self.db.execute(
                delete(JobBoardOrganization).where(
                    JobBoardOrganization.organization_id.in_(orphaned)
                )
            )
            await self.db.execute(
                delete(Organization).where(Organization.id.in_(orphaned)).execution_options(
                    synchronize_session=False
                )
            )
        await self.db.commit()

        logger.info("jobs.bulk_delete", requested=len(job_ids), deleted=count, orphaned_orgs=len(orphaned))
        return count, len(orphaned)

    async def delete_job(self, job_id: str) -> None:
        if await self.db.get(Job, job_id) is None:
            raise NotFound("Job not found")
        await self.db.execute(delete(JobBoardJob).where(JobBoardJob.job_id == job_id))
        await self.db.execute(delete(Job).where(Job.id == job_id))
        await self.db.commit()
        logger.info("jobs.deleted", job_id=job_id)

    # ─── Lookups ────────────────────────────────────────

    async def get_job(self, job_id: str) -> Job:
        result = await self.db.execute(
            select(Job).where(Job.id == job_id).options(selectinload(Job.organization))
        )
        job = result.scalars().first()
        if job is None:
            raise NotFound("Job not found")
        return job

    # ─── Listings ───────────────────────────────────────

    async def _page(self, stmt, pagination: Pagination) -> dict:
        total = (
            await self.db.execute(select(func.count()).select_from(stmt.subquery()))
        ).scalar_one()
        rows = await self.db.execute(
            stmt.options(selectinload(Job.organization))
            .order_by(Job.date_posted.desc(), Job.id)
            .offset(pagination.skip)
            .limit(pagination.limit)
        )
        return paginate(rows.scalars().all(), total, pagination)

    async def list_jobs(self, filters: JobFilters, pagination: Pagination) -> dict:
        stmt = select(Job).where(Job.expired_at.is_(None))

        if filters.board_slug:
            stmt = stmt.where(
                Job.id.in_(
                    select(JobBoardJob.job_id)
                    .join(JobBoard, JobBoard.id == JobBoardJob.job_board_id)
                    .where(JobBoard.slug == filters.board_slug, JobBoard.is_active.is_(True))
                )
            )
        if filters.location:
            stmt = stmt.where(
                or_(
                    _json_contains(Job.cities, filters.location),
                    _json_contains(Job.regions, filters.location),
                    _json_contains(Job.countries, filters.location),
                )
            )
        if filters.remote is not None:
            stmt = stmt.where(Job.is_remote.is_(filters.remote))
        if filters.employment_type:
            stmt = stmt.where(_json_contains(Job.employment_type, filters.employment_type))
        if filters.search:
            pattern = f"%{filters.search}%"
            stmt = stmt.where(
                or_(Job.title.ilike(pattern), Job.description_text.ilike(pattern))
            )
        if filters.organization_id:
            stmt = stmt.where(Job.organization_id == filters.organization_id)

        return await self._page(stmt, pagination)

    async def search_jobs(self, q: Optional[str], pagination: Pagination) -> dict:
        """Full-text-ish search across title, description and company name."""
        if not q or not q.strip():
            raise InvalidArgument("Search query is required")
        pattern = f"%{q.strip()}%"
        stmt = (
            select(Job)
            .join(Organization, Organization.id == Job.organization_id)
            .where(
                Job.expired_at.is_(None),
                or_(
                    Job.title.ilike(pattern),
                    Job.description_text.ilike(pattern),
                    Organization.name.ilike(pattern),
                ),
            )
        )
        return await self._page(stmt, pagination)

    async def list_jobs_by_organization(
        self, organization_id: str, pagination: Pagination
    ) -> dict:
        """Active jobs of one organization, most recently posted first."""
        stmt = select(Job).where(
            Job.organization_id == organization_id,
            Job.expired_at.is_(None),
        )
        return await self._page(stmt, pagination)

    # ─── Statistics ─────────────────────────────────────

    async def stats(self) -> dict:
        active = Job.expired_at.is_(None)

        async def count(stmt) -> int:
            return (await self.db.execute(stmt)).scalar_one()

        total_jobs = await count(select(func.count(Job.id)).where(active))
        total_orgs = await count(select(func.count(Organization.id)))
        remote_jobs = await count(
            select(func.count(Job.id)).where(active, Job.is_remote.is_(True))
        )
        recent_jobs = await count(
            select(func.count(Job.id)).where(
                active, Job.date_posted >= utcnow() - timedelta(days=RECENT_DAYS)
            )
        )

        sample = (
            await self.db.execute(
                select(Job.cities, Job.employment_type).where(active).limit(STATS_SAMPLE_SIZE)
            )
        ).all()
        cities: Counter = Counter()
        types: Counter = Counter()
        for job_cities, job_types in sample:
            cities.update(job_cities or [])
            types.update(job_types or [])

        job_count = func.count(Job.id).label("job_count")
        top_orgs = (
            await self.db.execute(
                select(Organization.id, Organization.name, Organization.logo, job_count)
                .outerjoin(Job, Job.organization_id == Organization.id)
                .group_by(Organization.id, Organization.name, Organization.logo)
                .order_by(job_count.desc(), Organization.name)
                .limit(10)
            )
        ).all()

        return {
            "total_jobs": total_jobs,
            "total_organizations": total_orgs,
            "remote_jobs": remote_jobs,
            "recent_jobs": recent_jobs,
            "top_locations": [
                {"city": city, "count": n} for city, n in cities.most_common(10)
            ],
            "top_organizations": [
                {"id": r.id, "name": r.name, "logo": r.logo, "job_count": r.job_count}
                for r in top_orgs
            ],
            "employment_types": [
                {"type": t, "count": n} for t, n in types.most_common(10)
            ],
            "last_updated": utcnow(),
        }
