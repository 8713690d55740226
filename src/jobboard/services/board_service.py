"""Board service — job boards and the jobs/organizations assigned to them.

A board is a curated, branded subset of the job pool. Assignments are
upserts: assigning an already-assigned job updates its flags instead of
failing on the unique (board, job) constraint.
"""

from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jobboard.db.models import Job, JobBoard, JobBoardJob, JobBoardOrganization, Organization
from jobboard.errors import InvalidArgument, NotFound
from jobboard.pagination import Pagination, paginate
from jobboard.schemas.board import BoardRead

logger = structlog.get_logger()

RECENT_ASSIGNMENTS = 10


def _job_count():
    return (
        select(func.count(JobBoardJob.id))
        .where(JobBoardJob.job_board_id == JobBoard.id)
        .correlate(JobBoard)
        .scalar_subquery()
        .label("job_count")
    )


def _org_count():
    return (
        select(func.count(JobBoardOrganization.id))
        .where(JobBoardOrganization.job_board_id == JobBoard.id)
        .correlate(JobBoard)
        .scalar_subquery()
        .label("organization_count")
    )


def with_counts(board: JobBoard, job_count: int, organization_count: int) -> dict:
    data = BoardRead.model_validate(board).model_dump()
    data.update(job_count=job_count, organization_count=organization_count)
    return data


class BoardService:
    """Business logic for job boards."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Boards ─────────────────────────────────────────

    async def list_boards(self) -> list[dict]:
        """All boards, newest first, with assignment counts."""
        rows = await self.db.execute(
            select(JobBoard, _job_count(), _org_count()).order_by(
                JobBoard.created_at.desc()
            )
        )
        return [with_counts(*row) for row in rows.all()]

    async def list_boards_page(self, pagination: Pagination, active_only: bool = True) -> dict:
        """Paginated board listing for the public API, ordered by name."""
        stmt = select(JobBoard)
        if active_only:
            stmt = stmt.where(JobBoard.is_active.is_(True))
        total = (
            await self.db.execute(select(func.count()).select_from(stmt.subquery()))
        ).scalar_one()
        rows = await self.db.execute(
            stmt.add_columns(_job_count(), _org_count())
            .order_by(JobBoard.name, JobBoard.id)
            .offset(pagination.skip)
            .limit(pagination.limit)
        )
        return paginate([with_counts(*row) for row in rows.all()], total, pagination)

    async def _counted(self, board_id: str) -> dict:
        row = (
            await self.db.execute(
                select(JobBoard, _job_count(), _org_count()).where(JobBoard.id == board_id)
            )
        ).first()
        if row is None:
            raise NotFound("Job board not found")
        return with_counts(*row)

    async def _require_board(self, board_id: str) -> JobBoard:
        board = await self.db.get(JobBoard, board_id)
        if board is None:
            raise NotFound("Job board not found")
        return board

    async def create_board(self, **fields) -> dict:
        existing = await self.db.execute(
            select(JobBoard.id).where(JobBoard.slug == fields["slug"])
        )
        if existing.first() is not None:
            raise InvalidArgument("A job board with this slug already exists")

        board = JobBoard(**fields)
        self.db.add(board)
        await self.db.commit()
        logger.info("boards.created", board_id=board.id, slug=board.slug)
        return with_counts(board, 0, 0)

    async def get_board(self, board_id: str) -> dict:
        """Board with counts and its most recent job/organization assignments."""
        data = await self._counted(board_id)

        jobs = await self.db.execute(
            select(JobBoardJob)
            .where(JobBoardJob.job_board_id == board_id)
            .options(selectinload(JobBoardJob.job).selectinload(Job.organization))
            .order_by(JobBoardJob.created_at.desc())
            .limit(RECENT_ASSIGNMENTS)
        )
        orgs = await self.db.execute(
            select(JobBoardOrganization)
            .where(JobBoardOrganization.job_board_id == board_id)
            .options(selectinload(JobBoardOrganization.organization))
            .order_by(JobBoardOrganization.created_at.desc())
            .limit(RECENT_ASSIGNMENTS)
        )
        data["jobs"] = list(jobs.scalars().all())
        data["organizations"] = list(orgs.scalars().all())
        return data

    async def update_board(self, board_id: str, **fields) -> dict:
        board = await self._require_board(board_id)
        for key, value in fields.items():
            setattr(board, key, value)
        await self.db.commit()
        logger.info("boards.updated", board_id=board_id, fields=sorted(fields))
        return await self._counted(board_id)

    async def delete_board(self, board_id: str) -> None:
        board = await self._require_board(board_id)
        await self.db.execute(
            delete(JobBoardJob).where(JobBoardJob.job_board_id == board_id)
        )
        await self.db.execute(
            delete(JobBoardOrganization).where(
                JobBoardOrganization.job_board_id == board_id
            )
        )
        await self.db.execute(delete(JobBoard).where(JobBoard.id == board.id))
        await self.db.commit()
        logger.info("boards.deleted", board_id=board_id)

    # ─── Job assignments ────────────────────────────────

    async def _upsert_job(
        self,
        board_id: str,
        job_id: str,
        featured: bool,
        pinned_until: Optional[datetime],
    ) -> JobBoardJob:
        result = await self.db.execute(
            select(JobBoardJob).where(
                JobBoardJob.job_board_id == board_id, JobBoardJob.job_id == job_id
            )
        )
        assignment = result.scalars().first()
        if assignment is None:
            assignment = JobBoardJob(job_board_id=board_id, job_id=job_id)
            self.db.add(assignment)
        assignment.featured = featured
        assignment.pinned_until = pinned_until
        return assignment

    async def assign_job(
        self,
        board_id: str,
        job_id: str,
        featured: bool = False,
        pinned_until: Optional[datetime] = None,
    ) -> JobBoardJob:
        await self._require_board(board_id)
        if await self.db.get(Job, job_id) is None:
            raise NotFound("Job not found")
        assignment = await self._upsert_job(board_id, job_id, featured, pinned_until)
        await self.db.commit()

        result = await self.db.execute(
            select(JobBoardJob)
            .where(JobBoardJob.id == assignment.id)
            .options(selectinload(JobBoardJob.job).selectinload(Job.organization))
        )
        return result.scalars().one()

    async def assign_jobs(self, board_id: str, job_ids: list[str], featured: bool = False) -> int:
        await self._require_board(board_id)
        unique_ids = list(dict.fromkeys(job_ids))
        for job_id in unique_ids:
            await self._upsert_job(board_id, job_id, featured, None)
        await self.db.commit()
        logger.info("boards.jobs_assigned", board_id=board_id, count=len(unique_ids))
        return len(unique_ids)

    async def remove_job(self, board_id: str, job_id: str) -> None:
        result = await self.db.execute(
            select(JobBoardJob).where(
                JobBoardJob.job_board_id == board_id, JobBoardJob.job_id == job_id
            )
        )
        assignment = result.scalars().first()
        if assignment is None:
            raise NotFound("Job is not assigned to this board")
        await self.db.delete(assignment)
        await self.db.commit()

    async def job_board_status(self, job_id: str) -> list[dict]:
        """Every active board, flagged with whether `job_id` is assigned to it."""
        rows = await self.db.execute(
            select(JobBoard, JobBoardJob)
            .outerjoin(
                JobBoardJob,
                (JobBoardJob.job_board_id == JobBoard.id) & (JobBoardJob.job_id == job_id),
            )
            .where(JobBoard.is_active.is_(True))
            .order_by(JobBoard.name)
        )
        return [
            {
                "id": board.id,
                "name": board.name,
                "slug": board.slug,
                "is_assigned": assignment is not None,
                "featured": assignment.featured if assignment else False,
                "pinned_until": assignment.pinned_until if assignment else None,
            }
            for board, assignment in rows.all()
        ]

    async def assign_board_to_job(
        self,
        job_id: str,
        board_id: str,
        featured: bool = False,
        pinned_until: Optional[datetime] = None,
    ) -> JobBoardJob:
        await self._require_board(board_id)
        if await self.db.get(Job, job_id) is None:
            raise NotFound("Job not found")
        assignment = await self._upsert_job(board_id, job_id, featured, pinned_until)
        await self.db.commit()
        return assignment

    # ─── Organization assignments ───────────────────────

    async def _upsert_org(
        self, board_id: str, organization_id: str, is_featured: bool, tier: Optional[str]
    ) -> JobBoardOrganization:
        result = await self.db.execute(
            select(JobBoardOrganization).where(
                JobBoardOrganization.job_board_id == board_id,
                JobBoardOrganization.organization_id == organization_id,
            )
        )
        assignment = result.scalars().first()
        if assignment is None:
            assignment = JobBoardOrganization(
                job_board_id=board_id, organization_id=organization_id
            )
            self.db.add(assignment)
        assignment.is_featured = is_featured
        assignment.tier = tier
        return assignment

    async def assign_organization(
        self,
        board_id: str,
        organization_id: str,
        is_featured: bool = False,
        tier: Optional[str] = None,
    ) -> JobBoardOrganization:
        await self._require_board(board_id)
        if await self.db.get(Organization, organization_id) is None:
            raise NotFound("Organization not found")
        assignment = await self._upsert_org(board_id, organization_id, is_featured, tier)
        await self.db.commit()

        result = await self.db.execute(
            select(JobBoardOrganization)
            .where(JobBoardOrganization.id == assignment.id)
            .options(selectinload(JobBoardOrganization.organization))
        )
        return result.scalars().one()

    async def assign_organizations(
        self,
        board_id: str,
        organization_ids: list[str],
        is_featured: bool = False,
        tier: Optional[str] = None,
    ) -> int:
        await self._require_board(board_id)
        unique_ids = list(dict.fromkeys(organization_ids))
        for organization_id in unique_ids:
            await self._upsert_org(board_id, organization_id, is_featured, tier)
        await self.db.commit()
        logger.info("boards.organizations_assigned", board_id=board_id, count=len(unique_ids))
        return len(unique_ids)

    async def remove_organization(self, board_id: str, organization_id: str) -> None:
        result = await self.db.execute(
            select(JobBoardOrganization).where(
                JobBoardOrganization.job_board_id == board_id,
                JobBoardOrganization.organization_id == organization_id,
            )
        )
        assignment = result.scalars().first()
        if assignment is None:
            raise NotFound("Organization is not assigned to this board")
        await self.db.delete(assignment)
        await self.db.commit()
