"""Organization service — lookups and listings with job counts."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.db.models import Job, JobBoard, JobBoardOrganization, Organization
from jobboard.errors import NotFound
from jobboard.pagination import Pagination, paginate
from jobboard.schemas.organization import OrganizationRead


def with_job_count(org: Organization, job_count: int) -> dict:
    data = OrganizationRead.model_validate(org).model_dump()
    data["job_count"] = job_count
    return data


class OrganizationService:

    def __init__(self, db: AsyncSession):
        self.db = db

    def _job_count(self):
        return (
            select(func.count(Job.id))
            .where(Job.organization_id == Organization.id)
            .correlate(Organization)
            .scalar_subquery()
        )

    async def get_organization(self, organization_id: str) -> dict:
        """Organization with the number of jobs it has posted."""
        row = (
            await self.db.execute(
                select(Organization, self._job_count().label("job_count")).where(
                    Organization.id == organization_id
                )
            )
        ).first()
        if row is None:
            raise NotFound("Organization not found")
        return with_job_count(row[0], row[1])

    async def list_organizations(
        self,
        pagination: Pagination,
        search: Optional[str] = None,
        board_slug: Optional[str] = None,
    ) -> dict:
        stmt = select(Organization)
        if search:
            stmt = stmt.where(Organization.name.ilike(f"%{search}%"))
        if board_slug:
            stmt = stmt.where(
                Organization.id.in_(
                    select(JobBoardOrganization.organization_id)
                    .join(JobBoard, JobBoard.id == JobBoardOrganization.job_board_id)
                    .where(JobBoard.slug == board_slug, JobBoard.is_active.is_(True))
                )
            )

        total = (
            await self.db.execute(select(func.count()).select_from(stmt.subquery()))
        ).scalar_one()
        rows = await self.db.execute(
            stmt.add_columns(self._job_count().label("job_count"))
            .order_by(Organization.name, Organization.id)
            .offset(pagination.skip)
            .limit(pagination.limit)
        )
        items = [with_job_count(org, n) for org, n in rows.all()]
        return paginate(items, total, pagination)
