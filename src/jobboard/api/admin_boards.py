"""Admin job board routes — board CRUD plus job/organization assignment."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.db.engine import get_db
from jobboard.errors import InvalidArgument, persistence_errors
from jobboard.schemas.board import (
    AssignmentCount,
    BoardCreate,
    BoardDetail,
    BoardJobAssign,
    BoardJobDetail,
    BoardOrgAssign,
    BoardOrgDetail,
    BoardUpdate,
    BoardWithCounts,
)
from jobboard.services.board_service import BoardService

router = APIRouter(prefix="/admin/boards")


def _svc(db: AsyncSession = Depends(get_db)) -> BoardService:
    return BoardService(db)


# ─── Boards ─────────────────────────────────────────────

@router.get("", response_model=list[BoardWithCounts])
async def list_boards(svc: BoardService = Depends(_svc)):
    with persistence_errors("boards.list", "Failed to fetch job boards"):
        return await svc.list_boards()


@router.post("", response_model=BoardWithCounts, status_code=201)
async def create_board(body: BoardCreate, svc: BoardService = Depends(_svc)):
    with persistence_errors("boards.create", "Failed to create job board", slug=body.slug):
        return await svc.create_board(**body.model_dump())


@router.get("/{board_id}", response_model=BoardDetail)
async def get_board(board_id: str, svc: BoardService = Depends(_svc)):
    with persistence_errors("boards.get", "Failed to fetch job board", board_id=board_id):
        return await svc.get_board(board_id)


@router.patch("/{board_id}", response_model=BoardWithCounts)
async def update_board(board_id: str, body: BoardUpdate, svc: BoardService = Depends(_svc)):
    with persistence_errors("boards.update", "Failed to update job board", board_id=board_id):
        return await svc.update_board(board_id, **body.model_dump(exclude_unset=True))


@router.delete("/{board_id}")
async def delete_board(board_id: str, svc: BoardService = Depends(_svc)):
    with persistence_errors("boards.delete", "Failed to delete job board", board_id=board_id):
        await svc.delete_board(board_id)
    return {"message": "Job board deleted successfully"}


# ─── Jobs on a board ────────────────────────────────────

@router.post("/{board_id}/jobs", response_model=BoardJobDetail | AssignmentCount)
async def assign_jobs(board_id: str, body: BoardJobAssign, svc: BoardService = Depends(_svc)):
    """Assign one job (`job_id`) or many (`job_ids`); existing assignments are updated."""
    with persistence_errors("boards.assign_jobs", "Failed to assign job to board", board_id=board_id):
        if body.job_id:
            return await svc.assign_job(
                board_id, body.job_id, featured=body.featured, pinned_until=body.pinned_until
            )
        if body.job_ids:
            count = await svc.assign_jobs(board_id, body.job_ids, featured=body.featured)
            return AssignmentCount(
                message=f"Successfully assigned {count} jobs to the board", count=count
            )
    raise InvalidArgument("Either job_id or job_ids must be provided")


@router.delete("/{board_id}/jobs")
async def remove_job(
    board_id: str,
    job_id: Optional[str] = Query(None, alias="jobId"),
    svc: BoardService = Depends(_svc),
):
    if not job_id:
        raise InvalidArgument("jobId parameter is required")
    with persistence_errors("boards.remove_job", "Failed to remove job from board", board_id=board_id):
        await svc.remove_job(board_id, job_id)
    return {"message": "Job removed from board successfully"}


# ─── Organizations on a board ───────────────────────────

@router.post("/{board_id}/organizations", response_model=BoardOrgDetail | AssignmentCount)
async def assign_organizations(
    board_id: str, body: BoardOrgAssign, svc: BoardService = Depends(_svc)
):
    with persistence_errors(
        "boards.assign_organizations", "Failed to assign organization to board", board_id=board_id
    ):
        if body.organization_id:
            return await svc.assign_organization(
                board_id, body.organization_id, is_featured=body.is_featured, tier=body.tier
            )
        if body.organization_ids:
            count = await svc.assign_organizations(
                board_id, body.organization_ids, is_featured=body.is_featured, tier=body.tier
            )
            return AssignmentCount(
                message=f"Successfully assigned {count} organizations to the board",
                count=count,
            )
    raise InvalidArgument("Either organization_id or organization_ids must be provided")


@router.delete("/{board_id}/organizations")
async def remove_organization(
    board_id: str,
    organization_id: Optional[str] = Query(None, alias="organizationId"),
    svc: BoardService = Depends(_svc),
):
    if not organization_id:
        raise InvalidArgument("organizationId parameter is required")
    with persistence_errors(
        "boards.remove_organization", "Failed to remove organization from board", board_id=board_id
    ):
        await svc.remove_organization(board_id, organization_id)
    return {"message": "Organization removed from board successfully"}
