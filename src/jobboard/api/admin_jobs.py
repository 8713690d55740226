"""Admin job routes — bulk expire/unexpire/delete and per-job board assignment.

Mounted behind require_admin: every route here answers 401 without an
admin session, before any query runs.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.db.engine import get_db
from jobboard.errors import InvalidArgument, persistence_errors
from jobboard.schemas.board import BoardJobRead, JobBoardAssign, JobBoardStatus
from jobboard.schemas.job import BulkDeleteResult, BulkJobIds, BulkResult
from jobboard.services.board_service import BoardService
from jobboard.services.job_service import JobService

router = APIRouter(prefix="/admin/jobs")


def _svc(db: AsyncSession = Depends(get_db)) -> JobService:
    return JobService(db)


def _boards(db: AsyncSession = Depends(get_db)) -> BoardService:
    return BoardService(db)


# ─── Bulk operations ────────────────────────────────────

@router.post("/bulk-expire", response_model=BulkResult)
async def bulk_expire(body: BulkJobIds, svc: JobService = Depends(_svc)):
    with persistence_errors("jobs.bulk_expire", "Failed to expire jobs"):
        count = await svc.bulk_set_expiry(body.job_ids, expire=True)
    return BulkResult(count=count, message=f"Successfully expired {count} job(s)")


@router.post("/bulk-unexpire", response_model=BulkResult)
async def bulk_unexpire(body: BulkJobIds, svc: JobService = Depends(_svc)):
    with persistence_errors("jobs.bulk_unexpire", "Failed to unexpire jobs"):
        count = await svc.bulk_set_expiry(body.job_ids, expire=False)
    return BulkResult(count=count, message=f"Successfully reactivated {count} job(s)")


@router.post("/bulk-delete", response_model=BulkDeleteResult)
async def bulk_delete(body: BulkJobIds, svc: JobService = Depends(_svc)):
    with persistence_errors("jobs.bulk_delete", "Failed to delete jobs"):
        count, orphaned = await svc.bulk_delete(body.job_ids)
    message = f"Successfully deleted {count} job(s)"
    if orphaned:
        message += f" and {orphaned} orphaned organization(s)"
    return BulkDeleteResult(count=count, orphaned_orgs_deleted=orphaned, message=message)


@router.delete("/{job_id}")
async def delete_job(job_id: str, svc: JobService = Depends(_svc)):
    with persistence_errors("jobs.delete", "Failed to delete job", job_id=job_id):
        await svc.delete_job(job_id)
    return {"success": True, "message": "Job deleted successfully"}


# ─── Board assignment for one job ───────────────────────

@router.get("/{job_id}/boards", response_model=list[JobBoardStatus])
async def job_boards(job_id: str, boards: BoardService = Depends(_boards)):
    """Active boards, each flagged with whether this job is on it."""
    with persistence_errors("jobs.boards", "Failed to fetch job boards", job_id=job_id):
        return await boards.job_board_status(job_id)


@router.post("/{job_id}/boards", response_model=BoardJobRead)
async def assign_board(
    job_id: str,
    body: JobBoardAssign,
    boards: BoardService = Depends(_boards),
):
    with persistence_errors("jobs.assign_board", "Failed to assign job to board", job_id=job_id):
        return await boards.assign_board_to_job(
            job_id, body.board_id, featured=body.featured, pinned_until=body.pinned_until
        )


@router.delete("/{job_id}/boards")
async def unassign_board(
    job_id: str,
    board_id: Optional[str] = Query(None, alias="boardId"),
    boards: BoardService = Depends(_boards),
):
    if not board_id:
        raise InvalidArgument("boardId parameter is required")
    with persistence_errors("jobs.unassign_board", "Failed to remove job from board", job_id=job_id):
        await boards.remove_job(board_id, job_id)
    return {"message": "Job removed from board successfully"}
