"""Admin saved query routes and the fetch log listing."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.db.engine import get_db
from jobboard.errors import persistence_errors
from jobboard.ingest.client import FantasticJobsClient, get_ingest_client
from jobboard.pagination import Page, Pagination, get_pagination
from jobboard.schemas.fetch import ExecuteResponse
from jobboard.schemas.query import (
    FetchLogWithQuery,
    SavedQueryCreate,
    SavedQueryDetail,
    SavedQueryRead,
    SavedQueryUpdate,
)
from jobboard.services.query_service import QueryService

router = APIRouter(prefix="/admin")


def _svc(db: AsyncSession = Depends(get_db)) -> QueryService:
    return QueryService(db)


# ─── Saved queries ──────────────────────────────────────

@router.get("/queries", response_model=list[SavedQueryRead])
async def list_queries(svc: QueryService = Depends(_svc)):
    with persistence_errors("queries.list", "Failed to fetch saved queries"):
        return await svc.list_queries()


@router.post("/queries", response_model=SavedQueryRead, status_code=201)
async def create_query(body: SavedQueryCreate, svc: QueryService = Depends(_svc)):
    with persistence_errors("queries.create", "Failed to create saved query"):
        return await svc.create_query(
            name=body.name,
            parameters=body.parameters,
            description=body.description,
            is_active=body.is_active,
        )


@router.get("/queries/{query_id}", response_model=SavedQueryDetail)
async def get_query(query_id: str, svc: QueryService = Depends(_svc)):
    with persistence_errors("queries.get", "Failed to fetch saved query", query_id=query_id):
        return await svc.get_query_with_logs(query_id)


@router.patch("/queries/{query_id}", response_model=SavedQueryRead)
async def update_query(query_id: str, body: SavedQueryUpdate, svc: QueryService = Depends(_svc)):
    with persistence_errors("queries.update", "Failed to update saved query", query_id=query_id):
        return await svc.update_query(query_id, **body.model_dump(exclude_unset=True))


@router.delete("/queries/{query_id}")
async def delete_query(query_id: str, svc: QueryService = Depends(_svc)):
    with persistence_errors("queries.delete", "Failed to delete saved query", query_id=query_id):
        await svc.delete_query(query_id)
    return {"message": "Saved query deleted successfully"}


@router.post("/queries/{query_id}/execute", response_model=ExecuteResponse)
async def execute_query(
    query_id: str,
    svc: QueryService = Depends(_svc),
    client: FantasticJobsClient = Depends(get_ingest_client),
):
    with persistence_errors("queries.execute", "Failed to execute saved query", query_id=query_id):
        params, result = await svc.execute_query(query_id, client)
    return ExecuteResponse(params=params, result=result.to_dict())


# ─── Fetch logs ─────────────────────────────────────────

@router.get("/logs", response_model=Page[FetchLogWithQuery])
async def list_logs(
    status: Optional[Literal["success", "error", "partial"]] = None,
    saved_query_id: Optional[str] = Query(None, alias="savedQueryId"),
    pagination: Pagination = Depends(get_pagination),
    svc: QueryService = Depends(_svc),
):
    with persistence_errors("logs.list", "Failed to fetch logs"):
        return await svc.list_logs(pagination, status=status, saved_query_id=saved_query_id)
