"""Admin ingestion routes — preview a query, or run it and persist the results."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.db.engine import get_db
from jobboard.db.models import SavedQuery
from jobboard.errors import NotFound, persistence_errors
from jobboard.ingest.client import FantasticJobsClient, get_ingest_client
from jobboard.ingest.fetcher import JobsFetcher
from jobboard.ingest.query_builder import QueryBuilder
from jobboard.schemas.fetch import ExecuteRequest, ExecuteResponse, FetchParams, PreviewResponse

router = APIRouter(prefix="/admin/fetch")


@router.post("/preview", response_model=PreviewResponse)
async def preview(
    body: FetchParams,
    db: AsyncSession = Depends(get_db),
    client: FantasticJobsClient = Depends(get_ingest_client),
):
    """Up to 5 matching jobs straight from the API; nothing is stored."""
    builder = QueryBuilder.from_params(body.model_dump(exclude_none=True))
    with persistence_errors("fetch.preview", "Failed to preview fetch"):
        records = await JobsFetcher(db, client).preview(builder)
    return PreviewResponse(count=len(records), params=builder.build(), data=records)


@router.post("/execute", response_model=ExecuteResponse)
async def execute(
    body: ExecuteRequest,
    db: AsyncSession = Depends(get_db),
    client: FantasticJobsClient = Depends(get_ingest_client),
):
    params = body.model_dump(exclude_none=True)
    saved_query_id = params.pop("saved_query_id", None)
    builder = QueryBuilder.from_params(params)

    with persistence_errors("fetch.execute", "Failed to execute fetch", saved_query_id=saved_query_id):
        if saved_query_id and await db.get(SavedQuery, saved_query_id) is None:
            raise NotFound("Saved query not found")
        result = await JobsFetcher(db, client).fetch_and_save(builder, saved_query_id)

    return ExecuteResponse(params=builder.build(), result=result.to_dict())
