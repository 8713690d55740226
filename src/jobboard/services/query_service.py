"""Saved queries and fetch logs.

A saved query is a named parameter set for the ingestion API; executing it
runs the fetcher and links the resulting FetchLog back to the query.
"""

from typing import Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jobboard.db.models import FetchLog, SavedQuery
from jobboard.errors import NotFound
from jobboard.ingest.client import FantasticJobsClient
from jobboard.ingest.fetcher import FetchResult, JobsFetcher
from jobboard.ingest.query_builder import MAX_LIMIT, QueryBuilder
from jobboard.pagination import Pagination, paginate
from jobboard.schemas.query import SavedQueryRead

logger = structlog.get_logger()

RECENT_LOGS = 10


class QueryService:

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Saved queries ──────────────────────────────────

    async def list_queries(self) -> list[SavedQuery]:
        result = await self.db.execute(
            select(SavedQuery).order_by(SavedQuery.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_query(self, query_id: str) -> SavedQuery:
        query = await self.db.get(SavedQuery, query_id)
        if query is None:
            raise NotFound("Saved query not found")
        return query

    async def get_query_with_logs(self, query_id: str) -> dict:
        """Saved query plus its most recent fetch logs."""
        query = await self.get_query(query_id)
        logs = await self.db.execute(
            select(FetchLog)
            .where(FetchLog.saved_query_id == query_id)
            .order_by(FetchLog.created_at.desc())
            .limit(RECENT_LOGS)
        )
        data = SavedQueryRead.model_validate(query).model_dump()
        data["fetch_logs"] = list(logs.scalars().all())
        return data

    async def create_query(
        self,
        name: str,
        parameters: dict,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> SavedQuery:
        query = SavedQuery(
            name=name,
            description=description,
            parameters=parameters,
            is_active=is_active,
        )
        self.db.add(query)
        await self.db.commit()
        logger.info("queries.created", query_id=query.id, name=name)
        return query

    async def update_query(self, query_id: str, **fields) -> SavedQuery:
        query = await self.get_query(query_id)
        for key, value in fields.items():
            setattr(query, key, value)
        await self.db.commit()
        logger.info("queries.updated", query_id=query_id, fields=sorted(fields))
        return query

    async def delete_query(self, query_id: str) -> None:
        await self.get_query(query_id)
        await self.db.execute(delete(FetchLog).where(FetchLog.saved_query_id == query_id))
        await self.db.execute(delete(SavedQuery).where(SavedQuery.id == query_id))
        await self.db.commit()
        logger.info("queries.deleted", query_id=query_id)

    async def execute_query(
        self, query_id: str, client: FantasticJobsClient
    ) -> tuple[dict, FetchResult]:
        """Run a saved query. Returns (params_sent, result)."""
        query = await self.get_query(query_id)
        builder = QueryBuilder.from_params(query.parameters or {})
        if builder.get_param("limit") is None:
            builder.pagination(MAX_LIMIT, int(builder.get_param("offset") or 0))

        result = await JobsFetcher(self.db, client).fetch_and_save(builder, query_id)
        return builder.build(), result

    # ─── Fetch logs ─────────────────────────────────────

    async def list_logs(
        self,
        pagination: Pagination,
        status: Optional[str] = None,
        saved_query_id: Optional[str] = None,
    ) -> dict:
        stmt = select(FetchLog)
        if status:
            stmt = stmt.where(FetchLog.status == status)
        if saved_query_id:
            stmt = stmt.where(FetchLog.saved_query_id == saved_query_id)

        total = (
            await self.db.execute(select(func.count()).select_from(stmt.subquery()))
        ).scalar_one()
        rows = await self.db.execute(
            stmt.options(selectinload(FetchLog.saved_query))
            .order_by(FetchLog.created_at.desc(), FetchLog.id)
            .offset(pagination.skip)
            .limit(pagination.limit)
        )
        return paginate(rows.scalars().all(), total, pagination)
