"""Run an ingestion query and persist what comes back.

Each record is processed in its own transaction: an organization is found
(LinkedIn slug, then domain, then name) or created, and the job is upserted
by its external id. A record that fails is rolled back on its own and marks
the run `partial`; the rest still land. Every run, including a failed one,
leaves a FetchLog row behind.
"""

import time
from dataclasses import asdict, dataclass, replace
from typing import Any, Optional

import httpx
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.db.models import FetchLog, Job, Organization, SavedQuery, utcnow
from jobboard.ingest.client import FantasticJobsClient, IngestError
from jobboard.ingest.mapper import (
    ENRICHABLE_ORG_FIELDS,
    job_fields,
    job_update_fields,
    organization_fields,
    organization_key,
)
from jobboard.ingest.query_builder import QueryBuilder

logger = structlog.get_logger()

PREVIEW_SIZE = 5


@dataclass
class FetchResult:
    status: str = "success"  # success, error, partial
    jobs_fetched: int = 0
    jobs_created: int = 0
    jobs_updated: int = 0
    orgs_created: int = 0
    orgs_updated: int = 0
    error_message: Optional[str] = None
    duration: int = 0  # ms

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class JobsFetcher:
    """Fetches from the API and upserts organizations and jobs."""

    def __init__(self, db: AsyncSession, client: FantasticJobsClient):
        self.db = db
        self.client = client
        self._org_cache: dict[str, str] = {}

    async def preview(self, builder: QueryBuilder) -> list[dict[str, Any]]:
        """First few matches for a query. Nothing is written."""
        params = builder.pagination(PREVIEW_SIZE, 0).build()
        records = await self.client.search_jobs(params)
        return records[:PREVIEW_SIZE] if isinstance(records, list) else []

    async def fetch_and_save(
        self, builder: QueryBuilder, saved_query_id: Optional[str] = None
    ) -> FetchResult:
        started = time.monotonic()
        result = FetchResult()
        params = builder.build()
        log = logger.bind(saved_query_id=saved_query_id)

        try:
            records = await self.client.search_jobs(params)
            if not isinstance(records, list):
                raise IngestError("Invalid API response format")
        except (httpx.HTTPError, IngestError) as e:
            result.status = "error"
            result.error_message = str(e) or type(e).__name__
            result.duration = int((time.monotonic() - started) * 1000)
            await self._write_log(params, result, saved_query_id)
            log.error("ingest.fetch_failed", error=result.error_message)
            raise

        result.jobs_fetched = len(records)
        for record in records:
            before = replace(result)
            try:
                await self._process(record, result)
                await self.db.commit()
            except Exception as e:
                await self.db.rollback()
                # Counters and cached org ids may refer to rolled-back rows.
                result = replace(before, status="partial")
                self._org_cache.clear()
                log.warning(
                    "ingest.record_failed",
                    external_id=record.get("id") if isinstance(record, dict) else None,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        result.duration = int((time.monotonic() - started) * 1000)
        await self._write_log(params, result, saved_query_id)
        if saved_query_id:
            saved = await self.db.get(SavedQuery, saved_query_id)
            if saved is not None:
                saved.last_run = utcnow()
                saved.result_count = result.jobs_fetched
                await self.db.commit()

        log.info("ingest.fetch_completed", **result.to_dict())
        return result

    async def _process(self, record: dict[str, Any], result: FetchResult) -> None:
        organization_id = await self._get_or_create_organization(record, result)

        external_id = str(record["id"])
        existing = (
            await self.db.execute(select(Job).where(Job.external_id == external_id))
        ).scalars().first()
        if existing is not None:
            for key, value in job_update_fields(record).items():
                setattr(existing, key, value)
            result.jobs_updated += 1
        else:
            self.db.add(Job(**job_fields(record, organization_id)))
            result.jobs_created += 1
        await self.db.flush()

    async def _find_organization(self, record: dict[str, Any]) -> Optional[Organization]:
        lookups = (
            (Organization.linkedin_slug, record.get("company_linkedin_slug")),
            (Organization.domain, record.get("domain_derived")),
        )
        for column, value in lookups:
            if value:
                found = (
                    await self.db.execute(select(Organization).where(column == value))
                ).scalars().first()
                if found is not None:
                    return found
        if record.get("company_linkedin_slug") or record.get("domain_derived"):
            return None
        return (
            await self.db.execute(
                select(Organization).where(Organization.name == record.get("company_name"))
            )
        ).scalars().first()

    async def _get_or_create_organization(
        self, record: dict[str, Any], result: FetchResult
    ) -> str:
        key = organization_key(record)
        if key in self._org_cache:
            return self._org_cache[key]

        organization = await self._find_organization(record)
        if organization is None:
            organization = Organization(**organization_fields(record))
            self.db.add(organization)
            await self.db.flush()
            result.orgs_created += 1
        else:
            changed = False
            for column, api_field in ENRICHABLE_ORG_FIELDS.items():
                if not getattr(organization, column) and record.get(api_field):
                    setattr(organization, column, record[api_field])
                    changed = True
            if changed:
                await self.db.flush()
                result.orgs_updated += 1

        self._org_cache[key] = organization.id
        return organization.id

    async def _write_log(
        self, params: dict[str, Any], result: FetchResult, saved_query_id: Optional[str]
    ) -> None:
        self.db.add(
            FetchLog(
                status=result.status,
                jobs_fetched=result.jobs_fetched,
                jobs_created=result.jobs_created,
                jobs_updated=result.jobs_updated,
                orgs_created=result.orgs_created,
                orgs_updated=result.orgs_updated,
                parameters=params,
                saved_query_id=saved_query_id,
                error_message=result.error_message,
                duration=result.duration,
            )
        )
        await self.db.commit()
