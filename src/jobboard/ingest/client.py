"""HTTP client for the Fantastic Jobs API.

Timeouts, connection errors and 5xx responses are retried with exponential
backoff (2s, 4s, 8s). Anything else, including 4xx, is raised immediately
as an httpx error for the caller to log.
"""

import asyncio
from typing import Any, AsyncIterator, Optional

import httpx
import structlog

from jobboard.config import settings
from jobboard.errors import InternalError

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 30.0
MAX_RETRIES = 3


class IngestError(InternalError):
    """Ingestion could not run or the API answered with something unusable."""


class IngestConfigError(IngestError):
    """RapidAPI credentials are not configured."""


class FantasticJobsClient:
    """Thin async wrapper over the RapidAPI endpoints.

    Use as an async context manager so the connection pool is closed:

        async with FantasticJobsClient() as client:
            jobs = await client.search_jobs({"limit": "10"})
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        host: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        base_delay: float = 1.0,
    ):
        api_key = api_key or settings.rapidapi_key
        host = host or settings.rapidapi_host
        if not api_key:
            raise IngestConfigError("JOBBOARD_RAPIDAPI_KEY is required")
        if not host:
            raise IngestConfigError("JOBBOARD_RAPIDAPI_HOST is required")

        self.max_retries = max_retries
        self.base_delay = base_delay
        self._client = httpx.AsyncClient(
            base_url=f"https://{host}",
            headers={
                "X-RapidAPI-Key": api_key,
                "X-RapidAPI-Host": host,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "FantasticJobsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        attempt = 0
        while True:
            try:
                response = await self._client.get(path, params=params)
                response.raise_for_status()
                return response.json()
            except ValueError as e:
                logger.error("ingest.invalid_response", path=path, error=str(e))
                raise IngestError("Invalid API response format") from e
            except (httpx.TimeoutException, httpx.TransportError, httpx.HTTPStatusError) as e:
                retryable = not isinstance(e, httpx.HTTPStatusError) or (
                    e.response.status_code >= 500
                )
                if not retryable or attempt >= self.max_retries:
                    logger.error(
                        "ingest.request_failed",
                        path=path,
                        attempts=attempt + 1,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    raise
                attempt += 1
                delay = self.base_delay * (2 ** attempt)
                logger.warning("ingest.retrying", path=path, attempt=attempt, delay=delay)
                await asyncio.sleep(delay)

    async def search_jobs(self, params: dict[str, Any]) -> Any:
        return await self._get("/jobs/search", params=params)

    async def get_job(self, job_id: str) -> Any:
        return await self._get(f"/jobs/{job_id}")


async def get_ingest_client() -> AsyncIterator[FantasticJobsClient]:
    """FastAPI dependency — a configured client, closed after the request."""
    async with FantasticJobsClient() as client:
        yield client
