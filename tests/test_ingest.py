"""Ingestion: query builder, record mapping, HTTP client retries and the fetcher."""

from datetime import date, datetime, timezone

import httpx
import pytest
from sqlalchemy import func, select

from jobboard.db.models import FetchLog, Job, Organization, SavedQuery
from jobboard.ingest.client import FantasticJobsClient, IngestConfigError, IngestError
from jobboard.ingest.fetcher import JobsFetcher
from jobboard.ingest.mapper import job_fields, organization_key, parse_datetime
from jobboard.ingest.query_builder import QueryBuilder


def _client(handler, **kwargs) -> FantasticJobsClient:
    return FantasticJobsClient(
        api_key="test-key",
        host="jobs.example.com",
        transport=httpx.MockTransport(handler),
        base_delay=0,
        **kwargs,
    )


def _record(external_id="ext-1", **fields) -> dict:
    record = {
        "id": external_id,
        "title": "Data Engineer",
        "url": f"https://jobs.example.com/{external_id}",
        "date_posted": "2026-10-01T10:00:00Z",
        "company_name": "Acme",
        "company_linkedin_slug": "acme",
        "domain_derived": "acme.com",
        "cities": ["Berlin"],
        "countries": ["Germany"],
        "remote": True,
        "employment_types": ["FULL_TIME"],
    }
    record.update(fields)
    return record


# ═══════════════════════════════════════════════════════════
# Query builder
# ═══════════════════════════════════════════════════════════


def test_pagination_is_clamped():
    assert QueryBuilder().pagination(5, -3).build() == {"limit": 10, "offset": 0}
    assert QueryBuilder().pagination(500, 20).build() == {"limit": 100, "offset": 20}


def test_list_filters_are_joined():
    params = (
        QueryBuilder()
        .location_filter(["Berlin", " Munich ", ""])
        .organization_filter(["Acme", "Globex"])
        .build()
    )
    assert params["location_filter"] == "Berlin OR Munich"
    assert params["organization_filter"] == "Acme,Globex"


def test_booleans_render_as_strings_and_opt_in_flags_are_omitted():
    params = (
        QueryBuilder()
        .remote(False)
        .include_ai(False)
        .include_linkedin(True)
        .ai_has_salary(False)
        .build()
    )
    assert params == {"remote": "false", "include_li": "true"}


def test_blank_text_filters_are_ignored():
    assert QueryBuilder().title_filter("   ").description_filter("").build() == {}


def test_advanced_title_replaces_simple_title():
    params = QueryBuilder().title_filter("engineer").advanced_title_filter("engineer & python").build()
    assert "title_filter" not in params
    assert params["advanced_title_filter"] == "engineer & python"


def test_date_filter_accepts_dates():
    assert QueryBuilder().date_filter(date(2026, 10, 1)).build() == {"date_filter": "2026-10-01"}


def test_employee_range():
    params = QueryBuilder().li_organization_employees_range(10, 500).build()
    assert params == {"li_organization_employees_gte": 10, "li_organization_employees_lte": 500}


def test_from_params_joins_lists_and_clamps():
    builder = QueryBuilder.from_params(
        {"location_filter": ["Berlin", "Paris"], "source": ["linkedin"], "limit": 3, "remote": True}
    )
    assert builder.build() == {
        "location_filter": "Berlin OR Paris",
        "source": "linkedin",
        "limit": 10,
        "offset": 0,
        "remote": "true",
    }


def test_raw_access_helpers():
    builder = QueryBuilder().set_param("title_filter", "dev")
    assert builder.has_params()
    assert builder.get_param("title_filter") == "dev"
    assert builder.to_json() == {"title_filter": "dev"}
    assert not builder.clear().has_params()


# ═══════════════════════════════════════════════════════════
# Mapping
# ═══════════════════════════════════════════════════════════


def test_parse_datetime():
    assert parse_datetime("2026-10-01T10:00:00Z") == datetime(2026, 10, 1, 10, tzinfo=timezone.utc)
    assert parse_datetime("2026-10-01T10:00:00").tzinfo == timezone.utc
    assert parse_datetime(None) is None


def test_organization_key_precedence():
    assert organization_key(_record()) == "linkedin:acme"
    assert organization_key(_record(company_linkedin_slug=None)) == "domain:acme.com"
    assert (
        organization_key({"company_name": "Big  Co"})
        == "name:big-co"
    )


def test_job_fields_maps_record():
    fields = job_fields(_record(), "org-1")
    assert fields["external_id"] == "ext-1"
    assert fields["organization_id"] == "org-1"
    assert fields["is_remote"] is True
    assert fields["employment_type"] == ["FULL_TIME"]
    assert fields["date_posted"] == datetime(2026, 10, 1, 10, tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════════
# HTTP client
# ═══════════════════════════════════════════════════════════


def test_client_requires_credentials(monkeypatch):
    from jobboard.config import settings

    monkeypatch.setattr(settings, "rapidapi_key", "")
    with pytest.raises(IngestConfigError):
        FantasticJobsClient(host="jobs.example.com")


@pytest.mark.asyncio
async def test_client_sends_rapidapi_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["key"] = request.headers["X-RapidAPI-Key"]
        seen["host"] = request.headers["X-RapidAPI-Host"]
        seen["path"] = request.url.path
        seen["limit"] = request.url.params["limit"]
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        assert await client.search_jobs({"limit": "10"}) == []
    assert seen == {"key": "test-key", "host": "jobs.example.com", "path": "/jobs/search", "limit": "10"}


@pytest.mark.asyncio
async def test_client_retries_server_errors():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json=[{"id": "1"}])

    async with _client(handler, max_retries=3) as client:
        assert await client.search_jobs({}) == [{"id": "1"}]
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_client_gives_up_after_max_retries():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500)

    async with _client(handler, max_retries=2) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.search_jobs({})
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_client_does_not_retry_client_errors():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(403)

    async with _client(handler) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.search_jobs({})
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_client_retries_transport_errors():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        assert await client.search_jobs({}) == []
    assert len(calls) == 2


# ═══════════════════════════════════════════════════════════
# Fetcher
# ═══════════════════════════════════════════════════════════


def _serving(records):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=records)
    return handler


async def _count(db_session, model) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_fetch_creates_jobs_and_organizations(db_session):
    records = [_record("ext-1"), _record("ext-2", title="ML Engineer")]
    async with _client(_serving(records)) as client:
        result = await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder().pagination())

    assert result.status == "success"
    assert (result.jobs_fetched, result.jobs_created, result.jobs_updated) == (2, 2, 0)
    assert result.orgs_created == 1
    assert await _count(db_session, Job) == 2
    assert await _count(db_session, Organization) == 1

    log = (await db_session.execute(select(FetchLog))).scalars().one()
    assert log.status == "success"
    assert log.jobs_created == 2
    assert log.parameters == {"limit": 100, "offset": 0}


@pytest.mark.asyncio
async def test_refetch_updates_and_enriches(db_session):
    async with _client(_serving([_record("ext-1")])) as client:
        await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder())

    updated = _record("ext-1", title="Senior Data Engineer", company_logo="https://acme.com/logo.png")
    async with _client(_serving([updated])) as client:
        result = await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder())

    assert (result.jobs_created, result.jobs_updated) == (0, 1)
    assert (result.orgs_created, result.orgs_updated) == (0, 1)
    title = (await db_session.execute(select(Job.title))).scalar_one()
    logo = (await db_session.execute(select(Organization.logo))).scalar_one()
    assert title == "Senior Data Engineer"
    assert logo == "https://acme.com/logo.png"


@pytest.mark.asyncio
async def test_organization_matched_by_domain(db_session):
    first = _record("ext-1", company_linkedin_slug=None)
    second = _record("ext-2", company_linkedin_slug=None, company_name="ACME Corporation")
    async with _client(_serving([first, second])) as client:
        result = await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder())
    assert result.orgs_created == 1
    assert await _count(db_session, Organization) == 1


@pytest.mark.asyncio
async def test_bad_record_makes_run_partial(db_session):
    broken = {"title": "No id", "company_name": "Nobody Ltd"}
    records = [_record("ext-1"), broken, _record("ext-2")]
    async with _client(_serving(records)) as client:
        result = await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder())

    assert result.status == "partial"
    assert result.jobs_fetched == 3
    assert result.jobs_created == 2
    assert result.orgs_created == 1
    names = (await db_session.execute(select(Organization.name))).scalars().all()
    assert names == ["Acme"]
    log = (await db_session.execute(select(FetchLog.status))).scalar_one()
    assert log == "partial"


@pytest.mark.asyncio
async def test_api_failure_logs_error_and_raises(db_session):
    def handler(request):
        return httpx.Response(500)

    async with _client(handler, max_retries=0) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder())

    log = (await db_session.execute(select(FetchLog))).scalars().one()
    assert log.status == "error"
    assert log.error_message
    assert await _count(db_session, Job) == 0


@pytest.mark.asyncio
async def test_non_list_response_is_an_error(db_session):
    async with _client(_serving({"message": "quota exceeded"})) as client:
        with pytest.raises(IngestError, match="Invalid API response format"):
            await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder())
    log = (await db_session.execute(select(FetchLog.error_message))).scalar_one()
    assert log == "Invalid API response format"


@pytest.mark.asyncio
async def test_html_body_is_an_error_and_still_logged(db_session):
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    async with _client(handler) as client:
        with pytest.raises(IngestError, match="Invalid API response format"):
            await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder())

    log = (await db_session.execute(select(FetchLog))).scalars().one()
    assert log.status == "error"
    assert log.error_message == "Invalid API response format"


@pytest.mark.asyncio
async def test_client_rejects_non_json_body():
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    async with _client(handler) as client:
        with pytest.raises(IngestError):
            await client.search_jobs({})


@pytest.mark.asyncio
async def test_non_dict_record_makes_run_partial(db_session):
    async with _client(_serving([_record("ext-1"), "garbage", _record("ext-2")])) as client:
        result = await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder())

    assert result.status == "partial"
    assert result.jobs_created == 2
    assert await _count(db_session, Job) == 2
    log = (await db_session.execute(select(FetchLog))).scalars().one()
    assert log.status == "partial"
    assert log.jobs_fetched == 3


@pytest.mark.asyncio
async def test_saved_query_run_is_recorded(db_session):
    query = SavedQuery(name="Berlin data", parameters={"location_filter": "Berlin"})
    db_session.add(query)
    await db_session.commit()
    query_id = query.id

    async with _client(_serving([_record("ext-1")])) as client:
        await JobsFetcher(db_session, client).fetch_and_save(QueryBuilder(), query_id)

    last_run, result_count = (
        await db_session.execute(
            select(SavedQuery.last_run, SavedQuery.result_count).where(SavedQuery.id == query_id)
        )
    ).one()
    assert last_run is not None
    assert result_count == 1
    log_query = (await db_session.execute(select(FetchLog.saved_query_id))).scalar_one()
    assert log_query == query_id


@pytest.mark.asyncio
async def test_preview_returns_at_most_five(db_session):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json=[_record(f"ext-{i}") for i in range(8)])

    async with _client(handler) as client:
        records = await JobsFetcher(db_session, client).preview(QueryBuilder().title_filter("data"))

    assert len(records) == 5
    assert seen["limit"] == "10"
    assert seen["title_filter"] == "data"
    assert await _count(db_session, Job) == 0
