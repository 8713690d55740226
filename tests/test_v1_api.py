"""Public v1 API: open listings, token-protected lookups, boards and stats."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from jobboard.db.models import ApiToken, JobBoardJob, JobBoardOrganization
from jobboard.services.token_service import TokenService


# ═══════════════════════════════════════════════════════════
# Job listing and search (open)
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_jobs_envelope_and_order(client, make_job):
    older = await make_job("Older", posted_days_ago=3)
    newer = await make_job("Newer", posted_days_ago=1)

    r = await client.get("/api/v1/jobs")
    assert r.status_code == 200
    body = r.json()
    assert [j["id"] for j in body["data"]] == [newer.id, older.id]
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 2, "totalPages": 1}
    assert body["data"][0]["organization"]["name"] == "Acme"


@pytest.mark.asyncio
async def test_list_jobs_paginates(client, make_job):
    for i in range(5):
        await make_job(f"Job {i}", posted_days_ago=i)

    r = await client.get("/api/v1/jobs", params={"page": 2, "limit": 2})
    body = r.json()
    assert [j["title"] for j in body["data"]] == ["Job 2", "Job 3"]
    assert body["pagination"]["totalPages"] == 3


@pytest.mark.asyncio
async def test_list_jobs_malformed_pagination_uses_defaults(client, make_job):
    await make_job()
    r = await client.get("/api/v1/jobs", params={"page": "x", "limit": "y"})
    assert r.status_code == 200
    assert r.json()["pagination"]["limit"] == 20


@pytest.mark.asyncio
async def test_list_jobs_filters(client, make_org, make_job):
    org = await make_org("Globex")
    remote = await make_job(
        "Remote Python Dev", organization=org, is_remote=True,
        cities=["Berlin"], countries=["Germany"], employment_type=["FULL_TIME"],
    )
    await make_job("Onsite Designer", cities=["Paris"], employment_type=["CONTRACTOR"])

    async def ids(**params):
        r = await client.get("/api/v1/jobs", params=params)
        return [j["id"] for j in r.json()["data"]]

    assert await ids(remote="true") == [remote.id]
    assert await ids(location="berlin") == [remote.id]
    assert await ids(location="Germany") == [remote.id]
    assert await ids(employmentType="FULL_TIME") == [remote.id]
    assert await ids(search="python") == [remote.id]
    assert await ids(organizationId=org.id) == [remote.id]


@pytest.mark.asyncio
async def test_list_jobs_by_board_slug(client, db_session, make_job, make_board):
    on_board = await make_job("On board")
    await make_job("Elsewhere")
    board = await make_board()
    db_session.add(JobBoardJob(job_board_id=board.id, job_id=on_board.id))
    await db_session.commit()

    r = await client.get("/api/v1/jobs", params={"boardSlug": board.slug})
    assert [j["id"] for j in r.json()["data"]] == [on_board.id]


@pytest.mark.asyncio
async def test_search_requires_query(client):
    r = await client.get("/api/v1/jobs/search")
    assert r.status_code == 400
    assert r.json() == {"error": "Search query is required"}


@pytest.mark.asyncio
async def test_search_matches_company_name(client, make_org, make_job):
    org = await make_org("Initech")
    job = await make_job("Analyst", organization=org)
    await make_job("Something else")

    r = await client.get("/api/v1/jobs/search", params={"q": "initech"})
    assert [j["id"] for j in r.json()["data"]] == [job.id]


# ═══════════════════════════════════════════════════════════
# Bearer token protected routes
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_get_job_requires_token(client, make_job):
    job = await make_job()
    r = await client.get(f"/api/v1/jobs/{job.id}")
    assert r.status_code == 401
    assert r.json() == {"error": "No authorization header"}
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_get_job_rejects_non_bearer(client, make_job):
    job = await make_job()
    r = await client.get(f"/api/v1/jobs/{job.id}", headers={"Authorization": "Basic abc"})
    assert r.json() == {"error": "Invalid authorization format"}


@pytest.mark.asyncio
async def test_get_job_rejects_unknown_token(client, make_job):
    job = await make_job()
    r = await client.get(
        f"/api/v1/jobs/{job.id}", headers={"Authorization": "Bearer rmj_unknown"}
    )
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid token"}


@pytest.mark.asyncio
async def test_token_checked_before_lookup(client):
    """An unknown id still answers 401, not 404, without a token."""
    r = await client.get("/api/v1/jobs/does-not-exist")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_rejected(client, db_session, admin_user, make_job):
    job = await make_job()
    token, raw = await TokenService(db_session).create_token(admin_user.id, "old", 1)
    token.expires_at = datetime.now(timezone.utc) - timedelta(days=1)
    await db_session.commit()

    r = await client.get(f"/api/v1/jobs/{job.id}", headers={"Authorization": f"Bearer {raw}"})
    assert r.status_code == 401
    assert r.json() == {"error": "Token expired"}


@pytest.mark.asyncio
async def test_get_job_with_token(token_client, db_session, make_job):
    job = await make_job(description_text="Build things")
    r = await token_client.get(f"/api/v1/jobs/{job.id}")
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == job.id
    assert body["description_text"] == "Build things"
    assert body["organization"]["name"] == "Acme"

    last_used = (await db_session.execute(select(ApiToken.last_used_at))).scalar_one()
    assert last_used is not None


@pytest.mark.asyncio
async def test_get_unknown_job_with_token(token_client):
    r = await token_client.get("/api/v1/jobs/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Job not found"}


# ═══════════════════════════════════════════════════════════
# Organizations
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_organizations_with_counts(client, make_org, make_job):
    acme = await make_org("Acme")
    await make_org("Zeta")
    await make_job("A", organization=acme)
    await make_job("B", organization=acme)

    r = await client.get("/api/v1/organizations")
    data = r.json()["data"]
    assert [(o["name"], o["job_count"]) for o in data] == [("Acme", 2), ("Zeta", 0)]


@pytest.mark.asyncio
async def test_list_organizations_search_and_board(client, db_session, make_org, make_board):
    acme = await make_org("Acme")
    await make_org("Globex")
    board = await make_board()
    db_session.add(JobBoardOrganization(job_board_id=board.id, organization_id=acme.id))
    await db_session.commit()

    r = await client.get("/api/v1/organizations", params={"search": "glob"})
    assert [o["name"] for o in r.json()["data"]] == ["Globex"]

    r = await client.get("/api/v1/organizations", params={"boardSlug": board.slug})
    assert [o["name"] for o in r.json()["data"]] == ["Acme"]


@pytest.mark.asyncio
async def test_get_organization(token_client, make_org, make_job):
    org = await make_org("Acme", linkedin_industry="Software")
    await make_job(organization=org)

    r = await token_client.get(f"/api/v1/organizations/{org.id}")
    assert r.status_code == 200
    assert r.json()["job_count"] == 1
    assert r.json()["linkedin_industry"] == "Software"


@pytest.mark.asyncio
async def test_get_organization_not_found(token_client):
    r = await token_client.get("/api/v1/organizations/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Organization not found"}


@pytest.mark.asyncio
async def test_organization_jobs_only_active(client, admin_client, make_org, make_job):
    org = await make_org()
    live = await make_job("Live", organization=org)
    dead = await make_job("Dead", organization=org)
    await admin_client.post("/api/admin/jobs/bulk-expire", json={"job_ids": [dead.id]})

    r = await client.get(f"/api/v1/organizations/{org.id}/jobs")
    assert [j["id"] for j in r.json()["data"]] == [live.id]


# ═══════════════════════════════════════════════════════════
# Boards and stats
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_boards_active_only_by_default(token_client, make_board):
    await make_board("beta", "Beta")
    await make_board("alpha", "Alpha")
    await make_board("off", "Off", is_active=False)

    r = await token_client.get("/api/v1/boards")
    assert [b["slug"] for b in r.json()["data"]] == ["alpha", "beta"]

    r = await token_client.get("/api/v1/boards", params={"activeOnly": "false"})
    assert r.json()["pagination"]["total"] == 3


@pytest.mark.asyncio
async def test_boards_require_token(client):
    r = await client.get("/api/v1/boards")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_stats(token_client, make_org, make_job):
    acme = await make_org("Acme", logo="https://acme.example/logo.png")
    await make_job("A", organization=acme, is_remote=True, cities=["Berlin"], employment_type=["FULL_TIME"])
    await make_job("B", organization=acme, cities=["Berlin", "Paris"], employment_type=["FULL_TIME"])
    await make_job("Old", posted_days_ago=30, cities=["Paris"], employment_type=["PART_TIME"])

    r = await token_client.get("/api/v1/stats")
    assert r.status_code == 200
    stats = r.json()
    assert stats["total_jobs"] == 3
    assert stats["total_organizations"] == 2
    assert stats["remote_jobs"] == 1
    assert stats["recent_jobs"] == 2
    assert {"city": "Berlin", "count": 2} in stats["top_locations"]
    assert {"city": "Paris", "count": 2} in stats["top_locations"]
    assert stats["employment_types"][0] == {"type": "FULL_TIME", "count": 2}
    assert stats["top_organizations"][0] == {
        "id": acme.id,
        "name": "Acme",
        "logo": "https://acme.example/logo.png",
        "job_count": 2,
    }
    assert "last_updated" in stats


@pytest.mark.asyncio
async def test_organization_jobs_newest_first_with_total_pages(client, make_org, make_job):
    org = await make_org()
    for days in (5, 1, 3):
        await make_job(f"Posted {days}d ago", organization=org, posted_days_ago=days)

    r = await client.get(f"/api/v1/organizations/{org.id}/jobs", params={"limit": 2})
    body = r.json()
    assert [j["title"] for j in body["data"]] == ["Posted 1d ago", "Posted 3d ago"]
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["totalPages"] == 2


@pytest.mark.asyncio
async def test_v1_list_limit_is_capped(client, make_job):
    await make_job()
    r = await client.get("/api/v1/jobs", params={"limit": 1000, "page": 0})
    assert r.json()["pagination"]["limit"] == 100
    assert r.json()["pagination"]["page"] == 1


@pytest.mark.asyncio
async def test_huge_page_returns_empty_page(client, make_job):
    await make_job()
    r = await client.get("/api/v1/jobs", params={"page": "99999999999999999999"})
    assert r.status_code == 200
    assert r.json()["data"] == []
    assert r.json()["pagination"]["total"] == 1
