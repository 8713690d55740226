"""Server-rendered admin pages: redirects and rendering."""

import pytest


@pytest.mark.asyncio
async def test_admin_page_redirects_to_login(client):
    r = await client.get("/admin")
    assert r.status_code == 307
    assert r.headers["location"] == "/login?next=/admin"


@pytest.mark.asyncio
async def test_admin_jobs_page_keeps_next_path(client):
    r = await client.get("/admin/jobs")
    assert r.headers["location"] == "/login?next=/admin/jobs"


@pytest.mark.asyncio
async def test_member_redirected_to_unauthorized(member_client):
    r = await member_client.get("/admin")
    assert r.status_code == 307
    assert r.headers["location"] == "/unauthorized"


@pytest.mark.asyncio
async def test_dashboard_renders_counts(admin_client, make_job):
    await make_job("Active")
    expired = await make_job("Expired")
    await admin_client.post("/api/admin/jobs/bulk-expire", json={"job_ids": [expired.id]})

    r = await admin_client.get("/admin")
    assert r.status_code == 200
    assert "text/html" in r.headers["content-type"]
    assert "Active jobs: 1" in r.text
    assert "Expired jobs: 1" in r.text


@pytest.mark.asyncio
async def test_jobs_page_escapes_titles(admin_client, make_job):
    await make_job("<script>alert(1)</script>")
    r = await admin_client.get("/admin/jobs")
    assert r.status_code == 200
    assert "<script>alert(1)</script>" not in r.text
    assert "&lt;script&gt;" in r.text


@pytest.mark.asyncio
async def test_login_page_sanitizes_next(client):
    r = await client.get("/login", params={"next": "//evil.example.com"})
    assert r.status_code == 200
    assert "evil.example.com" not in r.text
    assert "value='/admin'" in r.text


@pytest.mark.asyncio
async def test_unauthorized_page(client):
    r = await client.get("/unauthorized")
    assert r.status_code == 200
    assert "administrator access" in r.text


@pytest.mark.asyncio
async def test_jobs_page_bulk_actions_target_admin_endpoints(admin_client, make_job):
    job = await make_job()
    r = await admin_client.get("/admin/jobs")
    assert f'name="jobIds" value="{job.id}"' in r.text
    assert 'data-action="/api/admin/jobs/bulk-expire"' in r.text
    assert 'data-action="/api/admin/jobs/bulk-unexpire"' in r.text


@pytest.mark.asyncio
async def test_empty_jobs_page_shows_one_page(admin_client):
    r = await admin_client.get("/admin/jobs")
    assert r.status_code == 200
    assert "Jobs (0)" in r.text
    assert "Page 1 of 1" in r.text
