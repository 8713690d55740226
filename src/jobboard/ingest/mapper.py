"""Map Fantastic Jobs API records onto Organization and Job columns."""

import re
from datetime import datetime, timezone
from typing import Any, Optional

from jobboard.db.models import utcnow


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from the API; naive values are UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def organization_key(record: dict[str, Any]) -> str:
    """Stable identity for the hiring company behind a record.

    LinkedIn slug is the most reliable, then the derived domain; the name
    is a last resort.
    """
    if record.get("company_linkedin_slug"):
        return f"linkedin:{record['company_linkedin_slug']}"
    if record.get("domain_derived"):
        return f"domain:{record['domain_derived']}"
    slug = re.sub(r"\s+", "-", (record.get("company_name") or "").lower())
    return f"name:{slug}"


def organization_fields(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": record.get("company_name") or "Unknown",
        "url": record.get("company_url") or None,
        "logo": record.get("company_logo") or None,
        "domain": record.get("domain_derived") or None,
        "linkedin_url": record.get("company_linkedin_url") or None,
        "linkedin_slug": record.get("company_linkedin_slug") or None,
        "linkedin_employees": record.get("company_employees") or None,
        "linkedin_size": record.get("company_size") or None,
        "linkedin_industry": record.get("company_industry") or None,
        "linkedin_type": record.get("company_type") or None,
        "linkedin_founded_date": record.get("company_founded_date") or None,
        "linkedin_followers": record.get("company_followers") or None,
        "linkedin_headquarters": record.get("company_headquarters") or None,
        "linkedin_specialties": record.get("company_specialties") or [],
        "linkedin_locations": record.get("company_locations") or [],
        "linkedin_description": record.get("company_description") or None,
    }


# Organization columns that a later fetch may fill in when still empty.
ENRICHABLE_ORG_FIELDS = {
    "logo": "company_logo",
    "linkedin_url": "company_linkedin_url",
    "linkedin_employees": "company_employees",
    "linkedin_followers": "company_followers",
    "linkedin_description": "company_description",
}


def job_update_fields(record: dict[str, Any]) -> dict[str, Any]:
    """Columns refreshed on every fetch of an already-known job."""
    return {
        "title": record.get("title") or "",
        "url": record.get("url") or "",
        "description_text": record.get("description"),
        "date_valid_through": parse_datetime(record.get("date_valid_through")),
        "locations_raw": record.get("locations_raw") or None,
        "cities": record.get("cities") or [],
        "counties": record.get("counties") or [],
        "regions": record.get("regions") or [],
        "countries": record.get("countries") or [],
        "locations_full": record.get("locations_full") or [],
        "timezones": record.get("timezones") or [],
        "latitude": record.get("latitude") or [],
        "longitude": record.get("longitude") or [],
        "is_remote": bool(record.get("remote")),
        "employment_type": record.get("employment_types") or [],
        "salary_raw": record.get("salary_raw") or None,
        "last_fetched_at": utcnow(),
    }


def job_fields(record: dict[str, Any], organization_id: str) -> dict[str, Any]:
    """Columns for a newly ingested job."""
    now = utcnow()
    fields = job_update_fields(record)
    fields.update(
        external_id=str(record["id"]),
        organization_id=organization_id,
        date_posted=parse_datetime(record.get("date_posted")) or now,
        date_created=parse_datetime(record.get("date_created")) or now,
        source_type=record.get("source_type") or None,
        source=record.get("source") or None,
        source_domain=record.get("source_domain") or None,
    )
    return fields
