"""SQLAlchemy ORM models — single source of truth for the database schema.

Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations are generated against this module.

Key choices:
- String UUID primary keys (opaque ids in URLs and API payloads)
- Portable JSON columns for list-valued fields (cities, employment types...)
  so the same schema runs on PostgreSQL and SQLite
- Python-side timestamp defaults, so freshly flushed rows are readable
  without a refresh round trip
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# ══════════════════════════════════════════════════════════════
# Accounts: users and API tokens
# ══════════════════════════════════════════════════════════════


class User(Base):
    """A person who can sign in. Admins manage jobs, boards and tokens."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    api_tokens: Mapped[list["ApiToken"]] = relationship(back_populates="user")


class ApiToken(Base):
    """Bearer credential for the public v1 API.

    Only the SHA-256 of the token is stored; the raw value is shown once
    at creation time. `prefix` lets admins recognise a token in listings.
    """

    __tablename__ = "api_tokens"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    prefix: Mapped[str] = mapped_column(String(16), nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    last_used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    user: Mapped["User"] = relationship(back_populates="api_tokens")


# ══════════════════════════════════════════════════════════════
# Listings: organizations and jobs
# ══════════════════════════════════════════════════════════════


class Organization(Base):
    """A hiring company. Enriched with LinkedIn data when ingestion has it."""

    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    domain: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)

    linkedin_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    linkedin_slug: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, nullable=True
    )
    linkedin_employees: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    linkedin_size: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    linkedin_industry: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    linkedin_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    linkedin_founded_date: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    linkedin_followers: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    linkedin_headquarters: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    linkedin_specialties: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    linkedin_locations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    linkedin_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    jobs: Mapped[list["Job"]] = relationship(back_populates="organization")


class Job(Base):
    """A job posting.

    `expired_at` is NULL while the posting is live. Public listings filter
    on it; admins toggle it in bulk.
    """

    __tablename__ = "jobs"
    __table_args__ = (
        Index("idx_jobs_org_posted", "organization_id", "date_posted"),
        Index("idx_jobs_expired", "expired_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    external_id: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, nullable=True
    )
    organization_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("organizations.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    date_posted: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    date_created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    date_valid_through: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    locations_raw: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    cities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    counties: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    regions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    countries: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    locations_full: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    timezones: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    latitude: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    longitude: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_remote: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    employment_type: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    salary_raw: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    source_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    source_domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_fetched_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    expired_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    organization: Mapped["Organization"] = relationship(back_populates="jobs")


# ══════════════════════════════════════════════════════════════
# Job boards: curated, branded subsets of jobs and organizations
# ══════════════════════════════════════════════════════════════


class JobBoard(Base):
    __tablename__ = "job_boards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    primary_color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    jobs: Mapped[list["JobBoardJob"]] = relationship(back_populates="job_board")
    organizations: Mapped[list["JobBoardOrganization"]] = relationship(
        back_populates="job_board"
    )


class JobBoardJob(Base):
    """Job ↔ board assignment, optionally featured or pinned."""

    __tablename__ = "job_board_jobs"
    __table_args__ = (
        UniqueConstraint("job_board_id", "job_id", name="uq_job_board_jobs"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    job_board_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("job_boards.id", ondelete="CASCADE"), nullable=False
    )
    job_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False
    )
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    pinned_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    job_board: Mapped["JobBoard"] = relationship(back_populates="jobs")
    job: Mapped["Job"] = relationship()


class JobBoardOrganization(Base):
    """Organization ↔ board assignment with an optional sponsorship tier."""

    __tablename__ = "job_board_organizations"
    __table_args__ = (
        UniqueConstraint(
            "job_board_id", "organization_id", name="uq_job_board_organizations"
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    job_board_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("job_boards.id", ondelete="CASCADE"), nullable=False
    )
    organization_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tier: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    job_board: Mapped["JobBoard"] = relationship(back_populates="organizations")
    organization: Mapped["Organization"] = relationship()


# ══════════════════════════════════════════════════════════════
# Ingestion: saved queries and fetch logs
# ══════════════════════════════════════════════════════════════


class SavedQuery(Base):
    """A named set of Fantastic Jobs query parameters that admins re-run."""

    __tablename__ = "saved_queries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    parameters: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_run: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    result_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    fetch_logs: Mapped[list["FetchLog"]] = relationship(back_populates="saved_query")


class FetchLog(Base):
    """One ingestion run: what was asked, what came back, what changed."""

    __tablename__ = "fetch_logs"
    __table_args__ = (
        Index("idx_fetch_logs_created", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # success, error, partial
    jobs_fetched: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    jobs_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    jobs_updated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    orgs_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    orgs_updated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    parameters: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    saved_query_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("saved_queries.id"), nullable=True
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # ms
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    saved_query: Mapped[Optional["SavedQuery"]] = relationship(back_populates="fetch_logs")
