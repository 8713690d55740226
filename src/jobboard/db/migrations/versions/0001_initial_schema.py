"""Initial schema: accounts, listings, job boards and ingestion

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    # ─── Accounts ────────────────────────────────────────
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        _timestamp('created_at'),
    )
    op.create_table(
        'api_tokens',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('token_hash', sa.String(64), nullable=False, unique=True),
        sa.Column('prefix', sa.String(16), nullable=False),
        sa.Column(
            'user_id', sa.String(36),
            sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
        ),
        _timestamp('last_used_at'),
        _timestamp('expires_at'),
        _timestamp('created_at'),
    )

    # ─── Listings ────────────────────────────────────────
    op.create_table(
        'organizations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('logo', sa.Text(), nullable=True),
        sa.Column('domain', sa.String(255), nullable=True, unique=True),
        sa.Column('linkedin_url', sa.Text(), nullable=True),
        sa.Column('linkedin_slug', sa.String(255), nullable=True, unique=True),
        sa.Column('linkedin_employees', sa.Integer(), nullable=True),
        sa.Column('linkedin_size', sa.String(100), nullable=True),
        sa.Column('linkedin_industry', sa.String(255), nullable=True),
        sa.Column('linkedin_type', sa.String(100), nullable=True),
        sa.Column('linkedin_founded_date', sa.String(50), nullable=True),
        sa.Column('linkedin_followers', sa.Integer(), nullable=True),
        sa.Column('linkedin_headquarters', sa.String(255), nullable=True),
        sa.Column('linkedin_specialties', sa.JSON(), nullable=False),
        sa.Column('linkedin_locations', sa.JSON(), nullable=False),
        sa.Column('linkedin_description', sa.Text(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_table(
        'jobs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('external_id', sa.String(255), nullable=True, unique=True),
        sa.Column(
            'organization_id', sa.String(36),
            sa.ForeignKey('organizations.id'), nullable=False,
        ),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('description_text', sa.Text(), nullable=True),
        _timestamp('date_posted'),
        _timestamp('date_created'),
        _timestamp('date_valid_through'),
        sa.Column('locations_raw', sa.JSON(), nullable=True),
        sa.Column('cities', sa.JSON(), nullable=False),
        sa.Column('counties', sa.JSON(), nullable=False),
        sa.Column('regions', sa.JSON(), nullable=False),
        sa.Column('countries', sa.JSON(), nullable=False),
        sa.Column('locations_full', sa.JSON(), nullable=False),
        sa.Column('timezones', sa.JSON(), nullable=False),
        sa.Column('latitude', sa.JSON(), nullable=False),
        sa.Column('longitude', sa.JSON(), nullable=False),
        sa.Column('is_remote', sa.Boolean(), nullable=False),
        sa.Column('employment_type', sa.JSON(), nullable=False),
        sa.Column('salary_raw', sa.JSON(), nullable=True),
        sa.Column('source_type', sa.String(100), nullable=True),
        sa.Column('source', sa.String(100), nullable=True),
        sa.Column('source_domain', sa.String(255), nullable=True),
        _timestamp('last_fetched_at'),
        _timestamp('expired_at'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('idx_jobs_org_posted', 'jobs', ['organization_id', 'date_posted'])
    op.create_index('idx_jobs_expired', 'jobs', ['expired_at'])

    # ─── Job boards ──────────────────────────────────────
    op.create_table(
        'job_boards',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('slug', sa.String(100), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo', sa.Text(), nullable=True),
        sa.Column('primary_color', sa.String(20), nullable=True),
        sa.Column('domain', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_table(
        'job_board_jobs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'job_board_id', sa.String(36),
            sa.ForeignKey('job_boards.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column(
            'job_id', sa.String(36),
            sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('featured', sa.Boolean(), nullable=False),
        _timestamp('pinned_until'),
        _timestamp('created_at'),
        sa.UniqueConstraint('job_board_id', 'job_id', name='uq_job_board_jobs'),
    )
    op.create_table(
        'job_board_organizations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column(
            'job_board_id', sa.String(36),
            sa.ForeignKey('job_boards.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column(
            'organization_id', sa.String(36),
            sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('is_featured', sa.Boolean(), nullable=False),
        sa.Column('tier', sa.String(50), nullable=True),
        _timestamp('created_at'),
        sa.UniqueConstraint(
            'job_board_id', 'organization_id', name='uq_job_board_organizations'
        ),
    )

    # ─── Ingestion ───────────────────────────────────────
    op.create_table(
        'saved_queries',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('parameters', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _timestamp('last_run'),
        sa.Column('result_count', sa.Integer(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_table(
        'fetch_logs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('jobs_fetched', sa.Integer(), nullable=False),
        sa.Column('jobs_created', sa.Integer(), nullable=False),
        sa.Column('jobs_updated', sa.Integer(), nullable=False),
        sa.Column('orgs_created', sa.Integer(), nullable=False),
        sa.Column('orgs_updated', sa.Integer(), nullable=False),
        sa.Column('parameters', sa.JSON(), nullable=False),
        sa.Column(
            'saved_query_id', sa.String(36),
            sa.ForeignKey('saved_queries.id'), nullable=True,
        ),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=False),
        _timestamp('created_at'),
    )
    op.create_index('idx_fetch_logs_created', 'fetch_logs', ['created_at'])


def downgrade() -> None:
    op.drop_index('idx_fetch_logs_created', table_name='fetch_logs')
    op.drop_table('fetch_logs')
    op.drop_table('saved_queries')
    op.drop_table('job_board_organizations')
    op.drop_table('job_board_jobs')
    op.drop_table('job_boards')
    op.drop_index('idx_jobs_expired', table_name='jobs')
    op.drop_index('idx_jobs_org_posted', table_name='jobs')
    op.drop_table('jobs')
    op.drop_table('organizations')
    op.drop_table('api_tokens')
    op.drop_table('users')
