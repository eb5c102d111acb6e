"""create scrape_results and harvest_runs tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:30:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def upgrade() -> None:
    op.create_table(
        "harvest_runs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("total_urls", sa.Integer(), nullable=False),
        sa.Column("successes", sa.Integer(), nullable=False),
        sa.Column("failures", sa.Integer(), nullable=False),
        sa.Column("run_duration_seconds", sa.Float(), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "scrape_results",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("run_id", sa.Uuid(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("final_url", sa.Text(), nullable=False),
        sa.Column("scraped_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("jsonld_data", _JSON, nullable=False),
        sa.Column("entity", _JSON, nullable=True),
        sa.Column("entity_name", sa.String(length=255), nullable=True),
        sa.Column("entity_summary", _JSON, nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("error_kind", sa.String(length=32), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_scrape_results_run_id", "scrape_results", ["run_id"], unique=False)
    op.create_index("ix_scrape_results_scraped_at", "scrape_results", ["scraped_at"], unique=False)
    op.create_index("ix_scrape_results_error_kind", "scrape_results", ["error_kind"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_scrape_results_error_kind", table_name="scrape_results")
    op.drop_index("ix_scrape_results_scraped_at", table_name="scrape_results")
    op.drop_index("ix_scrape_results_run_id", table_name="scrape_results")
    op.drop_table("scrape_results")
    op.drop_table("harvest_runs")
