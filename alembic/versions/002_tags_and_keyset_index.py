"""create local tag directory table and keyset pagination index

Revision ID: 002_tags_and_keyset_index
Revises: 001_create_application_tables
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "002_tags_and_keyset_index"
down_revision = "001_create_application_tables"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tags",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.UniqueConstraint("name", name="uq_tags_name"),
    )

    # GET /applications/stream walks (created_at DESC, id DESC); keyset predicates
    # and ORDER BY both use this index.
    op.create_index(
        "idx_applications_created_at_id",
        "applications",
        [sa.text("created_at DESC"), sa.text("id DESC")],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("idx_applications_created_at_id", table_name="applications")
    op.drop_table("tags")
