"""Initial schema for Wine Concierge enrichment.

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create wines table
    op.create_table(
        "wines",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("venue_id", sa.String(36), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("wine_type", sa.String(20), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("price_glass", sa.Float(), nullable=True),
        # Descriptive fields filled by enrichment
        sa.Column("producer", sa.String(255), nullable=True),
        sa.Column("region", sa.String(100), nullable=True),
        sa.Column("denomination", sa.String(100), nullable=True),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("grape_varieties_json", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("available", sa.Boolean(), default=True),
        sa.Column("recommended", sa.Boolean(), default=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_wines_venue_id", "wines", ["venue_id"])

    # Create wine_ratings table
    op.create_table(
        "wine_ratings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "wine_id",
            sa.String(36),
            sa.ForeignKey("wines.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("guide_id", sa.String(50), nullable=False),
        sa.Column("guide_name", sa.String(100), nullable=False),
        sa.Column("score", sa.String(100), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_wine_ratings_wine_id", "wine_ratings", ["wine_id"])

    # Create enrichment_jobs table
    op.create_table(
        "enrichment_jobs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "wine_id",
            sa.String(36),
            sa.ForeignKey("wines.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="processing"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_enrichment_jobs_wine_id", "enrichment_jobs", ["wine_id"])
    op.create_index("ix_enrichment_jobs_created_at", "enrichment_jobs", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_enrichment_jobs_created_at", table_name="enrichment_jobs")
    op.drop_index("ix_enrichment_jobs_wine_id", table_name="enrichment_jobs")
    op.drop_table("enrichment_jobs")

    op.drop_index("ix_wine_ratings_wine_id", table_name="wine_ratings")
    op.drop_table("wine_ratings")

    op.drop_index("ix_wines_venue_id", table_name="wines")
    op.drop_table("wines")
