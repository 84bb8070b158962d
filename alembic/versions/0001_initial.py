"""Initial schema – companies, interactions, comments

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUSES = ("Contacted", "In Analysis", "LOI Sent", "Due Diligence", "Closed", "Archived")
RATINGS = ("A", "B", "C", "D", "Not Rated")
APPROVALS = ("Approved", "Not Approved", "Under Review")
INTERACTION_TYPES = ("Call", "Email", "Meeting", "Other")


def _in(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


def upgrade() -> None:
    # --- companies ---
    op.create_table(
        "companies",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sector", sa.String(100), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="Contacted"),
        sa.Column("rating", sa.String(20), nullable=True),
        sa.Column("approval_status", sa.String(30), nullable=True),
        sa.Column("estimated_revenue", sa.Numeric(20, 2), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(_in("status", STATUSES), name="ck_companies_status"),
        sa.CheckConstraint(f"rating IS NULL OR {_in('rating', RATINGS)}", name="ck_companies_rating"),
        sa.CheckConstraint(
            f"approval_status IS NULL OR {_in('approval_status', APPROVALS)}",
            name="ck_companies_approval_status",
        ),
        sa.CheckConstraint(
            "estimated_revenue IS NULL OR estimated_revenue >= 0",
            name="ck_companies_estimated_revenue",
        ),
    )
    op.create_index("ix_companies_name", "companies", ["name"])
    op.create_index("ix_companies_status", "companies", ["status"])
    op.create_index("ix_companies_sector", "companies", ["sector"])

    # --- interactions ---
    op.create_table(
        "interactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "company_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("companies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(_in("type", INTERACTION_TYPES), name="ck_interactions_type"),
    )
    op.create_index("ix_interactions_company_id", "interactions", ["company_id"])

    # --- comments ---
    op.create_table(
        "comments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "company_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("companies.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("author", sa.String(150), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_comments_company_id", "comments", ["company_id"])


def downgrade() -> None:
    op.drop_table("comments")
    op.drop_table("interactions")
    op.drop_table("companies")
