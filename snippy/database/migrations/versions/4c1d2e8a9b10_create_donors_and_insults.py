"""Create donors and insults tables

Revision ID: 4c1d2e8a9b10
Revises:
Create Date: 2025-06-02 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c1d2e8a9b10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Baseline schema: one donor row per email, free-text insult status."""
    op.create_table(
        "donors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("email", name="uq_donors_email"),
    )
    op.create_index("ix_donors_code", "donors", ["code"])

    op.create_table(
        "insults",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("submitted_by_name", sa.String(200), nullable=True),
        sa.Column("submitted_by_email", sa.String(255), nullable=False),
        sa.Column("show_name", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(32), nullable=False, server_default="pending"),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("approved_by_email", sa.String(255), nullable=True),
        sa.Column("click_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_insults_status_created", "insults", ["status", "created_at"]
    )
    op.create_index(
        "ix_insults_submitted_by_email", "insults", ["submitted_by_email"]
    )


def downgrade() -> None:
    op.drop_index("ix_insults_submitted_by_email", table_name="insults")
    op.drop_index("ix_insults_status_created", table_name="insults")
    op.drop_table("insults")

    op.drop_index("ix_donors_code", table_name="donors")
    op.drop_table("donors")
