"""Add announcements table

Revision ID: 9b2c6d0e4f71
Revises: 7e3f5a1c2d44
Create Date: 2025-07-11 10:15:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "9b2c6d0e4f71"
down_revision: str | Sequence[str] | None = "7e3f5a1c2d44"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "announcements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column(
            "category", sa.String(100), nullable=False, server_default="What's New"
        ),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by_email", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_announcements_window", "announcements", ["starts_at", "ends_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_announcements_window", table_name="announcements")
    op.drop_table("announcements")
