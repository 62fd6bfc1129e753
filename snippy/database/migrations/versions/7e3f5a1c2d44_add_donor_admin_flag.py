"""Add donors.is_admin flag

Revision ID: 7e3f5a1c2d44
Revises: 4c1d2e8a9b10
Create Date: 2025-06-20 14:30:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "7e3f5a1c2d44"
down_revision: str | Sequence[str] | None = "4c1d2e8a9b10"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Existing donors start out as non-admins."""
    op.add_column(
        "donors",
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
    )


def downgrade() -> None:
    with op.batch_alter_table("donors") as batch_op:
        batch_op.drop_column("is_admin")
