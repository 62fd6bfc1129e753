"""Insult moderation constraints: status enum, dedup key

Revision ID: a5d8e2f1c3b6
Revises: 9b2c6d0e4f71
Create Date: 2025-08-04 16:45:00.000000

Rows imported from the previous deployment's store (copied into ``insults``
before upgrading past this revision) hold duplicates as
``"Rejected - Duplicate"``, free-form status casing, rejections without a
reason and unsanitized text.  This revision normalizes that data, then
locks the status column to the four known values and adds the
``text_key`` column used for exact duplicate detection.
"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op
from snippy.engine.sanitizer import sanitize_insult

# revision identifiers, used by Alembic.
revision: str = "a5d8e2f1c3b6"
down_revision: str | Sequence[str] | None = "9b2c6d0e4f71"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_insults = sa.table(
    "insults",
    sa.column("id", sa.Integer),
    sa.column("text", sa.Text),
    sa.column("text_key", sa.Text),
    sa.column("status", sa.String),
    sa.column("rejection_reason", sa.Text),
)

_STATUSES = ("pending", "approved", "rejected", "rejected_duplicate")


def upgrade() -> None:
    bind = op.get_bind()

    # --- Normalize legacy status text ---
    bind.execute(
        _insults.update()
        .where(_insults.c.status == "Rejected - Duplicate")
        .values(status="rejected_duplicate")
    )
    for status in ("pending", "approved", "rejected"):
        bind.execute(
            _insults.update()
            .where(sa.func.lower(_insults.c.status) == status)
            .values(status=status)
        )
    bind.execute(
        _insults.update()
        .where(_insults.c.status.not_in(_STATUSES))
        .values(status="pending")
    )

    # --- Every rejected row carries a reason ---
    bind.execute(
        _insults.update()
        .where(
            _insults.c.status == "rejected_duplicate",
            _insults.c.rejection_reason.is_(None),
        )
        .values(rejection_reason="This insult was already submitted.")
    )
    bind.execute(
        _insults.update()
        .where(
            _insults.c.status == "rejected",
            _insults.c.rejection_reason.is_(None),
        )
        .values(rejection_reason="Rejected by moderator.")
    )

    # --- Sanitize legacy text; dedup key computed as the service does ---
    op.add_column("insults", sa.Column("text_key", sa.Text(), nullable=True))
    rows = bind.execute(sa.select(_insults.c.id, _insults.c.text)).all()
    for row_id, text in rows:
        clean = sanitize_insult(text)
        bind.execute(
            _insults.update()
            .where(_insults.c.id == row_id)
            .values(text=clean, text_key=clean.strip().lower())
        )

    with op.batch_alter_table("insults") as batch_op:
        batch_op.alter_column("text_key", existing_type=sa.Text(), nullable=False)
        batch_op.create_check_constraint(
            "ck_insults_status",
            "status IN ('pending', 'approved', 'rejected', 'rejected_duplicate')",
        )
    op.create_index("ix_insults_text_key", "insults", ["text_key"])


def downgrade() -> None:
    op.drop_index("ix_insults_text_key", table_name="insults")
    with op.batch_alter_table("insults") as batch_op:
        batch_op.drop_constraint("ck_insults_status", type_="check")
        batch_op.drop_column("text_key")

    op.get_bind().execute(
        _insults.update()
        .where(_insults.c.status == "rejected_duplicate")
        .values(status="Rejected - Duplicate")
    )
