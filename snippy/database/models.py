"""
snippy.database.models — SQLAlchemy 2.0 Data Models
====================================================

Tables:
- donors         — One row per donor email, bearing the unlock code
- insults        — User-submitted insults and their moderation state
- announcements  — Time-boxed notices shown in the extension

The three relations are independent: ``submitted_by_email``,
``approved_by_email`` and ``created_by_email`` are loose textual
references to ``donors.email``, not foreign keys.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
    func,
    true,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from snippy.constants import DEFAULT_ANNOUNCEMENT_CATEGORY


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all Snippy ORM models."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class InsultStatus(enum.StrEnum):
    """Moderation state of an insult.  Every non-pending state is terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REJECTED_DUPLICATE = "rejected_duplicate"


REJECTED_STATUSES = frozenset({InsultStatus.REJECTED, InsultStatus.REJECTED_DUPLICATE})


# ---------------------------------------------------------------------------
# Donors — one row per email
# ---------------------------------------------------------------------------
class Donor(Base):
    __tablename__ = "donors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_donors_email"),
        Index("ix_donors_code", "code"),
    )

    def __repr__(self) -> str:
        return f"<Donor id={self.id} email={self.email!r} admin={self.is_admin}>"


# ---------------------------------------------------------------------------
# Insults — moderation queue and public pool
# ---------------------------------------------------------------------------
class Insult(Base):
    """A submitted insult.

    ``text`` always holds sanitized HTML.  ``text_key`` is the exact-match
    dedup key (``lower(trim(text))``) compared across every row regardless
    of status.
    """
    __tablename__ = "insults"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    text_key: Mapped[str] = mapped_column(Text, nullable=False)
    submitted_by_name: Mapped[str | None] = mapped_column(String(200), default=None)
    submitted_by_email: Mapped[str] = mapped_column(String(255), nullable=False)
    show_name: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=InsultStatus.PENDING.value,
        server_default=InsultStatus.PENDING.value,
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, default=None)
    approved_by_email: Mapped[str | None] = mapped_column(String(255), default=None)
    click_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'rejected_duplicate')",
            name="ck_insults_status",
        ),
        Index("ix_insults_text_key", "text_key"),
        Index("ix_insults_status_created", "status", "created_at"),
        Index("ix_insults_submitted_by_email", "submitted_by_email"),
    )

    def __repr__(self) -> str:
        return f"<Insult id={self.id} status={self.status!r} clicks={self.click_count}>"


# ---------------------------------------------------------------------------
# Announcements — shown while starts_at <= now <= ends_at
# ---------------------------------------------------------------------------
class Announcement(Base):
    __tablename__ = "announcements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(
        String(100), nullable=False, default=DEFAULT_ANNOUNCEMENT_CATEGORY,
        server_default=DEFAULT_ANNOUNCEMENT_CATEGORY,
    )
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_by_email: Mapped[str | None] = mapped_column(String(255), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_announcements_window", "starts_at", "ends_at"),
    )

    def __repr__(self) -> str:
        return f"<Announcement id={self.id} title={self.title!r}>"
