"""
snippy.services.announcement_service — Time-Boxed Announcements
================================================================

Admin-authored notices shown in the extension while
``starts_at <= now <= ends_at``.  Bodies are sanitized with the
announcement allow-list (insult tags plus ``<ul>``/``<li>``).

All timestamps are normalized to UTC before they are stored or compared;
naive datetimes are taken to already be UTC.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import Engine, delete, select, update

from snippy.constants import DEFAULT_ANNOUNCEMENT_CATEGORY
from snippy.database.engine import get_session
from snippy.database.models import Announcement
from snippy.engine.sanitizer import sanitize_announcement
from snippy.errors import ValidationError

logger = logging.getLogger(__name__)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def _validated(
    title: str | None,
    body: str | None,
    starts_at: datetime | None,
    ends_at: datetime | None,
) -> tuple[str, str, datetime, datetime]:
    if not title or not title.strip() or not body or not body.strip():
        raise ValidationError("Missing required fields")
    if starts_at is None or ends_at is None:
        raise ValidationError("Missing required fields")

    starts_at, ends_at = _as_utc(starts_at), _as_utc(ends_at)
    if ends_at < starts_at:
        raise ValidationError("Announcement ends before it starts.")
    return title.strip(), sanitize_announcement(body), starts_at, ends_at


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def create_announcement(
    engine: Engine,
    *,
    title: str,
    body: str,
    starts_at: datetime,
    ends_at: datetime,
    category: str | None = None,
    created_by_email: str | None = None,
) -> Announcement:
    """Store a new announcement and return it (with its ``id``).

    Raises
    ------
    ValidationError
        Missing title/body/window, or a window that ends before it starts.
    """
    title, body, starts_at, ends_at = _validated(title, body, starts_at, ends_at)
    announcement = Announcement(
        title=title,
        body=body,
        category=category or DEFAULT_ANNOUNCEMENT_CATEGORY,
        starts_at=starts_at,
        ends_at=ends_at,
        created_by_email=created_by_email or None,
    )
    with get_session(engine) as session:
        session.add(announcement)
        session.flush()

    logger.info("Announcement %d created: %s", announcement.id, announcement.title)
    return announcement


def update_announcement(
    engine: Engine,
    announcement_id: int,
    *,
    title: str,
    body: str,
    starts_at: datetime,
    ends_at: datetime,
    category: str | None = None,
) -> bool:
    """Replace every editable field of *announcement_id*.  Returns whether
    a row matched."""
    title, body, starts_at, ends_at = _validated(title, body, starts_at, ends_at)
    with get_session(engine) as session:
        result = session.execute(
            update(Announcement)
            .where(Announcement.id == announcement_id)
            .values(
                title=title,
                body=body,
                category=category or DEFAULT_ANNOUNCEMENT_CATEGORY,
                starts_at=starts_at,
                ends_at=ends_at,
            )
        )
        changed = result.rowcount > 0
    if changed:
        logger.info("Announcement %d updated", announcement_id)
    return changed


def delete_announcement(engine: Engine, announcement_id: int) -> bool:
    with get_session(engine) as session:
        result = session.execute(
            delete(Announcement).where(Announcement.id == announcement_id)
        )
        removed = result.rowcount > 0
    if removed:
        logger.info("Announcement %d deleted", announcement_id)
    return removed


def delete_all_announcements(engine: Engine) -> int:
    """Wipe the table.  Returns the number of rows deleted."""
    with get_session(engine) as session:
        count = session.execute(delete(Announcement)).rowcount
    logger.info("Deleted all announcements (%d rows)", count)
    return count


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def list_active(engine: Engine, now: datetime | None = None) -> list[Announcement]:
    """Announcements whose window contains *now*, latest start first."""
    moment = _as_utc(now) if now is not None else datetime.now(UTC)
    with get_session(engine) as session:
        return list(session.scalars(
            select(Announcement)
            .where(Announcement.starts_at <= moment, Announcement.ends_at >= moment)
            .order_by(Announcement.starts_at.desc(), Announcement.id.desc())
        ).all())


def list_all(engine: Engine) -> list[Announcement]:
    """Every announcement, newest created first."""
    with get_session(engine) as session:
        return list(session.scalars(
            select(Announcement)
            .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        ).all())
