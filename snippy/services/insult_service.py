"""
snippy.services.insult_service — Insult Moderation Engine
==========================================================

State machine for user-submitted insults::

    pending ──approve──▶ approved
       │
       ├──reject────────▶ rejected            (with reason)
       └──(auto)────────▶ rejected_duplicate  (fixed reason)

    insert_approved ────▶ approved            (bot-authored, skips pending)

Stored text is always sanitized.  Duplicate detection is exact equality
on ``text_key`` (sanitized text, trimmed and lower-cased) against every
row, whatever its status.

The duplicate check and the insert are two statements.  Two identical
submissions racing each other can both land as ``pending``; that window
is accepted and left to the moderator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import Engine, delete, exists, func, select, update

from snippy.constants import (
    ANONYMOUS_LABEL,
    BOT_EMAIL,
    BOT_NAME,
    DEFAULT_REJECTION_REASON,
    DUPLICATE_REJECTION_REASON,
    MAX_APPROVED_POOL,
)
from snippy.database.engine import get_session
from snippy.database.models import Insult, InsultStatus
from snippy.engine.sanitizer import sanitize_insult
from snippy.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    """What a submission turned into: ``pending``, ``duplicate`` or ``approved``."""

    status: str
    id: int


@dataclass(frozen=True, slots=True)
class PublicInsult:
    """An approved insult as shown to extension users."""

    id: int
    text: str
    display_name: str
    click_count: int
    created_at: datetime


def text_key(text: str) -> str:
    """Dedup key: case- and surrounding-whitespace-insensitive."""
    return text.strip().lower()


def _clean(text: str | None) -> str:
    cleaned = sanitize_insult(text)
    if not cleaned.strip():
        raise ValidationError("Insult text is empty.")
    return cleaned


def _parse_status(status: str | InsultStatus) -> InsultStatus:
    try:
        return InsultStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown insult status: {status!r}") from None


def _display_name(insult: Insult) -> str:
    if insult.show_name and insult.submitted_by_name:
        return insult.submitted_by_name
    return ANONYMOUS_LABEL


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------

def submit(
    engine: Engine,
    *,
    text: str,
    submitted_by_email: str,
    submitted_by_name: str | None = None,
    show_name: bool = True,
) -> SubmissionResult:
    """Store a new insult as ``pending``, or as ``rejected_duplicate`` when
    the same text (ignoring case and surrounding whitespace) already exists.

    Raises
    ------
    ValidationError
        Missing submitter email, or text that is empty once sanitized.
    """
    if not submitted_by_email or not submitted_by_email.strip():
        raise ValidationError("Missing submitter email.")
    cleaned = _clean(text)
    key = text_key(cleaned)

    with get_session(engine) as session:
        is_duplicate = bool(session.scalar(
            select(exists().where(Insult.text_key == key))
        ))
        insult = Insult(
            text=cleaned,
            text_key=key,
            submitted_by_name=submitted_by_name or None,
            submitted_by_email=submitted_by_email,
            show_name=show_name,
        )
        if is_duplicate:
            insult.status = InsultStatus.REJECTED_DUPLICATE.value
            insult.rejection_reason = DUPLICATE_REJECTION_REASON
        else:
            insult.status = InsultStatus.PENDING.value
        session.add(insult)
        session.flush()
        insult_id = insult.id

    if is_duplicate:
        logger.info("Insult %d from %s auto-rejected as duplicate", insult_id, submitted_by_email)
        return SubmissionResult(status="duplicate", id=insult_id)

    logger.info("Insult %d submitted by %s", insult_id, submitted_by_email)
    return SubmissionResult(status=InsultStatus.PENDING.value, id=insult_id)


def insert_approved(engine: Engine, text: str) -> SubmissionResult:
    """Add bot-authored text straight to the approved pool.  No dedup."""
    cleaned = _clean(text)
    with get_session(engine) as session:
        insult = Insult(
            text=cleaned,
            text_key=text_key(cleaned),
            submitted_by_name=BOT_NAME,
            submitted_by_email=BOT_EMAIL,
            approved_by_email=BOT_EMAIL,
            show_name=True,
            status=InsultStatus.APPROVED.value,
        )
        session.add(insult)
        session.flush()
        insult_id = insult.id

    logger.info("Insult %d inserted pre-approved", insult_id)
    return SubmissionResult(status=InsultStatus.APPROVED.value, id=insult_id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def list_by_email(engine: Engine, email: str) -> list[Insult]:
    """Everything *email* has submitted, newest first."""
    with get_session(engine) as session:
        return list(session.scalars(
            select(Insult)
            .where(Insult.submitted_by_email == email)
            .order_by(Insult.created_at.desc(), Insult.id.desc())
        ).all())


def list_by_status(engine: Engine, status: str | InsultStatus) -> list[Insult]:
    """The moderation queue for one status, newest first."""
    wanted = _parse_status(status)
    with get_session(engine) as session:
        return list(session.scalars(
            select(Insult)
            .where(Insult.status == wanted.value)
            .order_by(Insult.created_at.desc(), Insult.id.desc())
        ).all())


def list_approved_random(engine: Engine, limit: int = MAX_APPROVED_POOL) -> list[PublicInsult]:
    """Up to *limit* approved insults in a fresh random order.

    *limit* is clamped to ``[1, MAX_APPROVED_POOL]``.  Submitters who opted
    out of attribution, or never gave a name, appear as ``"Anonymous"``.
    """
    limit = max(1, min(int(limit), MAX_APPROVED_POOL))
    with get_session(engine) as session:
        rows = session.scalars(
            select(Insult)
            .where(Insult.status == InsultStatus.APPROVED.value)
            .order_by(func.random())
            .limit(limit)
        ).all()
        return [
            PublicInsult(
                id=row.id,
                text=row.text,
                display_name=_display_name(row),
                click_count=row.click_count,
                created_at=row.created_at,
            )
            for row in rows
        ]


# ---------------------------------------------------------------------------
# Moderation
# ---------------------------------------------------------------------------

def approve(engine: Engine, insult_id: int, approver_email: str) -> bool:
    """Mark *insult_id* approved by *approver_email*.

    No check on the prior status; approving twice is harmless.  Returns
    whether a row matched.
    """
    if not approver_email or not approver_email.strip():
        raise ValidationError("Missing approver email.")
    with get_session(engine) as session:
        result = session.execute(
            update(Insult)
            .where(Insult.id == insult_id)
            .values(
                status=InsultStatus.APPROVED.value,
                approved_by_email=approver_email,
                rejection_reason=None,
            )
        )
        changed = result.rowcount > 0
    if changed:
        logger.info("Insult %d approved by %s", insult_id, approver_email)
    return changed


def reject(engine: Engine, insult_id: int, reason: str | None = None) -> bool:
    """Mark *insult_id* rejected.  A blank *reason* gets the default text."""
    reason = reason.strip() if reason else ""
    with get_session(engine) as session:
        result = session.execute(
            update(Insult)
            .where(Insult.id == insult_id)
            .values(
                status=InsultStatus.REJECTED.value,
                rejection_reason=reason or DEFAULT_REJECTION_REASON,
                approved_by_email=None,
            )
        )
        changed = result.rowcount > 0
    if changed:
        logger.info("Insult %d rejected", insult_id)
    return changed


def delete_by_id(engine: Engine, insult_id: int) -> bool:
    with get_session(engine) as session:
        result = session.execute(delete(Insult).where(Insult.id == insult_id))
        removed = result.rowcount > 0
    if removed:
        logger.info("Insult %d deleted", insult_id)
    return removed


def increment_click(engine: Engine, insult_id: int) -> bool:
    """Bump the click counter.  Returns ``True`` even if no row matched;
    callers must not read it as "the insult exists"."""
    with get_session(engine) as session:
        session.execute(
            update(Insult)
            .where(Insult.id == insult_id)
            .values(click_count=Insult.click_count + 1)
        )
    return True
