"""
snippy.services.donor_service — Donor Identity Store
=====================================================

Sole source of truth for "who is a donor" and "who is an admin".  One row
per email; registration is an idempotent insert / promote / no-op so a
replayed payment webhook never mints a second identity or a second code.

Every function takes the engine as its first argument and runs a single
short statement inside :func:`~snippy.database.engine.get_session`.
Database failures surface as :class:`~snippy.errors.StoreError`.
"""

from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import Engine, delete, exists, select
from sqlalchemy.exc import IntegrityError

from snippy.database.engine import get_session
from snippy.database.models import Donor
from snippy.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class RegistrationResult(enum.StrEnum):
    """Outcome of :func:`register_donor`."""
    INSERTED = "inserted"
    UPDATED = "updated"
    EXISTS = "exists"


@dataclass(frozen=True, slots=True)
class IssuedCode:
    """Unlock code handed out by the donation webhook."""

    code: str
    is_new: bool


def generate_code() -> str:
    """A fresh opaque unlock code (UUID4 string)."""
    return str(uuid.uuid4())


def _require(**fields: str | None) -> None:
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def register_donor(
    engine: Engine,
    *,
    name: str,
    email: str,
    code: str,
    is_admin: bool = False,
) -> RegistrationResult:
    """Insert a donor, promote an existing one to admin, or do nothing.

    * No row for *email* → insert, ``INSERTED``.
    * Row exists, *is_admin* requested and row is not admin → promote in
      place, ``UPDATED``.
    * Otherwise → ``EXISTS``.  The stored code is never replaced and the
      admin flag is never cleared.
    """
    _require(name=name, email=email, code=code)

    with get_session(engine) as session:
        donor = session.scalar(select(Donor).where(Donor.email == email))
        if donor is not None:
            if is_admin and not donor.is_admin:
                donor.is_admin = True
                logger.info("Donor %s promoted to admin", email)
                return RegistrationResult.UPDATED
            return RegistrationResult.EXISTS

        try:
            with session.begin_nested():   # SAVEPOINT
                session.add(Donor(name=name, email=email, code=code, is_admin=is_admin))
                session.flush()
        except IntegrityError:
            # A concurrent registration for the same email won the insert.
            logger.info("Donor %s registered concurrently; treating as existing", email)
            return RegistrationResult.EXISTS

    logger.info("Donor %s registered (admin=%s)", email, is_admin)
    return RegistrationResult.INSERTED


def issue_code(engine: Engine, *, name: str, email: str) -> IssuedCode:
    """Return the donor's unlock code, registering them first if needed.

    Used by the donation webhook: the first donation mints a code, every
    later donation from the same email gets the same code back.
    """
    _require(name=name, email=email)

    existing = lookup_code(engine, email)
    if existing:
        return IssuedCode(code=existing, is_new=False)

    result = register_donor(engine, name=name, email=email, code=generate_code())
    # Re-read so a lost insert race hands back the winner's code
    return IssuedCode(
        code=require_code(engine, email),
        is_new=result == RegistrationResult.INSERTED,
    )


def remove_donor(engine: Engine, email: str) -> bool:
    """Delete the donor with *email*.  Returns whether a row existed."""
    _require(email=email)
    with get_session(engine) as session:
        result = session.execute(delete(Donor).where(Donor.email == email))
        removed = result.rowcount > 0
    if removed:
        logger.info("Donor %s removed", email)
    return removed


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def lookup_code(engine: Engine, email: str) -> str | None:
    """The unlock code registered for *email*, or ``None``."""
    with get_session(engine) as session:
        return session.scalar(select(Donor.code).where(Donor.email == email))


def require_code(engine: Engine, email: str) -> str:
    """Like :func:`lookup_code` but raises :class:`NotFoundError` on absence."""
    _require(email=email)
    code = lookup_code(engine, email)
    if code is None:
        raise NotFoundError("No unlock code found for this email.")
    return code


def code_exists(engine: Engine, code: str) -> bool:
    """True if any donor holds exactly *code*, regardless of email.

    A coarse "is this a real code at all" check.  Callers that need to
    bind a code to a person must use :func:`code_matches_email`.
    """
    with get_session(engine) as session:
        return bool(session.scalar(select(exists().where(Donor.code == code))))


def code_matches_email(engine: Engine, email: str, code: str) -> bool:
    """True iff a donor row exists with exactly this (email, code) pair."""
    with get_session(engine) as session:
        return bool(session.scalar(
            select(exists().where(Donor.email == email, Donor.code == code))
        ))


def is_admin_principal(engine: Engine, email: str, code: str) -> bool:
    """True iff (email, code) matches a donor whose admin flag is set.

    Fails closed: any non-matching pair is simply ``False``.
    """
    with get_session(engine) as session:
        flag = session.scalar(
            select(Donor.is_admin).where(Donor.email == email, Donor.code == code)
        )
    return flag is True


def list_all(engine: Engine) -> list[Donor]:
    """Every donor, newest first."""
    with get_session(engine) as session:
        rows = session.scalars(
            select(Donor).order_by(Donor.created_at.desc(), Donor.id.desc())
        ).all()
        return list(rows)
