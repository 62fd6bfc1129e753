"""
snippy.services.authorization — Donor / Admin Predicates
=========================================================

Two predicates over the identity store:

* **authenticated** — the (email, code) pair matches a donor row.
* **privileged** — authenticated *and* that donor's admin flag is set.

The operator secret used by the moderation routes is a separate
capability and lives in :mod:`snippy.api.deps`; nothing here derives
operator rights from a donor row.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import Engine

from snippy.services import donor_service


@dataclass(frozen=True, slots=True)
class DonorAccess:
    email: str | None
    authenticated: bool
    is_admin: bool


def check_access(engine: Engine, email: str | None, code: str | None) -> DonorAccess:
    """Evaluate both predicates for *email* / *code*.

    Missing input is simply unauthenticated, never an error.
    """
    if not email or not code:
        return DonorAccess(email=email, authenticated=False, is_admin=False)

    if not donor_service.code_matches_email(engine, email, code):
        return DonorAccess(email=email, authenticated=False, is_admin=False)

    return DonorAccess(
        email=email,
        authenticated=True,
        is_admin=donor_service.is_admin_principal(engine, email, code),
    )


def is_authenticated(engine: Engine, email: str | None, code: str | None) -> bool:
    return check_access(engine, email, code).authenticated


def is_privileged(engine: Engine, email: str | None, code: str | None) -> bool:
    access = check_access(engine, email, code)
    return access.authenticated and access.is_admin
