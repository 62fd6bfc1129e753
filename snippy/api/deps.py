"""
snippy.api.deps — FastAPI dependency injection
===============================================

Engine, config and mailer providers, plus the operator-secret gate used
by every moderation and admin route.
"""

from __future__ import annotations

import os
import secrets
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Query, status
from sqlalchemy import Engine

from snippy.config import SnippyConfig, load_config
from snippy.database.engine import create_db_engine
from snippy.services.notification_service import Mailer

_WEAK_SECRETS = frozenset({
    "snippy-admin-secret-change-me",
    "change-me",
    "changeme",
    "secret",
    "admin",
    "password",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 16


def _load_admin_secret() -> str:
    """Load and validate ADMIN_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    a known weak default, or shorter than 16 chars.
    """
    secret = os.getenv("ADMIN_SECRET", "")
    if not secret.strip():
        raise RuntimeError(
            "ADMIN_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
        )
    if secret.lower() in _WEAK_SECRETS:
        raise RuntimeError(
            f"ADMIN_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"ADMIN_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


ADMIN_SECRET: str = _load_admin_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> SnippyConfig:
    return load_config()


def get_mailer(cfg: Annotated[SnippyConfig, Depends(get_config)]) -> Mailer:
    return Mailer.from_config(cfg)


def get_recaptcha_secret() -> str:
    return os.getenv("RECAPTCHA_SECRET", "")


# ---------------------------------------------------------------------------
# Operator secret
# ---------------------------------------------------------------------------
def is_operator(supplied: str | None) -> bool:
    """Constant-time comparison against ADMIN_SECRET."""
    if not supplied:
        return False
    return secrets.compare_digest(supplied.encode(), ADMIN_SECRET.encode())


def require_operator(*candidates: str | None) -> None:
    """Raise 403 unless one of *candidates* (body / query / header value)
    is the operator secret."""
    if not any(is_operator(c) for c in candidates):
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Forbidden")


def operator_header(
    auth: Annotated[str | None, Header(alias="auth")] = None,
) -> str | None:
    """The operator secret as sent in the ``auth`` header, if any."""
    return auth


def operator_query(
    auth: Annotated[str | None, Query()] = None,
    header: str | None = Depends(operator_header),
) -> None:
    """Gate for GET routes that carry the secret in ``?auth=``."""
    require_operator(auth, header)
