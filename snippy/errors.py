"""
snippy.errors — Service Error Taxonomy
=======================================

Raised by the service layer and translated to HTTP status codes by the
exception handlers registered in :mod:`snippy.api.main`.
"""

from __future__ import annotations


class SnippyError(Exception):
    """Base class for all errors raised by Snippy services."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SnippyError):
    """A required field is missing or malformed.  Caller's fault; do not retry."""

    status_code = 400


class NotFoundError(SnippyError):
    """The targeted donor / insult / announcement does not exist."""

    status_code = 404


class ConflictError(SnippyError):
    """A uniqueness rule was violated.

    Not raised today: donor registration resolves duplicate emails as an
    idempotent update-or-noop.
    """

    status_code = 409


class StoreError(SnippyError):
    """The underlying database failed.  Surfaced as-is, never retried."""

    status_code = 500
