"""
snippy.api.schemas — Shared request-body base
==============================================

The browser extension speaks camelCase JSON (``submittedByEmail``,
``isAdmin``); request models declare snake_case fields and accept either
spelling.  Responses are plain dicts; timestamps go out through
:func:`utc_iso`.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OperatorRequest(CamelModel):
    """Any body that carries the operator secret in ``auth``."""

    auth: str | None = None


class IdRequest(OperatorRequest):
    id: int | None = None


def utc_iso(moment: datetime | None) -> str | None:
    """ISO-8601 with an explicit offset.  Naive values are read as UTC."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        # SQLite hands back naive values; they were stored as UTC
        moment = moment.replace(tzinfo=UTC)
    return moment.isoformat()
