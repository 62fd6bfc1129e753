"""
snippy.api.routes.announcements — Public feed and admin CRUD
=============================================================

The wire format keeps the extension's field names: the window is sent
and returned as ``start`` / ``end`` (ISO-8601).
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import Engine

from snippy.api.deps import get_engine, operator_header, operator_query, require_operator
from snippy.api.schemas import IdRequest, OperatorRequest, utc_iso
from snippy.database.models import Announcement
from snippy.errors import ValidationError
from snippy.services import announcement_service

router = APIRouter(tags=["announcements"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class AnnouncementCreate(OperatorRequest):
    title: str | None = None
    body: str | None = None
    category: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    created_by_email: str | None = None


class AnnouncementUpdate(IdRequest):
    title: str | None = None
    body: str | None = None
    category: str | None = None
    start: datetime | None = None
    end: datetime | None = None


def _announcement_dict(a: Announcement) -> dict:
    return {
        "id": a.id,
        "title": a.title,
        "body": a.body,
        "category": a.category,
        "start": utc_iso(a.starts_at),
        "end": utc_iso(a.ends_at),
        "createdByEmail": a.created_by_email,
        "createdAt": utc_iso(a.created_at),
    }


# ---------------------------------------------------------------------------
# GET /announcements — active window only
# ---------------------------------------------------------------------------
@router.get("/announcements")
def active_announcements(engine: Engine = Depends(get_engine)):
    return [_announcement_dict(a) for a in announcement_service.list_active(engine)]


# ---------------------------------------------------------------------------
# Admin (operator secret)
# ---------------------------------------------------------------------------
@router.get("/admin/announcements", dependencies=[Depends(operator_query)])
def all_announcements(engine: Engine = Depends(get_engine)):
    return [_announcement_dict(a) for a in announcement_service.list_all(engine)]


@router.post("/admin/announcements")
def create_announcement(
    body: AnnouncementCreate,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    require_operator(body.auth, header)
    created = announcement_service.create_announcement(
        engine,
        title=body.title,
        body=body.body,
        starts_at=body.start,
        ends_at=body.end,
        category=body.category,
        created_by_email=body.created_by_email,
    )
    return {"success": True, "id": created.id}


@router.post("/admin/update-announcement")
def update_announcement(
    body: AnnouncementUpdate,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    require_operator(body.auth, header)
    if body.id is None:
        raise ValidationError("Missing required fields")
    updated = announcement_service.update_announcement(
        engine,
        body.id,
        title=body.title,
        body=body.body,
        starts_at=body.start,
        ends_at=body.end,
        category=body.category,
    )
    return {"success": updated}


@router.post("/admin/delete-announcement")
def delete_announcement(
    body: IdRequest,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    require_operator(body.auth, header)
    if body.id is None:
        raise ValidationError("Missing announcement ID")
    return {"success": announcement_service.delete_announcement(engine, body.id)}


@router.post("/admin/delete-all-announcements")
def delete_all_announcements(
    body: OperatorRequest,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    require_operator(body.auth, header)
    count = announcement_service.delete_all_announcements(engine)
    return {"success": True, "message": f"Successfully deleted {count} announcements."}
