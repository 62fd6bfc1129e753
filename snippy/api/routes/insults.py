"""
snippy.api.routes.insults — Submission, moderation queue, public pool
======================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy import Engine

from snippy.api.deps import (
    get_config,
    get_engine,
    operator_header,
    operator_query,
    require_operator,
)
from snippy.api.schemas import CamelModel, IdRequest, OperatorRequest, utc_iso
from snippy.config import SnippyConfig
from snippy.database.models import Insult
from snippy.errors import ValidationError
from snippy.services import insult_service
from snippy.services.insult_service import PublicInsult

router = APIRouter(tags=["insults"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class InsultSubmission(CamelModel):
    text: str | None = None
    submitted_by_name: str | None = None
    submitted_by_email: str | None = None
    show_name: bool = True


class ApproveInsult(IdRequest):
    approver_email: str | None = None


class RejectInsult(IdRequest):
    reason: str | None = None


class InsertInsult(OperatorRequest):
    text: str | None = None


class TrackClick(CamelModel):
    id: int | None = None


def _insult_dict(i: Insult) -> dict:
    return {
        "id": i.id,
        "text": i.text,
        "submittedByName": i.submitted_by_name,
        "submittedByEmail": i.submitted_by_email,
        "showName": i.show_name,
        "status": i.status,
        "rejectionReason": i.rejection_reason,
        "approvedByEmail": i.approved_by_email,
        "clickCount": i.click_count,
        "createdAt": utc_iso(i.created_at),
    }


def _public_dict(p: PublicInsult) -> dict:
    return {
        "id": p.id,
        "text": p.text,
        "displayName": p.display_name,
        "clickCount": p.click_count,
        "createdAt": utc_iso(p.created_at),
    }


def _require_id(insult_id: int | None) -> int:
    if insult_id is None:
        raise ValidationError("Missing insult ID.")
    return insult_id


# ---------------------------------------------------------------------------
# Donor-facing
# ---------------------------------------------------------------------------
@router.post("/submit-insult")
def submit_insult(body: InsultSubmission, engine: Engine = Depends(get_engine)):
    """Returns ``{"status": "pending" | "duplicate", "id": …}``."""
    if not body.text or not body.submitted_by_email:
        raise ValidationError("Missing required fields.")
    result = insult_service.submit(
        engine,
        text=body.text,
        submitted_by_email=body.submitted_by_email,
        submitted_by_name=body.submitted_by_name,
        show_name=body.show_name,
    )
    return {"status": result.status, "id": result.id}


@router.get("/my-insults")
def my_insults(email: str | None = Query(None), engine: Engine = Depends(get_engine)):
    if not email:
        raise ValidationError("Missing email.")
    return [_insult_dict(i) for i in insult_service.list_by_email(engine, email)]


# ---------------------------------------------------------------------------
# Public pool
# ---------------------------------------------------------------------------
@router.get("/insults")
def approved_insults(
    engine: Engine = Depends(get_engine),
    cfg: SnippyConfig = Depends(get_config),
):
    """The approved pool, shuffled on every call."""
    pool = insult_service.list_approved_random(engine, cfg.approved_pool_size)
    return [_public_dict(p) for p in pool]


@router.get("/random-approved-insult")
def random_approved_insult(engine: Engine = Depends(get_engine)):
    picked = insult_service.list_approved_random(engine, 1)
    if not picked:
        return JSONResponse(status_code=404, content={"error": "No approved insults found."})
    return _public_dict(picked[0])


@router.post("/track-insult-click")
def track_click(body: TrackClick, engine: Engine = Depends(get_engine)):
    insult_service.increment_click(engine, _require_id(body.id))
    return {"success": True}


# ---------------------------------------------------------------------------
# Moderation (operator secret)
# ---------------------------------------------------------------------------
@router.get("/admin-insults", dependencies=[Depends(operator_query)])
def admin_insults(status: str | None = Query(None), engine: Engine = Depends(get_engine)):
    if not status:
        raise ValidationError("Missing status filter.")
    return [_insult_dict(i) for i in insult_service.list_by_status(engine, status)]


@router.post("/approve-insult")
def approve_insult(
    body: ApproveInsult,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    require_operator(body.auth, header)
    if not body.approver_email:
        raise ValidationError("Missing approver email.")
    success = insult_service.approve(engine, _require_id(body.id), body.approver_email)
    return {"success": success}


@router.post("/reject-insult")
def reject_insult(
    body: RejectInsult,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    require_operator(body.auth, header)
    success = insult_service.reject(engine, _require_id(body.id), body.reason)
    return {"success": success}


@router.post("/insert-insult")
def insert_insult(
    body: InsertInsult,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    require_operator(body.auth, header)
    if not body.text:
        raise ValidationError("Missing required fields.")
    result = insult_service.insert_approved(engine, body.text)
    return {"status": result.status, "id": result.id}


@router.post("/delete-insult")
def delete_insult(
    body: IdRequest,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    require_operator(body.auth, header)
    success = insult_service.delete_by_id(engine, _require_id(body.id))
    return {"success": success}
