"""
snippy.api.routes.donors — Donation webhook, unlock codes, donor admin
=======================================================================
"""

from __future__ import annotations

import logging
import smtplib
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy import Engine

from snippy.api.deps import (
    get_engine,
    get_mailer,
    operator_header,
    operator_query,
    require_operator,
)
from snippy.api.schemas import CamelModel, OperatorRequest, utc_iso
from snippy.database.models import Donor
from snippy.errors import ValidationError
from snippy.services import authorization, donor_service, notification_service
from snippy.services.notification_service import Mailer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["donors"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class DonationWebhook(CamelModel):
    email: str | None = None
    name: str | None = None
    message: str | None = None
    amount: Any = None
    referrer: str | None = None


class DeleteDonor(OperatorRequest):
    email: str | None = None


class ManualCode(OperatorRequest):
    email: str | None = None
    name: str | None = None
    code: str | None = None
    is_admin: bool = False


def _donor_dict(d: Donor) -> dict:
    return {
        "id": d.id,
        "name": d.name,
        "email": d.email,
        "code": d.code,
        "isAdmin": d.is_admin,
        "createdAt": utc_iso(d.created_at),
    }


# ---------------------------------------------------------------------------
# POST /bmac-webhook — donation receipt from the payment provider
# ---------------------------------------------------------------------------
@router.post("/bmac-webhook")
def donation_webhook(
    body: DonationWebhook,
    engine: Engine = Depends(get_engine),
    mailer: Mailer = Depends(get_mailer),
):
    """Issue (or re-issue) the donor's unlock code and mail it to them.

    Replays are safe: a repeat donor keeps their original code.
    """
    if not body.email or not body.name:
        raise ValidationError("Missing required fields.")

    issued = donor_service.issue_code(engine, name=body.name, email=body.email)
    try:
        notification_service.send_unlock_code(
            mailer, to=body.email, name=body.name, code=issued.code, is_new=issued.is_new,
        )
    except (smtplib.SMTPException, OSError):
        logger.exception("Unlock-code mail to %s failed", body.email)
        return JSONResponse(
            status_code=502,
            content={"error": "Donation recorded, but the unlock code email could not be sent."},
        )
    return {"success": True}


# ---------------------------------------------------------------------------
# GET /resend-code
# ---------------------------------------------------------------------------
@router.get("/resend-code")
def resend_code(
    email: str | None = Query(None),
    engine: Engine = Depends(get_engine),
    mailer: Mailer = Depends(get_mailer),
):
    if not email:
        raise ValidationError("Missing email.")

    code = donor_service.require_code(engine, email)
    try:
        notification_service.send_code_reminder(mailer, to=email, code=code)
    except (smtplib.SMTPException, OSError):
        logger.exception("Code reminder mail to %s failed", email)
        return JSONResponse(status_code=502, content={"error": "Failed to resend unlock code."})
    return {"success": True}


# ---------------------------------------------------------------------------
# GET /verify-code
# ---------------------------------------------------------------------------
@router.get("/verify-code")
def verify_code(
    email: str | None = Query(None),
    code: str | None = Query(None),
    engine: Engine = Depends(get_engine),
):
    """``{"valid": bool, "isAdmin": bool}`` for an (email, code) pair."""
    if not email or not code:
        return JSONResponse(
            status_code=400, content={"valid": False, "error": "Missing email or code"},
        )
    access = authorization.check_access(engine, email, code)
    return {"valid": access.authenticated, "isAdmin": access.is_admin}


# ---------------------------------------------------------------------------
# Operator-only donor management
# ---------------------------------------------------------------------------
@router.delete("/delete-donor")
def delete_donor(
    body: DeleteDonor,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    require_operator(body.auth, header)
    if not body.email:
        raise ValidationError("Missing email")

    if donor_service.remove_donor(engine, body.email):
        return {"success": True, "message": f"Deleted donor {body.email}"}
    return JSONResponse(
        status_code=404, content={"success": False, "message": "No matching donor found"},
    )


@router.get("/dev-list-donors", dependencies=[Depends(operator_query)])
def list_donors(engine: Engine = Depends(get_engine)):
    return [_donor_dict(d) for d in donor_service.list_all(engine)]


@router.post("/manual-add-code")
def manual_add_code(
    body: ManualCode,
    header: str | None = Depends(operator_header),
    engine: Engine = Depends(get_engine),
):
    """Register a donor by hand (comped codes, admin grants).

    Responds with the code actually on file, which is the existing one
    when the email was already registered.
    """
    require_operator(body.auth, header)
    if not body.email or not body.name:
        raise ValidationError("Missing name or email")

    result = donor_service.register_donor(
        engine,
        name=body.name,
        email=body.email,
        code=body.code or donor_service.generate_code(),
        is_admin=body.is_admin,
    )
    return {
        "success": True,
        "result": result.value,
        "code": donor_service.require_code(engine, body.email),
    }
