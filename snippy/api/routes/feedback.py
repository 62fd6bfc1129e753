"""
snippy.api.routes.feedback — CAPTCHA-gated feedback form
=========================================================
"""

from __future__ import annotations

import asyncio
import logging
import smtplib

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from snippy.api.deps import get_config, get_mailer, get_recaptcha_secret
from snippy.api.schemas import CamelModel
from snippy.config import SnippyConfig
from snippy.services import feedback_service, notification_service
from snippy.services.notification_service import Mailer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["feedback"])


class FeedbackForm(CamelModel):
    name: str | None = None
    email: str | None = None
    message: str | None = None
    type: str | None = None
    token: str | None = None


@router.post("/submit-feedback")
async def submit_feedback(
    body: FeedbackForm,
    cfg: SnippyConfig = Depends(get_config),
    mailer: Mailer = Depends(get_mailer),
    recaptcha_secret: str = Depends(get_recaptcha_secret),
):
    """Verify the CAPTCHA, then forward the form to the bug or ideas inbox."""
    if not (body.name and body.email and body.message and body.token):
        return JSONResponse(
            status_code=400, content={"error": "Missing required fields or CAPTCHA."},
        )

    try:
        human = await feedback_service.verify_captcha(recaptcha_secret, body.token)
    except httpx.HTTPError:
        logger.exception("CAPTCHA verification request failed")
        return JSONResponse(status_code=500, content={"error": "CAPTCHA verification error."})
    if not human:
        return JSONResponse(status_code=403, content={"error": "CAPTCHA verification failed."})

    try:
        await asyncio.to_thread(
            notification_service.forward_feedback,
            mailer,
            target=feedback_service.feedback_target(cfg, body.type),
            name=body.name,
            email=body.email,
            kind=body.type or "idea",
            message=body.message,
        )
    except (smtplib.SMTPException, OSError):
        logger.exception("Feedback mail from %s failed", body.email)
        return JSONResponse(status_code=500, content={"error": "Failed to send email."})
    return {"success": True}
