"""
snippy.services.feedback_service — CAPTCHA-Gated Feedback
==========================================================

Feedback forms are verified against Google reCAPTCHA before they are
forwarded by mail.  Bug reports and feature ideas land in different
inboxes, both configured in ``config.yaml``.
"""

from __future__ import annotations

import logging

import httpx

from snippy.config import SnippyConfig

logger = logging.getLogger(__name__)

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"

FEEDBACK_BUG = "bug"


async def verify_captcha(
    secret: str,
    token: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Ask reCAPTCHA whether *token* is a genuine solve.

    Returns the ``success`` flag from the verification response.  Transport
    and HTTP-level failures raise :class:`httpx.HTTPError`.
    """
    transport = transport or httpx.AsyncHTTPTransport(retries=1)
    async with httpx.AsyncClient(timeout=10, transport=transport) as client:
        resp = await client.post(
            RECAPTCHA_VERIFY_URL,
            data={"secret": secret, "response": token},
        )
        resp.raise_for_status()
        payload = resp.json()

    success = bool(payload.get("success"))
    if not success:
        logger.info("CAPTCHA rejected: %s", payload.get("error-codes", []))
    return success


def feedback_target(cfg: SnippyConfig, kind: str | None) -> str:
    """Inbox for a feedback *kind*: bugs go to the bug address, everything
    else to the ideas address."""
    if kind == FEEDBACK_BUG:
        return cfg.feedback_bug_address
    return cfg.feedback_idea_address
