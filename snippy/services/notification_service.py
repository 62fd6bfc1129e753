"""
snippy.services.notification_service — Outbound Email
======================================================

Plain-text mail over SMTP.  Mail is sent only *after* the core operation
it reports on has committed; a delivery failure propagates to the caller
(``smtplib.SMTPException`` or ``OSError``) but never undoes that
operation.

Credentials come from ``SMTP_USER`` / ``SMTP_PASS``; relay host, port and
sender display name come from ``config.yaml``.
"""

from __future__ import annotations

import logging
import os
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr

from snippy.config import SnippyConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Mailer:
    """SMTP relay settings plus the account used to send through it."""

    host: str
    port: int
    use_ssl: bool
    username: str | None
    password: str | None
    from_name: str

    @classmethod
    def from_config(cls, cfg: SnippyConfig) -> Mailer:
        return cls(
            host=cfg.smtp_host,
            port=cfg.smtp_port,
            use_ssl=cfg.smtp_use_ssl,
            username=os.getenv("SMTP_USER") or None,
            password=os.getenv("SMTP_PASS") or None,
            from_name=cfg.mail_from_name,
        )

    def build_message(
        self,
        to: str,
        subject: str,
        body: str,
        *,
        reply_to: str | None = None,
        from_name: str | None = None,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((from_name or self.from_name, self.username or ""))
        msg["To"] = to
        msg["Subject"] = subject
        if reply_to:
            msg["Reply-To"] = reply_to
        msg.set_content(body, subtype="plain")
        return msg

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        *,
        reply_to: str | None = None,
        from_name: str | None = None,
    ) -> None:
        """Deliver one plain-text message to *to*."""
        msg = self.build_message(to, subject, body, reply_to=reply_to, from_name=from_name)

        if self.use_ssl:
            with smtplib.SMTP_SSL(
                self.host, self.port, context=ssl.create_default_context()
            ) as s:
                self._deliver(s, msg)
        else:
            with smtplib.SMTP(self.host, self.port) as s:
                s.starttls(context=ssl.create_default_context())
                self._deliver(s, msg)
        logger.info("Sent mail '%s' to %s", subject, to)

    def _deliver(self, smtp: smtplib.SMTP, msg: EmailMessage) -> None:
        if self.username:
            smtp.login(self.username, self.password or "")
        smtp.send_message(msg)


# ---------------------------------------------------------------------------
# Message templates
# ---------------------------------------------------------------------------

def send_unlock_code(mailer: Mailer, *, to: str, name: str, code: str, is_new: bool) -> None:
    """Donation receipt carrying the unlock code.

    First-time donors get the welcome wording, repeat donors a thank-you
    with the same code again.
    """
    if is_new:
        subject = "🎉 Your Snippy Unlock Code"
        body = f"Thanks for donating, {name}!\n\nHere is your Snippy unlock code:\n\n{code}"
    else:
        subject = "🔁 You're already awesome – here's your code again"
        body = (
            "You donated again! Snippy loves you.\n\n"
            f"Here's your unlock code again just in case:\n\n{code}"
        )
    mailer.send(to, subject, body)


def send_code_reminder(mailer: Mailer, *, to: str, code: str) -> None:
    mailer.send(
        to,
        "🔁 Your Snippy Unlock Code (Resent)",
        f"You asked for your unlock code. Here it is:\n\n{code}\n\n"
        "Paste this into Snippy's Settings to unlock premium features.",
    )


def forward_feedback(
    mailer: Mailer,
    *,
    target: str,
    name: str,
    email: str,
    kind: str,
    message: str,
) -> None:
    """Relay a feedback form to the team inbox, replying to the sender."""
    mailer.send(
        target,
        f"Snippy Feedback from {name}",
        f"Name: {name}\nEmail: {email}\nType: {kind}\n\n{message}",
        reply_to=email,
        from_name=f"Feedback from {name}",
    )
