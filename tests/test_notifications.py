"""
tests/test_notifications.py — Outbound Email
=============================================
SMTP is patched out; these tests check message construction, transport
selection and the templates.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from snippy.services import notification_service
from snippy.services.notification_service import Mailer


@pytest.fixture
def ssl_mailer() -> Mailer:
    return Mailer(
        host="smtp.test.invalid",
        port=465,
        use_ssl=True,
        username="bot@snippy.test",
        password="pw",
        from_name="Snippy Bot",
    )


class TestMailer:
    def test_from_config_reads_credentials_from_env(self, snippy_config, monkeypatch):
        monkeypatch.setenv("SMTP_USER", "bot@snippy.test")
        monkeypatch.setenv("SMTP_PASS", "hunter2")
        mailer = Mailer.from_config(snippy_config)
        assert mailer.host == "smtp.test.invalid"
        assert mailer.port == 465
        assert mailer.use_ssl is True
        assert mailer.username == "bot@snippy.test"
        assert mailer.password == "hunter2"
        assert mailer.from_name == "Snippy Bot"

    def test_build_message_headers(self, ssl_mailer):
        msg = ssl_mailer.build_message(
            "ada@example.com", "Hi", "Body", reply_to="r@example.com", from_name="Feedback from Ada",
        )
        assert msg["To"] == "ada@example.com"
        assert msg["Subject"] == "Hi"
        assert msg["Reply-To"] == "r@example.com"
        (sender,) = msg["From"].addresses
        assert sender.display_name == "Feedback from Ada"
        assert sender.addr_spec == "bot@snippy.test"
        assert msg.get_content().strip() == "Body"

    def test_ssl_transport(self, ssl_mailer):
        with patch.object(notification_service.smtplib, "SMTP_SSL") as smtp_ssl:
            server = smtp_ssl.return_value.__enter__.return_value
            ssl_mailer.send("ada@example.com", "Hi", "Body")

        assert smtp_ssl.call_args.args == ("smtp.test.invalid", 465)
        server.login.assert_called_once_with("bot@snippy.test", "pw")
        server.send_message.assert_called_once()

    def test_starttls_transport(self, ssl_mailer):
        mailer = Mailer(
            host="relay.test.invalid", port=587, use_ssl=False,
            username=None, password=None, from_name="Snippy Bot",
        )
        with patch.object(notification_service.smtplib, "SMTP") as smtp:
            server = smtp.return_value.__enter__.return_value
            mailer.send("ada@example.com", "Hi", "Body")

        server.starttls.assert_called_once()
        server.login.assert_not_called()
        server.send_message.assert_called_once()

    def test_delivery_failure_propagates(self, ssl_mailer):
        with patch.object(notification_service.smtplib, "SMTP_SSL", side_effect=OSError("down")):
            with pytest.raises(OSError):
                ssl_mailer.send("ada@example.com", "Hi", "Body")


class TestTemplates:
    def test_unlock_code_new_donor(self):
        mailer = MagicMock()
        notification_service.send_unlock_code(
            mailer, to="ada@example.com", name="Ada", code="abc-123", is_new=True,
        )
        to, subject, body = mailer.send.call_args.args
        assert to == "ada@example.com"
        assert subject == "🎉 Your Snippy Unlock Code"
        assert body.startswith("Thanks for donating, Ada!")
        assert "abc-123" in body

    def test_unlock_code_repeat_donor(self):
        mailer = MagicMock()
        notification_service.send_unlock_code(
            mailer, to="ada@example.com", name="Ada", code="abc-123", is_new=False,
        )
        _, subject, body = mailer.send.call_args.args
        assert "already awesome" in subject
        assert "You donated again!" in body
        assert "abc-123" in body

    def test_code_reminder(self):
        mailer = MagicMock()
        notification_service.send_code_reminder(mailer, to="ada@example.com", code="abc-123")
        _, subject, body = mailer.send.call_args.args
        assert subject == "🔁 Your Snippy Unlock Code (Resent)"
        assert "abc-123" in body

    def test_forward_feedback(self):
        mailer = MagicMock()
        notification_service.forward_feedback(
            mailer, target="bugs@test.invalid", name="Ada", email="ada@example.com",
            kind="bug", message="It broke",
        )
        args, kwargs = mailer.send.call_args
        assert args[0] == "bugs@test.invalid"
        assert args[1] == "Snippy Feedback from Ada"
        assert "Type: bug" in args[2]
        assert args[2].endswith("It broke")
        assert kwargs == {"reply_to": "ada@example.com", "from_name": "Feedback from Ada"}
