"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid ADMIN_SECRET is always set for test runs.
# This must happen before any import of snippy.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_ADMIN_SECRET = "test-operator-secret-" + "x" * 24
os.environ.setdefault("ADMIN_SECRET", _TEST_ADMIN_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from snippy.config import SnippyConfig  # noqa: E402
from snippy.database.models import Base  # noqa: E402


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Snippy tables.

    Uses StaticPool so all threads share the same in-memory database
    (FastAPI runs sync routes on a worker thread).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def snippy_config() -> SnippyConfig:
    return SnippyConfig(
        product_name="Snippy",
        smtp_host="smtp.test.invalid",
        smtp_port=465,
        smtp_use_ssl=True,
        mail_from_name="Snippy Bot",
        feedback_bug_address="bugs@test.invalid",
        feedback_idea_address="ideas@test.invalid",
        approved_pool_size=100,
    )


class RecordingMailer:
    """Stands in for :class:`snippy.services.notification_service.Mailer`."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[dict] = []
        self.fail = fail

    def send(self, to, subject, body, *, reply_to=None, from_name=None) -> None:
        if self.fail:
            raise OSError("SMTP relay unreachable")
        self.sent.append({
            "to": to,
            "subject": subject,
            "body": body,
            "reply_to": reply_to,
            "from_name": from_name,
        })


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def admin_secret() -> str:
    from snippy.api.deps import ADMIN_SECRET
    return ADMIN_SECRET


@pytest.fixture
def client(db_engine, snippy_config, mailer):
    """FastAPI TestClient wired to the in-memory engine and recording mailer."""
    from fastapi.testclient import TestClient

    from snippy.api.deps import get_config, get_engine, get_mailer
    from snippy.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: snippy_config
    app.dependency_overrides[get_mailer] = lambda: mailer
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
