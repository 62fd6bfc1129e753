"""
tests/test_insult_service.py — Insult Moderation Engine
========================================================
Submission and duplicate detection, moderation transitions, the public
random pool and click tracking.

Two identical submissions racing each other can both end up ``pending``
(check-then-insert is not atomic).  That window is accepted and is not
asserted against here.
"""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from snippy.constants import (
    ANONYMOUS_LABEL,
    BOT_EMAIL,
    BOT_NAME,
    DEFAULT_REJECTION_REASON,
    DUPLICATE_REJECTION_REASON,
)
from snippy.database.models import REJECTED_STATUSES, Insult, InsultStatus
from snippy.errors import ValidationError
from snippy.services import insult_service


def _submit(engine, text="You smell", email="ada@example.com", name="Ada", show_name=True):
    return insult_service.submit(
        engine,
        text=text,
        submitted_by_email=email,
        submitted_by_name=name,
        show_name=show_name,
    )


def _get(engine, insult_id) -> Insult:
    with Session(engine) as session:
        return session.get(Insult, insult_id)


def _all(engine) -> list[Insult]:
    with Session(engine) as session:
        return list(session.scalars(select(Insult)).all())


def _approved(engine, text, **kw) -> int:
    result = _submit(engine, text=text, **kw)
    insult_service.approve(engine, result.id, "mod@example.com")
    return result.id


def _assert_status_invariants(engine):
    rejected = {s.value for s in REJECTED_STATUSES}
    for row in _all(engine):
        assert row.status in {s.value for s in InsultStatus}
        assert (row.rejection_reason is not None) == (row.status in rejected)


# ===========================================================================
# Submission
# ===========================================================================
class TestSubmit:
    def test_fresh_text_is_pending(self, db_engine):
        result = _submit(db_engine)
        assert result.status == "pending"
        row = _get(db_engine, result.id)
        assert row.status == InsultStatus.PENDING
        assert row.rejection_reason is None

    def test_duplicate_is_case_and_whitespace_insensitive(self, db_engine):
        first = _submit(db_engine, text="You smell")
        second = _submit(db_engine, text="  you SMELL  ", email="bob@example.com")

        assert first.status == "pending"
        assert second.status == "duplicate"
        row = _get(db_engine, second.id)
        assert row.status == InsultStatus.REJECTED_DUPLICATE
        assert row.rejection_reason == DUPLICATE_REJECTION_REASON

    def test_duplicate_checked_against_every_status(self, db_engine):
        first = _submit(db_engine, text="Nope")
        insult_service.reject(db_engine, first.id, "meh")
        assert _submit(db_engine, text="nope").status == "duplicate"

    def test_duplicate_detection_uses_sanitized_text(self, db_engine):
        _submit(db_engine, text="<span>Sneaky</span>")
        assert _submit(db_engine, text="sneaky").status == "duplicate"

    def test_stored_text_is_sanitized_on_both_branches(self, db_engine):
        fresh = _submit(db_engine, text="<b>hi</b><script>x()</script>")
        dup = _submit(db_engine, text="<B>HI</B>")
        assert _get(db_engine, fresh.id).text == "<b>hi</b>"
        assert _get(db_engine, dup.id).text == "<B>HI</B>"

    def test_text_empty_after_sanitizing_rejected(self, db_engine):
        with pytest.raises(ValidationError):
            _submit(db_engine, text="<script>alert(1)</script>")

    def test_missing_email_rejected(self, db_engine):
        with pytest.raises(ValidationError):
            _submit(db_engine, email="")


# ===========================================================================
# Queries
# ===========================================================================
class TestQueries:
    def test_list_by_email_newest_first(self, db_engine):
        ids = [_submit(db_engine, text=f"insult {n}").id for n in range(3)]
        _submit(db_engine, text="other", email="bob@example.com")

        rows = insult_service.list_by_email(db_engine, "ada@example.com")
        assert [r.id for r in rows] == list(reversed(ids))

    def test_list_by_status(self, db_engine):
        keep = _submit(db_engine, text="one").id
        gone = _submit(db_engine, text="two").id
        insult_service.reject(db_engine, gone)

        assert [r.id for r in insult_service.list_by_status(db_engine, "pending")] == [keep]
        assert [r.id for r in insult_service.list_by_status(db_engine, "rejected")] == [gone]

    def test_list_by_unknown_status(self, db_engine):
        with pytest.raises(ValidationError):
            insult_service.list_by_status(db_engine, "Rejected - Duplicate")


# ===========================================================================
# Moderation
# ===========================================================================
class TestModeration:
    def test_approve_sets_approver(self, db_engine):
        insult_id = _submit(db_engine).id
        assert insult_service.approve(db_engine, insult_id, "mod@example.com")
        row = _get(db_engine, insult_id)
        assert row.status == InsultStatus.APPROVED
        assert row.approved_by_email == "mod@example.com"

    def test_reapprove_is_allowed(self, db_engine):
        insult_id = _submit(db_engine).id
        assert insult_service.approve(db_engine, insult_id, "a@example.com")
        assert insult_service.approve(db_engine, insult_id, "b@example.com")
        assert _get(db_engine, insult_id).approved_by_email == "b@example.com"

    def test_approve_requires_approver(self, db_engine):
        insult_id = _submit(db_engine).id
        with pytest.raises(ValidationError):
            insult_service.approve(db_engine, insult_id, "")

    def test_reject_with_reason(self, db_engine):
        insult_id = _submit(db_engine).id
        assert insult_service.reject(db_engine, insult_id, "Too mean")
        row = _get(db_engine, insult_id)
        assert row.status == InsultStatus.REJECTED
        assert row.rejection_reason == "Too mean"

    def test_reject_without_reason_uses_default(self, db_engine):
        insult_id = _submit(db_engine).id
        insult_service.reject(db_engine, insult_id, "   ")
        assert _get(db_engine, insult_id).rejection_reason == DEFAULT_REJECTION_REASON

    def test_unknown_id_reports_no_change(self, db_engine):
        assert insult_service.approve(db_engine, 999, "mod@example.com") is False
        assert insult_service.reject(db_engine, 999) is False
        assert insult_service.delete_by_id(db_engine, 999) is False

    def test_delete(self, db_engine):
        insult_id = _submit(db_engine).id
        assert insult_service.delete_by_id(db_engine, insult_id)
        assert _get(db_engine, insult_id) is None

    def test_status_and_reason_stay_consistent(self, db_engine):
        a = _submit(db_engine, text="a").id
        b = _submit(db_engine, text="b").id
        _submit(db_engine, text="A")  # duplicate
        insult_service.reject(db_engine, a, "no")
        insult_service.approve(db_engine, a, "mod@example.com")  # rejected → approved
        insult_service.approve(db_engine, b, "mod@example.com")
        insult_service.reject(db_engine, b)  # approved → rejected
        insult_service.insert_approved(db_engine, "bot line")

        _assert_status_invariants(db_engine)
        assert _get(db_engine, b).approved_by_email is None


# ===========================================================================
# Bot-authored insults
# ===========================================================================
class TestInsertApproved:
    def test_inserted_directly_as_approved(self, db_engine):
        result = insult_service.insert_approved(db_engine, "<i>Beep</i><img src=x>")
        assert result.status == "approved"
        row = _get(db_engine, result.id)
        assert row.text == "<i>Beep</i>"
        assert row.submitted_by_name == BOT_NAME
        assert row.submitted_by_email == BOT_EMAIL
        assert row.approved_by_email == BOT_EMAIL
        assert row.show_name is True

    def test_no_duplicate_check(self, db_engine):
        _submit(db_engine, text="Same")
        assert insult_service.insert_approved(db_engine, "same").status == "approved"


# ===========================================================================
# Public pool
# ===========================================================================
class TestApprovedPool:
    def test_only_approved_rows(self, db_engine):
        approved = _approved(db_engine, "approved one")
        _submit(db_engine, text="still pending")
        rejected = _submit(db_engine, text="rejected").id
        insult_service.reject(db_engine, rejected)

        pool = insult_service.list_approved_random(db_engine)
        assert [p.id for p in pool] == [approved]

    def test_anonymization(self, db_engine):
        hidden = _approved(db_engine, "hidden", name="Secret Sam", show_name=False)
        shown = _approved(db_engine, "shown", email="bob@example.com", name="Bob")
        nameless = _approved(db_engine, "nameless", email="x@example.com", name=None)

        names = {p.id: p.display_name for p in insult_service.list_approved_random(db_engine)}
        assert names[hidden] == ANONYMOUS_LABEL
        assert names[shown] == "Bob"
        assert names[nameless] == ANONYMOUS_LABEL
        assert "Secret Sam" not in names.values()

    @pytest.mark.parametrize("limit,expected", [(0, 1), (-5, 1), (2, 2), (500, 4)])
    def test_limit_is_clamped(self, db_engine, limit, expected):
        for n in range(4):
            _approved(db_engine, f"line {n}")
        assert len(insult_service.list_approved_random(db_engine, limit)) == expected

    def test_random_single_pick_varies(self, db_engine):
        for n in range(5):
            _approved(db_engine, f"pick {n}")
        seen = {insult_service.list_approved_random(db_engine, 1)[0].id for _ in range(60)}
        # P(all 60 draws identical) = 5 * (1/5)**60
        assert len(seen) > 1

    def test_empty_pool(self, db_engine):
        assert insult_service.list_approved_random(db_engine, 1) == []


# ===========================================================================
# Click tracking
# ===========================================================================
class TestClicks:
    def test_increment(self, db_engine):
        insult_id = _approved(db_engine, "clicky")
        insult_service.increment_click(db_engine, insult_id)
        insult_service.increment_click(db_engine, insult_id)
        assert _get(db_engine, insult_id).click_count == 2

    def test_unknown_id_still_succeeds(self, db_engine):
        assert insult_service.increment_click(db_engine, 424242) is True
