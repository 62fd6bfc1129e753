"""
tests/test_admin_secret_startup.py — Operator Secret Validation at Startup
===========================================================================
The API must refuse to start when ADMIN_SECRET is missing, blank, too
short, or a known weak default.
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from snippy.api import deps


class TestAdminSecretValidation:
    """Prove that _load_admin_secret() rejects bad secrets and accepts good ones."""

    def test_rejects_missing_secret(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("ADMIN_SECRET", None)
            with pytest.raises(RuntimeError, match="ADMIN_SECRET environment variable is not set"):
                deps._load_admin_secret()

    def test_rejects_blank_secret(self):
        with patch.dict(os.environ, {"ADMIN_SECRET": "   "}):
            with pytest.raises(RuntimeError, match="ADMIN_SECRET environment variable is not set"):
                deps._load_admin_secret()

    @pytest.mark.parametrize("weak", ["change-me", "Secret", "snippy-admin-secret-change-me"])
    def test_rejects_known_weak_default(self, weak):
        with patch.dict(os.environ, {"ADMIN_SECRET": weak}):
            with pytest.raises(RuntimeError, match="known weak default"):
                deps._load_admin_secret()

    def test_rejects_short_secret(self):
        with patch.dict(os.environ, {"ADMIN_SECRET": "tooshort"}):
            with pytest.raises(RuntimeError, match="too short"):
                deps._load_admin_secret()

    def test_accepts_strong_secret(self):
        good_secret = "a" * 40
        with patch.dict(os.environ, {"ADMIN_SECRET": good_secret}):
            assert deps._load_admin_secret() == good_secret


class TestOperatorCheck:
    def test_matches_only_the_configured_secret(self):
        assert deps.is_operator(deps.ADMIN_SECRET)
        assert not deps.is_operator(deps.ADMIN_SECRET + "x")
        assert not deps.is_operator("")
        assert not deps.is_operator(None)

    def test_any_candidate_may_carry_it(self):
        deps.require_operator(None, "wrong", deps.ADMIN_SECRET)

    def test_forbidden_without_it(self):
        from fastapi import HTTPException

        with pytest.raises(HTTPException) as exc_info:
            deps.require_operator(None, "wrong")
        assert exc_info.value.status_code == 403
