"""
snippy.constants — Shared Constants
====================================

Single source of truth for the bot identity, public display labels and
the fixed moderation reasons.  Import from here instead of duplicating in
services and routes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Bot identity (admin-inserted insults are attributed to Snippy itself)
# ---------------------------------------------------------------------------
BOT_NAME = "Snippy"
BOT_EMAIL = "snippybot@snippyforquickbase.com"

# ---------------------------------------------------------------------------
# Public display
# ---------------------------------------------------------------------------
ANONYMOUS_LABEL = "Anonymous"
DEFAULT_ANNOUNCEMENT_CATEGORY = "What's New"

# Upper bound (and default) for the public insult pool
MAX_APPROVED_POOL = 100

# ---------------------------------------------------------------------------
# Moderation reasons
# ---------------------------------------------------------------------------
DUPLICATE_REJECTION_REASON = "This insult was already submitted."
DEFAULT_REJECTION_REASON = "Rejected by moderator."

