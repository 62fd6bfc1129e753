"""
snippy.engine.sanitizer — Allow-List HTML Filter
=================================================

Pure functions, no I/O.  Every free-text field a user or admin can put in
front of other users goes through :func:`sanitize` before it is stored.

Three passes, in order:

1. ``<script …>…</script>`` blocks are removed whole, contents included.
2. Any ``<…>`` sequence whose tag name (case-insensitive, opening or
   closing) is not in the allow-list is removed.  Its inner text stays.
3. Inline event handlers of the shape ``on<word>="…"`` are removed.

Known limitations — this is a best-effort filter, **not** an HTML parser
and not a guarantee of XSS safety:

* Nested or malformed markup gets no special handling; a stray ``<`` in
  prose can swallow text up to the next ``>``.
* Only double-quoted ``on*`` attributes are stripped.  Single-quoted or
  unquoted handlers on an allowed tag survive.
* Attributes other than ``on*`` (``style``, ``href`` …) on allowed tags
  are left alone.
* An unterminated ``<script>`` is treated as an ordinary disallowed tag.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

__all__ = [
    "ANNOUNCEMENT_TAGS",
    "INSULT_TAGS",
    "sanitize",
    "sanitize_announcement",
    "sanitize_insult",
]

INSULT_TAGS: frozenset[str] = frozenset({"b", "i", "u"})
ANNOUNCEMENT_TAGS: frozenset[str] = frozenset({"b", "i", "u", "ul", "li"})

_SCRIPT_BLOCK = re.compile(r"<script[\s\S]*?>[\s\S]*?</script\s*>", re.IGNORECASE)
_TAG = re.compile(r"<\s*/?\s*([a-zA-Z][a-zA-Z0-9]*)?[^>]*>")
_EVENT_HANDLER = re.compile(r'on\w+="[^"]*"', re.IGNORECASE)


def sanitize(html: str | None, allowed_tags: Iterable[str]) -> str:
    """Strip *html* down to *allowed_tags*.  Never raises."""
    if not html:
        return ""
    allowed = {tag.lower() for tag in allowed_tags}

    def _keep_allowed(match: re.Match[str]) -> str:
        name = (match.group(1) or "").lower()
        return match.group(0) if name in allowed else ""

    cleaned = _SCRIPT_BLOCK.sub("", html)
    cleaned = _TAG.sub(_keep_allowed, cleaned)
    return _EVENT_HANDLER.sub("", cleaned)


def sanitize_insult(text: str | None) -> str:
    """Insult text: bold, italic, underline only."""
    return sanitize(text, INSULT_TAGS)


def sanitize_announcement(body: str | None) -> str:
    """Announcement bodies additionally allow bullet lists."""
    return sanitize(body, ANNOUNCEMENT_TAGS)
