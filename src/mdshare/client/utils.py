"""Pure helpers shared by the client: display titles and expiry labels."""

from __future__ import annotations

import re

UNTITLED_NOTE = "Untitled Note"
TITLE_MAX_LENGTH = 30

_HEADING_RE = re.compile(r"^# (.+)$", re.MULTILINE)

_EXPIRATION_LABELS = {
    "1h": "1 hour",
    "1d": "1 day",
    "7d": "7 days",
    "none": "No expiration",
}


def get_title_from_content(content: str | None) -> str:
    """
    Derive a short display title for a note.

    First-level heading text wins; otherwise the first non-empty line,
    truncated to ``TITLE_MAX_LENGTH`` characters plus ``...``.
    Empty or whitespace-only content is ``Untitled Note``.
    """
    if not content:
        return UNTITLED_NOTE

    heading = _HEADING_RE.search(content)
    if heading and heading.group(1).strip():
        return heading.group(1).strip()

    for line in content.splitlines():
        line = line.strip()
        if line:
            if len(line) > TITLE_MAX_LENGTH:
                return line[:TITLE_MAX_LENGTH] + "..."
            return line

    return UNTITLED_NOTE


def get_expiration_text(option: str) -> str:
    """Human label for an expiration option; unknown options are echoed."""
    return _EXPIRATION_LABELS.get(option, option)
