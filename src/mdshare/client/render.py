"""
Markdown rendering for the preview surface.

Python-Markdown does the parsing; Pygments (through the ``codehilite``
extension) highlights fenced code blocks.
"""

from __future__ import annotations

import markdown

RENDER_ERROR_HTML = '<p class="error">Error rendering Markdown.</p>'

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists", "nl2br", "codehilite"]
EXTENSION_CONFIGS = {
    "codehilite": {"css_class": "hljs", "guess_lang": False},
}


def render_markdown(text: str) -> str:
    """Convert markdown to HTML. Line breaks inside paragraphs are kept."""
    return markdown.markdown(
        text,
        extensions=MARKDOWN_EXTENSIONS,
        extension_configs=EXTENSION_CONFIGS,
    )
