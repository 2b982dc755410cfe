"""
View collaborator

The surface the client engine drives: save indicator, notifications,
expiry dialog, editor contents, share link, preview and history list.
``NoteView`` is the contract; ``ConsoleView`` is the terminal rendition
used by the command-line client.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import Protocol, TextIO

from mdshare.client.state import RecentNote, SaveStatus

STATUS_LABELS = {
    SaveStatus.READY: "Ready",
    SaveStatus.SAVING: "Saving...",
    SaveStatus.SAVED: "Saved",
    SaveStatus.ERROR: "Error saving",
}


class NoteView(Protocol):
    """UI operations used by the autosave coordinator and the session flows."""

    preview_visible: bool

    def set_save_status(self, status: SaveStatus) -> None: ...

    def show_notification(self, message: str) -> None: ...

    def show_expired_modal(self) -> None: ...

    def set_editor_value(self, content: str) -> None: ...

    def set_editor_disabled(self, disabled: bool) -> None: ...

    def set_share_visible(self, visible: bool) -> None: ...

    def set_mode(self, mode: str) -> None: ...

    def set_expiration(self, expires_at: datetime | None) -> None: ...

    def display_share_link(self, url: str) -> None: ...

    def show_preview(self, html: str) -> None: ...

    def render_recent_notes(self, notes: list[RecentNote]) -> None: ...

    def confirm(self, message: str) -> bool: ...


class ConsoleView:
    """
    Terminal view: prints notifications and save-status transitions.

    Editor contents and rendered preview are kept as attributes for the
    caller to pick up; the terminal only shows messages.
    """

    def __init__(self, stream: TextIO | None = None, assume_yes: bool = False) -> None:
        self._stream = stream or sys.stderr
        self._assume_yes = assume_yes
        self.preview_visible = False
        self.status: SaveStatus | None = None
        self.editor_value = ""
        self.editor_disabled = False
        self.share_visible = False
        self.mode = "edit"
        self.expires_at: datetime | None = None
        self.share_link: str | None = None
        self.preview_html = ""
        self.recent_notes: list[RecentNote] = []

    def _print(self, msg: str) -> None:
        print(msg, file=self._stream, flush=True)

    def set_save_status(self, status: SaveStatus) -> None:
        if status != self.status:
            self.status = status
            self._print(f"• {STATUS_LABELS[status]}")

    def show_notification(self, message: str) -> None:
        self._print(f"ℹ {message}")

    def show_expired_modal(self) -> None:
        self._print("✗ This note has expired and is no longer available.")

    def set_editor_value(self, content: str) -> None:
        self.editor_value = content

    def set_editor_disabled(self, disabled: bool) -> None:
        self.editor_disabled = disabled

    def set_share_visible(self, visible: bool) -> None:
        self.share_visible = visible

    def set_mode(self, mode: str) -> None:
        self.mode = mode
        self.preview_visible = mode == "preview"

    def set_expiration(self, expires_at: datetime | None) -> None:
        self.expires_at = expires_at

    def display_share_link(self, url: str) -> None:
        self.share_link = url
        self._print(f"✓ Share link: {url}")

    def show_preview(self, html: str) -> None:
        self.preview_html = html

    def render_recent_notes(self, notes: list[RecentNote]) -> None:
        self.recent_notes = list(notes)

    def confirm(self, message: str) -> bool:
        if self._assume_yes:
            return True
        try:
            answer = input(f"{message} [y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")
