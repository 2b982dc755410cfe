"""
Session Flow Controller

Top-level flows of the client: start a new note, open a share link,
open an edit link, share, set expiration, and manage the history.
All saving goes through the ``AutosaveCoordinator``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from urllib.parse import parse_qs, urlparse

from mdshare.client.api import NoteService
from mdshare.client.autosave import AutosaveCoordinator
from mdshare.client.cache import KeyValueCache, get_note_token
from mdshare.client.history import RecentNotesHistory
from mdshare.client.state import AppStateStore, RecentNote, SaveStatus, utc_now_iso
from mdshare.client.utils import get_expiration_text, get_title_from_content
from mdshare.client.view import NoteView

logger = logging.getLogger(__name__)


def parse_link(link: str) -> tuple[str | None, int | None]:
    """
    Extract ``(view_id, edit_id)`` from a share/edit URL or bare query string.

    A non-numeric edit id is ignored.
    """
    if "://" in link:
        query = urlparse(link).query
    else:
        # Scheme-less links ("notes.example/?view=x") and bare query strings
        query = link.partition("?")[2] if "?" in link else link
    params = parse_qs(query)
    view_id = params.get("view", [None])[0]
    edit_raw = params.get("edit", [None])[0]
    edit_id = int(edit_raw) if edit_raw and edit_raw.isdigit() else None
    return view_id, edit_id


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value is not None else utc_now_iso()


class SessionFlowController:
    """Orchestrates session flows over the store, coordinator and service."""

    def __init__(
        self,
        store: AppStateStore,
        coordinator: AutosaveCoordinator,
        service: NoteService,
        history: RecentNotesHistory,
        view: NoteView,
        cache: KeyValueCache,
    ) -> None:
        self._store = store
        self._coordinator = coordinator
        self._service = service
        self._history = history
        self._view = view
        self._cache = cache

    async def initialize(
        self, view_id: str | None = None, edit_id: int | None = None
    ) -> None:
        """Startup: theme and history from the cache, then route by link."""
        self._store.initialize_theme(self._cache)
        self._history.load()
        self._refresh_history()

        if view_id:
            await self.load_for_view(view_id)
        elif edit_id is not None:
            await self.open_edit_link(edit_id)
        else:
            await self.new_note()

    async def _leave_session(self) -> None:
        # Pending edits of the previous note are saved before switching
        await self._coordinator.flush()
        self._coordinator.reset_session()

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    async def new_note(self) -> None:
        """Blank, unsaved note owned by this client."""
        await self._leave_session()
        self._store.merge(
            current_note_id=None,
            unique_id=None,
            creator_token=None,
            is_creator=True,
            is_new_note=True,
            content="",
            last_saved_content="",
        )
        self._view.set_editor_value("")
        self._coordinator.update_preview()
        self._coordinator.set_status(SaveStatus.READY)
        self._view.set_editor_disabled(False)
        self._view.set_share_visible(True)
        self._view.set_mode("edit")

    async def load_for_view(self, unique_id: str) -> bool:
        """
        Open a share link.

        The session becomes editable when this client holds the creator
        token of the note.
        """
        await self._leave_session()
        result = await self._service.fetch_for_view(unique_id)
        if not result.ok or result.data is None:
            if result.expired:
                self._view.show_expired_modal()
            else:
                self._view.show_notification(f"Failed to load note: {result.error}")
            return False

        note = result.data
        token = get_note_token(self._cache, note.id) if note.id is not None else None
        is_creator = bool(token)

        self._store.merge(
            content=note.content,
            unique_id=unique_id,
            current_note_id=note.id if is_creator else None,
            creator_token=token if is_creator else None,
            is_creator=is_creator,
            is_new_note=False,
            last_saved_content=note.content,
        )
        self._coordinator.set_status(SaveStatus.READY)
        self._view.set_editor_value(note.content)
        self._coordinator.update_preview()
        self._view.set_share_visible(is_creator)
        self._view.set_editor_disabled(not is_creator)
        self._view.set_expiration(note.expires_at)
        self._view.set_mode("edit" if is_creator else "preview")

        self._history.add_or_update(
            RecentNote(
                id=note.id if is_creator else None,
                unique_id=unique_id,
                title=get_title_from_content(note.content),
                updated_at=_iso(note.updated_at),
                view_only=not is_creator,
            )
        )
        self._refresh_history()
        return True

    async def load_for_edit(self, note_id: int, token: str) -> bool:
        """Open an edit link with a known token. Falls back to a new note on failure."""
        await self._leave_session()
        result = await self._service.fetch_for_edit(note_id, token)
        if not result.ok or result.data is None:
            if result.expired:
                self._view.show_expired_modal()
            else:
                self._view.show_notification(
                    f"Failed to load note for editing: {result.error}"
                )
            await self.new_note()
            return False

        note = result.data
        self._store.merge(
            current_note_id=note_id,
            unique_id=note.unique_id,
            creator_token=token,
            content=note.content,
            last_saved_content=note.content,
            is_creator=True,
            is_new_note=False,
        )
        self._coordinator.set_status(SaveStatus.READY)
        self._view.set_editor_value(note.content)
        self._coordinator.update_preview()
        self._view.set_editor_disabled(False)
        self._view.set_share_visible(True)
        self._view.set_mode("edit")
        self._view.set_expiration(note.expires_at)

        self._history.add_or_update(
            RecentNote(
                id=note_id,
                unique_id=note.unique_id,
                title=get_title_from_content(note.content),
                updated_at=_iso(note.updated_at),
                view_only=False,
            )
        )
        self._refresh_history()
        return True

    async def open_edit_link(self, note_id: int) -> bool:
        """Edit link: needs the creator token cached when the note was created."""
        token = get_note_token(self._cache, note_id)
        if token:
            return await self.load_for_edit(note_id, token)
        self._view.show_notification("Creator token not found. Opening as new note.")
        await self.new_note()
        return False

    async def open_link(self, link: str) -> None:
        """Route a pasted share or edit URL."""
        view_id, edit_id = parse_link(link)
        if view_id:
            await self.load_for_view(view_id)
        elif edit_id is not None:
            await self.open_edit_link(edit_id)
        else:
            self._view.show_notification(f"Not a note link: {link}")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def share(self) -> str | None:
        """
        Share the current note, creating it first if needed.

        Returns:
            The share link, or None when there is nothing to share yet.
        """
        state = self._store.snapshot()
        if state.is_new_note:
            if not state.content.strip():
                self._view.show_notification("Add content before sharing.")
                return None
            created = await self._coordinator.save_new_note()
            return self._coordinator.share_url(created.unique_id) if created else None

        if state.unique_id is None:
            return None
        url = self._coordinator.share_url(state.unique_id)
        self._view.display_share_link(url)
        return url

    async def update_expiration(self, option: str) -> bool:
        """Change the expiry of the current note (owner only)."""
        state = self._store.snapshot()
        if state.current_note_id is None or not state.creator_token:
            return False
        result = await self._service.set_expiration(
            state.current_note_id, state.creator_token, option
        )
        if not result.ok:
            self._view.show_notification(f"Failed to set expiration: {result.error}")
            return False
        if result.data is not None:
            self._view.set_expiration(result.data.expires_at)
        self._view.show_notification(
            f"Expiration set to: {get_expiration_text(option)}"
        )
        return True

    def toggle_theme(self) -> str:
        return self._store.toggle_theme(self._cache)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def recent_note_link(self, note: RecentNote) -> str:
        """View link for view-only entries, edit link otherwise."""
        if note.view_only or note.id is None:
            return self._coordinator.share_url(note.unique_id or "")
        return self._coordinator.edit_url(note.id)

    def remove_from_history(
        self, note_id: int | None, unique_id: str | None = None
    ) -> None:
        self._history.remove(note_id, unique_id)
        self._refresh_history()
        self._view.show_notification("Note removed from history.")

    def clear_history(self) -> bool:
        if not self._view.confirm("Are you sure you want to clear all note history?"):
            return False
        self._history.clear()
        self._refresh_history()
        self._view.show_notification("History cleared.")
        return True

    def _refresh_history(self) -> None:
        self._view.render_recent_notes(self._history.notes)
