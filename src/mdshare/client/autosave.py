"""
Autosave Coordinator

Turns editor changes into server saves.

Flow:
    1. ``handle_content_change`` merges the new text and, for an existing
       note owned by this client, shows "saving" and (re)arms the debounce
       timer. Typing bursts collapse into one save per quiet period.
    2. When the timer fires, ``save_changes`` re-reads the state, skips the
       request when nothing changed since the last confirmed save, and
       otherwise sends an update.
    3. New notes are never autosaved; ``save_new_note`` creates them on an
       explicit save or share.

Failures never raise: the indicator switches to "error" and the server
message is shown. There is no automatic retry; the next edit or manual
save tries again.

Every session flow (new note, load) bumps a generation counter. A response
that comes back after the session moved on is not merged into the state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from mdshare.client.api import NoteService
from mdshare.client.cache import KeyValueCache, store_note_token
from mdshare.client.history import RecentNotesHistory
from mdshare.client.render import RENDER_ERROR_HTML, render_markdown
from mdshare.client.state import AppStateStore, RecentNote, SaveStatus
from mdshare.client.timer import CancelableTimer
from mdshare.client.utils import get_title_from_content
from mdshare.client.view import NoteView
from mdshare.schemas.notes import NoteCreated

logger = logging.getLogger(__name__)


class AutosaveCoordinator:
    """
    Owner of the debounce timer and of every content save.

    Args:
        store: Session state (read by snapshot, written by merge).
        service: Remote note service.
        history: Recent-notes history, refreshed after each save.
        view: UI collaborator (status, notifications, preview, share link).
        cache: Key-value cache receiving creator tokens.
        link_base: Public base URL for share links.
        renderer: Markdown to HTML function for the preview.
    """

    def __init__(
        self,
        store: AppStateStore,
        service: NoteService,
        history: RecentNotesHistory,
        view: NoteView,
        cache: KeyValueCache,
        link_base: str = "",
        renderer: Callable[[str], str] = render_markdown,
    ) -> None:
        self._store = store
        self._service = service
        self._history = history
        self._view = view
        self._cache = cache
        self._link_base = link_base.rstrip("/")
        self._renderer = renderer
        self._timer = CancelableTimer()
        self._generation = 0

    @property
    def timer(self) -> CancelableTimer:
        return self._timer

    def share_url(self, unique_id: str) -> str:
        return f"{self._link_base}/?view={unique_id}"

    def edit_url(self, note_id: int) -> str:
        return f"{self._link_base}/?edit={note_id}"

    def set_status(self, status: SaveStatus) -> None:
        self._store.merge(save_status=status)
        self._view.set_save_status(status)

    # ------------------------------------------------------------------
    # Session boundaries
    # ------------------------------------------------------------------

    def reset_session(self) -> None:
        """
        Forget the pending autosave and start a new session generation.

        Saves already in flight still complete on the server, but their
        results are no longer merged into the state.
        """
        self._timer.cancel()
        self._generation += 1

    # ------------------------------------------------------------------
    # Editor events
    # ------------------------------------------------------------------

    def handle_content_change(self, content: str) -> None:
        """Record a keystroke's worth of new content and schedule an autosave."""
        self._store.merge(content=content)

        if self._view.preview_visible:
            self.update_preview()

        state = self._store.snapshot()
        if state.is_creator and not state.is_new_note:
            self.set_status(SaveStatus.SAVING)  # optimistic, before any request
            self._timer.arm(state.save_interval_ms, self.save_changes)

    def update_preview(self) -> None:
        """Render the current content into the preview surface."""
        content = self._store.snapshot().content
        try:
            html = self._renderer(content)
        except Exception:
            logger.exception("Error rendering Markdown")
            html = RENDER_ERROR_HTML
        self._view.show_preview(html)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    async def save_changes(self) -> None:
        """
        Persist the content of an existing, owned note.

        Runs when the debounce timer fires and on manual save. Reads the
        state fresh on every call.
        """
        state = self._store.snapshot()
        if state.current_note_id is None or not state.creator_token:
            logger.debug("Save skipped: no editable note in session")
            return

        if state.content == state.last_saved_content:
            self.set_status(SaveStatus.SAVED)
            return

        generation = self._generation
        self.set_status(SaveStatus.SAVING)
        result = await self._service.update_note(
            state.current_note_id, state.content, state.creator_token
        )

        if generation != self._generation:
            logger.info(
                "Dropping save result for note %s: session changed",
                state.current_note_id,
            )
            return

        if not result.ok:
            self.set_status(SaveStatus.ERROR)
            self._view.show_notification(f"Save failed: {result.error}")
            if result.expired:
                self._view.show_expired_modal()
            return

        self._store.merge(last_saved_content=state.content)
        # Newer keystrokes already re-armed the timer; keep showing "saving"
        if not self._timer.pending:
            self.set_status(SaveStatus.SAVED)
        if self._history.update_title(
            state.current_note_id,
            get_title_from_content(state.content),
            state.unique_id,
        ):
            self._view.render_recent_notes(self._history.notes)
        logger.info("Saved note %s", state.current_note_id)

    async def save_new_note(self) -> NoteCreated | None:
        """
        First save of a new note.

        Returns:
            The created note identifiers, or None when nothing was created.
        """
        content = self._store.snapshot().content
        if not content.strip():
            self._view.show_notification("Cannot save an empty note.")
            return None

        generation = self._generation
        self.set_status(SaveStatus.SAVING)
        result = await self._service.create_note(content)

        if not result.ok or result.data is None:
            if generation == self._generation:
                self.set_status(SaveStatus.ERROR)
                self._view.show_notification(f"Failed to create note: {result.error}")
            return None

        created = result.data
        store_note_token(self._cache, created.id, created.creator_token)
        self._history.add_or_update(
            RecentNote(
                id=created.id,
                unique_id=created.unique_id,
                title=get_title_from_content(content),
                view_only=False,
            )
        )
        self._view.render_recent_notes(self._history.notes)

        if generation != self._generation:
            logger.info("Note %s created after the session changed", created.id)
            return created

        self._store.merge(
            current_note_id=created.id,
            unique_id=created.unique_id,
            creator_token=created.creator_token,
            is_creator=True,
            is_new_note=False,
            last_saved_content=content,
        )
        self.set_status(SaveStatus.SAVED)
        self._view.display_share_link(self.share_url(created.unique_id))
        logger.info("Created note %s", created.id)

        # Text typed while the create request was in flight goes through autosave
        state = self._store.snapshot()
        if state.content != content:
            self.set_status(SaveStatus.SAVING)
            self._timer.arm(state.save_interval_ms, self.save_changes)

        return created

    async def trigger_manual_save(self) -> None:
        """
        Explicit save (e.g. Ctrl+S): no debounce.

        New notes go through the first-save flow, owned notes are saved
        right away, view-only sessions are left alone.
        """
        state = self._store.snapshot()
        if state.is_new_note:
            self._timer.cancel()
            await self.save_new_note()
        elif state.is_creator:
            self._timer.cancel()
            await self.save_changes()

    async def flush(self) -> None:
        """Run a pending autosave now and wait for every save in flight."""
        if self._timer.cancel():
            await self.save_changes()
        await self._timer.wait_idle()
