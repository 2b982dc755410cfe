"""
Recent-Notes History

Bounded, most-recent-first list of visited notes, mirrored in the
state store and persisted to the key-value cache after every change.
"""

from __future__ import annotations

import json
import logging

from mdshare.client.cache import KeyValueCache
from mdshare.client.config import RECENT_NOTES_STORAGE_KEY
from mdshare.client.state import AppStateStore, RecentNote, utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_RECENT_NOTES_LIMIT = 10


class RecentNotesHistory:
    """
    Recent-notes operations over a store and a cache.

    Every mutation writes the full list back to the cache; the list is
    small and capped, so there is no batching.
    """

    def __init__(
        self,
        store: AppStateStore,
        cache: KeyValueCache,
        limit: int = DEFAULT_RECENT_NOTES_LIMIT,
    ) -> None:
        self._store = store
        self._cache = cache
        self.limit = limit

    @property
    def notes(self) -> list[RecentNote]:
        return self._store.snapshot().recent_notes

    def load(self) -> list[RecentNote]:
        """
        Read the stored list into the state store.

        Corrupt data is logged and treated as an empty history.
        """
        raw = self._cache.get(RECENT_NOTES_STORAGE_KEY)
        notes: list[RecentNote] = []
        if raw:
            try:
                notes = [RecentNote.from_dict(item) for item in json.loads(raw)]
            except (ValueError, TypeError, AttributeError) as e:
                logger.error("Error parsing stored notes: %s", e)
                notes = []
        self._store.merge(recent_notes=notes)
        return notes

    def _persist(self, notes: list[RecentNote]) -> None:
        self._store.merge(recent_notes=notes)
        self._cache.set(
            RECENT_NOTES_STORAGE_KEY,
            json.dumps([n.to_dict() for n in notes]),
        )

    def add_or_update(self, note: RecentNote) -> None:
        """
        Insert ``note`` at the front, replacing any entry for the same note.

        Matching uses ``id`` when the new entry has one, ``unique_id``
        otherwise. The oldest entries beyond ``limit`` are dropped.
        """
        notes = self.notes
        if note.id is not None:
            index = next((i for i, n in enumerate(notes) if n.id == note.id), -1)
        else:
            index = next(
                (i for i, n in enumerate(notes) if n.unique_id == note.unique_id), -1
            )
        if index > -1:
            notes.pop(index)
        notes.insert(0, note)
        self._persist(notes[: self.limit])

    def update_title(
        self,
        note_id: int | None,
        title: str,
        unique_id: str | None = None,
    ) -> bool:
        """
        Refresh title and timestamp of an existing entry and move it to the front.

        Returns:
            False when no entry matches ``note_id`` or ``unique_id``.
        """
        notes = self.notes
        index = next(
            (i for i, n in enumerate(notes) if n.matches(note_id, unique_id)), -1
        )
        if index == -1:
            return False
        entry = notes.pop(index)
        entry.title = title
        entry.updated_at = utc_now_iso()
        notes.insert(0, entry)
        self._persist(notes)
        return True

    def remove(self, note_id: int | None, unique_id: str | None = None) -> None:
        """Drop every entry matching ``note_id`` or ``unique_id``."""
        notes = [n for n in self.notes if not n.matches(note_id, unique_id)]
        self._persist(notes)

    def clear(self) -> None:
        self._store.merge(recent_notes=[])
        self._cache.remove(RECENT_NOTES_STORAGE_KEY)
