"""
Application State Store

In-memory state of the current editing session.

Readers get a deep copy (``snapshot``); writers send only the fields
they change (``merge``). Nothing here touches the network, and only the
theme is persisted from this module; creator tokens and the recent-notes
list are persisted by their own helpers.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from mdshare.client.cache import KeyValueCache
from mdshare.client.config import DEFAULT_THEME, THEME_STORAGE_KEY, THEMES

logger = logging.getLogger(__name__)

DEFAULT_SAVE_INTERVAL_MS = 2000


class SaveStatus(str, Enum):
    """Save indicator shown to the user."""

    READY = "ready"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass
class RecentNote:
    """
    Entry of the recently visited notes history.

    Identity is ``id`` when known, ``unique_id`` otherwise. Serialized with
    camelCase keys so the stored list stays readable by other clients.
    """

    title: str
    id: int | None = None
    unique_id: str | None = None
    updated_at: str = field(default_factory=utc_now_iso)
    view_only: bool = False

    def matches(self, note_id: int | None, unique_id: str | None) -> bool:
        if note_id is not None and self.id == note_id:
            return True
        return unique_id is not None and self.unique_id == unique_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "uniqueId": self.unique_id,
            "title": self.title,
            "updatedAt": self.updated_at,
            "viewOnly": self.view_only,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecentNote:
        updated_at = data.get("updatedAt") or utc_now_iso()
        return cls(
            id=data.get("id"),
            unique_id=data.get("uniqueId"),
            title=str(data.get("title") or ""),
            updated_at=str(updated_at),
            view_only=bool(data.get("viewOnly", False)),
        )


@dataclass
class SessionState:
    """
    Snapshot of the editing session.

    Invariants kept by callers (``merge`` does not validate them):
        - ``is_new_note`` implies no ``current_note_id`` and no ``creator_token``.
        - ``is_creator`` False implies no ``creator_token``.
    """

    current_note_id: int | None = None
    unique_id: str | None = None
    creator_token: str | None = None
    is_creator: bool = False
    is_new_note: bool = True
    content: str = ""
    last_saved_content: str = ""
    save_interval_ms: int = DEFAULT_SAVE_INTERVAL_MS
    save_status: SaveStatus = SaveStatus.READY
    is_dirty: bool = False
    recent_notes: list[RecentNote] = field(default_factory=list)
    theme: str = DEFAULT_THEME


class AppStateStore:
    """Owner of the single mutable ``SessionState``."""

    def __init__(self, save_interval_ms: int = DEFAULT_SAVE_INTERVAL_MS) -> None:
        self._save_interval_ms = save_interval_ms
        self._state = self._initial_state()

    def _initial_state(self) -> SessionState:
        return SessionState(save_interval_ms=self._save_interval_ms)

    def snapshot(self) -> SessionState:
        """Deep copy of the current state; mutating it has no effect on the store."""
        return copy.deepcopy(self._state)

    def merge(self, **changes: Any) -> None:
        """
        Replace the given fields, keep every other one.

        ``is_dirty`` follows ``content`` vs ``last_saved_content`` whenever
        either of them is merged, unless the caller sets it explicitly.

        Raises:
            TypeError: A field name that ``SessionState`` does not define.
        """
        changes = copy.deepcopy(changes)
        self._state = dataclasses.replace(self._state, **changes)
        if "is_dirty" not in changes and (
            "content" in changes or "last_saved_content" in changes
        ):
            self._state.is_dirty = (
                self._state.content != self._state.last_saved_content
            )

    def reset(self) -> None:
        """Back to the initial snapshot (startup, tests)."""
        self._state = self._initial_state()

    # ------------------------------------------------------------------
    # Theme
    # ------------------------------------------------------------------

    def initialize_theme(self, cache: KeyValueCache) -> str:
        """Load the stored theme, falling back to the default."""
        stored = cache.get(THEME_STORAGE_KEY)
        theme = stored if stored in THEMES else DEFAULT_THEME
        self.merge(theme=theme)
        return theme

    def set_theme(self, cache: KeyValueCache, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: '{theme}'")
        self.merge(theme=theme)
        cache.set(THEME_STORAGE_KEY, theme)

    def toggle_theme(self, cache: KeyValueCache) -> str:
        theme = "dark" if self._state.theme == "light" else "light"
        self.set_theme(cache, theme)
        return theme
