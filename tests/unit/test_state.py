"""Unit tests for the application state store and recent-note entries."""

import pytest

from mdshare.client.cache import MemoryCache
from mdshare.client.state import AppStateStore, RecentNote, SaveStatus


class TestAppStateStore:
    def test_initial_state(self):
        state = AppStateStore(save_interval_ms=1500).snapshot()
        assert state.is_new_note is True
        assert state.current_note_id is None
        assert state.save_status == SaveStatus.READY
        assert state.save_interval_ms == 1500
        assert state.theme == "light"

    def test_merge_keeps_other_fields(self):
        store = AppStateStore()
        store.merge(content="a", unique_id="u1")
        store.merge(content="b")
        state = store.snapshot()
        assert state.content == "b"
        assert state.unique_id == "u1"

    def test_snapshot_is_isolated(self):
        store = AppStateStore()
        store.merge(recent_notes=[RecentNote(title="T", id=1)])

        snap = store.snapshot()
        snap.recent_notes.append(RecentNote(title="Other", id=2))
        snap.content = "mutated"

        assert len(store.snapshot().recent_notes) == 1
        assert store.snapshot().content == ""

    def test_merge_copies_inputs(self):
        store = AppStateStore()
        notes = [RecentNote(title="T", id=1)]
        store.merge(recent_notes=notes)
        notes[0].title = "changed outside"
        assert store.snapshot().recent_notes[0].title == "T"

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            AppStateStore().merge(not_a_field=1)

    def test_dirty_flag_follows_content(self):
        store = AppStateStore()
        store.merge(content="draft")
        assert store.snapshot().is_dirty is True
        store.merge(last_saved_content="draft")
        assert store.snapshot().is_dirty is False

    def test_reset(self):
        store = AppStateStore(save_interval_ms=100)
        store.merge(content="x", is_new_note=False)
        store.reset()
        state = store.snapshot()
        assert state.content == ""
        assert state.is_new_note is True
        assert state.save_interval_ms == 100


class TestTheme:
    def test_initialize_defaults_to_light(self):
        store = AppStateStore()
        assert store.initialize_theme(MemoryCache()) == "light"

    def test_initialize_reads_cache(self):
        store = AppStateStore()
        assert store.initialize_theme(MemoryCache({"theme": "dark"})) == "dark"
        assert store.snapshot().theme == "dark"

    def test_initialize_ignores_unknown_theme(self):
        store = AppStateStore()
        assert store.initialize_theme(MemoryCache({"theme": "neon"})) == "light"

    def test_toggle_persists(self):
        cache = MemoryCache()
        store = AppStateStore()
        assert store.toggle_theme(cache) == "dark"
        assert cache.get("theme") == "dark"
        assert store.toggle_theme(cache) == "light"

    def test_set_unknown_theme(self):
        with pytest.raises(ValueError):
            AppStateStore().set_theme(MemoryCache(), "neon")


class TestRecentNote:
    def test_dict_uses_camel_case(self):
        note = RecentNote(title="T", id=3, unique_id="u3", updated_at="2026-01-01T00:00:00+00:00")
        assert note.to_dict() == {
            "id": 3,
            "uniqueId": "u3",
            "title": "T",
            "updatedAt": "2026-01-01T00:00:00+00:00",
            "viewOnly": False,
        }

    def test_from_dict_defaults(self):
        note = RecentNote.from_dict({"uniqueId": "u9", "title": "Nine"})
        assert note.id is None
        assert note.unique_id == "u9"
        assert note.view_only is False
        assert note.updated_at

    def test_matches_by_id_or_unique_id(self):
        note = RecentNote(title="T", id=3, unique_id="u3")
        assert note.matches(3, None)
        assert note.matches(None, "u3")
        assert not note.matches(4, "u4")
        assert not note.matches(None, None)
