"""
Autosave Coordinator Tests

Debounced saves, no-op skipping, first save of new notes, failure
reporting and stale-response handling. The note service is an AsyncMock
(see conftest) and the debounce interval is a few milliseconds.
"""

import asyncio

import pytest

from mdshare.client.api import ApiResult
from mdshare.client.autosave import AutosaveCoordinator
from mdshare.client.render import RENDER_ERROR_HTML
from mdshare.client.state import RecentNote, SaveStatus
from mdshare.schemas.notes import NoteCreated, NoteSaved


async def _settle(coordinator, seconds=0.08):
    """Let the debounce window pass and every fired save finish."""
    await asyncio.sleep(seconds)
    await coordinator.timer.wait_idle()


# ---------------------------------------------------------------------------
# Debounce
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_burst_of_changes_saves_once(coordinator, owned_note, service, view):
    for text in ("# Seven a", "# Seven ab", "# Seven abc"):
        coordinator.handle_content_change(text)

    assert owned_note.snapshot().save_status == SaveStatus.SAVING
    assert service.update_note.await_count == 0

    await _settle(coordinator)

    service.update_note.assert_awaited_once_with(7, "# Seven abc", "tok-7")
    state = owned_note.snapshot()
    assert state.last_saved_content == "# Seven abc"
    assert state.is_dirty is False
    assert state.save_status == SaveStatus.SAVED
    assert view.status == SaveStatus.SAVED


@pytest.mark.asyncio
async def test_no_request_when_content_unchanged(coordinator, owned_note, service):
    coordinator.handle_content_change("# Seven")
    await _settle(coordinator)

    service.update_note.assert_not_awaited()
    assert owned_note.snapshot().save_status == SaveStatus.SAVED


@pytest.mark.asyncio
async def test_new_note_is_never_autosaved(coordinator, store, service, view):
    coordinator.handle_content_change("draft")
    await _settle(coordinator)

    assert not coordinator.timer.pending
    service.update_note.assert_not_awaited()
    service.create_note.assert_not_awaited()
    assert store.snapshot().content == "draft"
    assert SaveStatus.SAVING not in view.statuses


@pytest.mark.asyncio
async def test_view_only_session_is_never_autosaved(coordinator, store, service):
    store.merge(unique_id="u1", is_new_note=False, is_creator=False, content="x")
    coordinator.handle_content_change("y")
    await _settle(coordinator)

    service.update_note.assert_not_awaited()


@pytest.mark.asyncio
async def test_save_changes_without_token_is_silent(coordinator, store, service, view):
    store.merge(current_note_id=3, is_new_note=False, content="x")
    await coordinator.save_changes()

    service.update_note.assert_not_awaited()
    assert view.statuses == []


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_failed_save_reports_error(coordinator, owned_note, service, view):
    service.update_note.return_value = ApiResult(error="Server down", status=500)
    coordinator.handle_content_change("# Seven!")
    await _settle(coordinator)

    state = owned_note.snapshot()
    assert state.save_status == SaveStatus.ERROR
    assert state.last_saved_content == "# Seven"
    assert state.is_dirty is True
    assert view.notifications == ["Save failed: Server down"]
    assert view.expired_modals == 0


@pytest.mark.asyncio
async def test_expired_save_shows_modal(coordinator, owned_note, service, view):
    service.update_note.return_value = ApiResult(
        error="This note has expired and cannot be edited.", expired=True, status=410
    )
    coordinator.handle_content_change("# Late edit")
    await _settle(coordinator)

    assert owned_note.snapshot().save_status == SaveStatus.ERROR
    assert view.expired_modals == 1


@pytest.mark.asyncio
async def test_next_edit_retries_after_failure(coordinator, owned_note, service):
    service.update_note.return_value = ApiResult(error="Server down", status=500)
    coordinator.handle_content_change("# Seven!")
    await _settle(coordinator)

    service.update_note.return_value = ApiResult(data=NoteSaved(), status=200)
    coordinator.handle_content_change("# Seven!!")
    await _settle(coordinator)

    assert service.update_note.await_count == 2
    assert owned_note.snapshot().save_status == SaveStatus.SAVED


# ---------------------------------------------------------------------------
# History refresh
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_successful_save_refreshes_history_title(
    coordinator, owned_note, history, view
):
    history.add_or_update(RecentNote(title="Seven", id=7, unique_id="u7"))
    history.add_or_update(RecentNote(title="Other", id=8, unique_id="u8"))

    coordinator.handle_content_change("# Renamed")
    await _settle(coordinator)

    assert history.notes[0].id == 7
    assert history.notes[0].title == "Renamed"
    assert view.recent_notes[0].title == "Renamed"


# ---------------------------------------------------------------------------
# First save
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_save_new_note(coordinator, store, service, cache, history, view):
    coordinator.handle_content_change("# Fresh")
    created = await coordinator.save_new_note()

    assert created.id == 1
    service.create_note.assert_awaited_once_with("# Fresh")
    assert cache.get("note_token_1") == "tok-1"

    state = store.snapshot()
    assert state.current_note_id == 1
    assert state.unique_id == "abc123"
    assert state.creator_token == "tok-1"
    assert state.is_new_note is False
    assert state.is_creator is True
    assert state.last_saved_content == "# Fresh"
    assert state.save_status == SaveStatus.SAVED

    entry = history.notes[0]
    assert (entry.id, entry.unique_id, entry.title, entry.view_only) == (
        1,
        "abc123",
        "Fresh",
        False,
    )
    assert view.share_link == "http://notes.test/?view=abc123"


@pytest.mark.asyncio
async def test_save_new_note_rejects_blank_content(coordinator, store, service, view):
    coordinator.handle_content_change("   \n")
    assert await coordinator.save_new_note() is None

    service.create_note.assert_not_awaited()
    assert view.notifications == ["Cannot save an empty note."]
    assert store.snapshot().is_new_note is True


@pytest.mark.asyncio
async def test_save_new_note_failure(coordinator, store, service, view, cache):
    service.create_note.return_value = ApiResult(error="Server down", status=500)
    coordinator.handle_content_change("# Fresh")

    assert await coordinator.save_new_note() is None
    assert store.snapshot().save_status == SaveStatus.ERROR
    assert store.snapshot().is_new_note is True
    assert view.notifications == ["Failed to create note: Server down"]
    assert cache.get("note_token_1") is None


@pytest.mark.asyncio
async def test_typing_during_create_is_autosaved(coordinator, store, service):
    release = asyncio.Event()

    async def slow_create(content):
        await release.wait()
        return ApiResult(
            data=NoteCreated(id=1, unique_id="abc123", creator_token="tok-1"),
            status=201,
        )

    service.create_note.side_effect = slow_create
    coordinator.handle_content_change("# Fresh")
    task = asyncio.create_task(coordinator.save_new_note())
    await asyncio.sleep(0)

    coordinator.handle_content_change("# Fresh and more")
    release.set()
    await task

    assert coordinator.timer.pending
    assert store.snapshot().save_status == SaveStatus.SAVING
    await _settle(coordinator)

    service.update_note.assert_awaited_once_with(1, "# Fresh and more", "tok-1")


# ---------------------------------------------------------------------------
# Manual save and flush
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_manual_save_skips_debounce(coordinator, owned_note, service):
    coordinator.handle_content_change("# Seven now")
    assert coordinator.timer.pending

    await coordinator.trigger_manual_save()

    assert not coordinator.timer.pending
    service.update_note.assert_awaited_once_with(7, "# Seven now", "tok-7")

    await _settle(coordinator)
    assert service.update_note.await_count == 1


@pytest.mark.asyncio
async def test_manual_save_on_new_note_creates_it(coordinator, service):
    coordinator.handle_content_change("# Brand new")
    await coordinator.trigger_manual_save()
    service.create_note.assert_awaited_once_with("# Brand new")


@pytest.mark.asyncio
async def test_manual_save_in_view_only_session(coordinator, store, service):
    store.merge(unique_id="u1", is_new_note=False, is_creator=False, content="x")
    await coordinator.trigger_manual_save()

    service.update_note.assert_not_awaited()
    service.create_note.assert_not_awaited()


@pytest.mark.asyncio
async def test_flush_runs_pending_save(coordinator, owned_note, service):
    coordinator.handle_content_change("# Seven flushed")
    await coordinator.flush()

    service.update_note.assert_awaited_once_with(7, "# Seven flushed", "tok-7")
    assert not coordinator.timer.pending


# ---------------------------------------------------------------------------
# Session changes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_stale_save_result_is_dropped(coordinator, owned_note, service, view):
    release = asyncio.Event()

    async def slow_update(note_id, content, token):
        await release.wait()
        return ApiResult(data=NoteSaved(), status=200)

    service.update_note.side_effect = slow_update
    owned_note.merge(content="# Seven edited")
    task = asyncio.create_task(coordinator.save_changes())
    await asyncio.sleep(0)

    coordinator.reset_session()
    owned_note.merge(
        current_note_id=9,
        unique_id="u9",
        creator_token="tok-9",
        content="# Nine",
        last_saved_content="# Nine",
    )
    release.set()
    await task

    state = owned_note.snapshot()
    assert state.current_note_id == 9
    assert state.last_saved_content == "# Nine"
    assert view.statuses[-1] == SaveStatus.SAVING


@pytest.mark.asyncio
async def test_reset_session_cancels_pending_save(coordinator, owned_note, service):
    coordinator.handle_content_change("# Seven typed")
    coordinator.reset_session()
    await _settle(coordinator)

    service.update_note.assert_not_awaited()


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_preview_follows_edits_when_visible(coordinator, view):
    view.set_mode("preview")
    coordinator.handle_content_change("# Shown")
    assert "<h1>Shown</h1>" in view.preview_html


def test_preview_render_error(store, service, history, view, cache):
    def broken(text):
        raise ValueError("bad markdown")

    coordinator = AutosaveCoordinator(store, service, history, view, cache, renderer=broken)
    store.merge(content="# x")
    coordinator.update_preview()
    assert view.preview_html == RENDER_ERROR_HTML
