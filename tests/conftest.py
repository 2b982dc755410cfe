"""
Pytest Configuration and Fixtures

Shared fixtures:
    - Client engine pieces (store, cache, fake note service, recording view)
      wired together the way ``create_client`` does, for unit tests.
    - Session-scoped API readiness check for live tests that need a
      running Docker stack.
"""

import os

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Test environment defaults: MUST be before any mdshare server imports.
#
# 1. Load .env first so that Docker-matching credentials are available.
# 2. setdefault fills in anything still missing (CI runners, fresh clones
#    without a .env file) so that pydantic Settings validation doesn't crash.
# ---------------------------------------------------------------------------
load_dotenv()  # .env → os.environ (no-op if file is missing)

_test_env = {
    "POSTGRES_USER": "mdshare",
    "POSTGRES_PASSWORD": "mdshare_password",
    "POSTGRES_HOST": "localhost",
    "POSTGRES_PORT": "5432",
    "POSTGRES_DB": "mdshare_db",
}
for _key, _value in _test_env.items():
    os.environ.setdefault(_key, _value)

# ---------------------------------------------------------------------------
# Imports (safe now that env vars are set)
# ---------------------------------------------------------------------------
import io  # noqa: E402
import time  # noqa: E402
from collections.abc import Generator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from mdshare.client.api import ApiResult, NoteService  # noqa: E402
from mdshare.client.autosave import AutosaveCoordinator  # noqa: E402
from mdshare.client.cache import MemoryCache  # noqa: E402
from mdshare.client.history import RecentNotesHistory  # noqa: E402
from mdshare.client.session import SessionFlowController  # noqa: E402
from mdshare.client.state import AppStateStore, SaveStatus  # noqa: E402
from mdshare.client.view import ConsoleView  # noqa: E402
from mdshare.schemas.notes import (  # noqa: E402
    NoteConfigResult,
    NoteCreated,
    NoteEdit,
    NoteSaved,
    NoteView,
)

BASE_URL = "http://localhost:8000"

# Short debounce so timer-driven tests stay fast
TEST_SAVE_INTERVAL_MS = 20


class RecordingView(ConsoleView):
    """ConsoleView that also keeps every status, notification and modal."""

    def __init__(self) -> None:
        super().__init__(stream=io.StringIO(), assume_yes=True)
        self.statuses: list[SaveStatus] = []
        self.notifications: list[str] = []
        self.expired_modals = 0

    def set_save_status(self, status: SaveStatus) -> None:
        self.statuses.append(status)
        super().set_save_status(status)

    def show_notification(self, message: str) -> None:
        self.notifications.append(message)
        super().show_notification(message)

    def show_expired_modal(self) -> None:
        self.expired_modals += 1
        super().show_expired_modal()


# ---------------------------------------------------------------------------
# Client engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def store() -> AppStateStore:
    return AppStateStore(save_interval_ms=TEST_SAVE_INTERVAL_MS)


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def service() -> MagicMock:
    """
    NoteService stand-in. Every operation succeeds by default; tests swap
    return values or side effects per case.
    """
    svc = MagicMock(spec=NoteService)
    svc.create_note = AsyncMock(
        return_value=ApiResult(
            data=NoteCreated(id=1, unique_id="abc123", creator_token="tok-1"),
            status=201,
        )
    )
    svc.update_note = AsyncMock(
        return_value=ApiResult(data=NoteSaved(message="Note saved"), status=200)
    )
    svc.fetch_for_view = AsyncMock(
        return_value=ApiResult(data=NoteView(id=1, content="# Shared"), status=200)
    )
    svc.fetch_for_edit = AsyncMock(
        return_value=ApiResult(
            data=NoteEdit(id=1, unique_id="abc123", content="# Mine"), status=200
        )
    )
    svc.set_expiration = AsyncMock(
        return_value=ApiResult(
            data=NoteConfigResult(message="Expiration set to: 1d"), status=200
        )
    )
    svc.aclose = AsyncMock()
    return svc


@pytest.fixture
def history(store, cache) -> RecentNotesHistory:
    return RecentNotesHistory(store, cache, limit=10)


@pytest.fixture
def coordinator(store, service, history, view, cache) -> AutosaveCoordinator:
    return AutosaveCoordinator(
        store, service, history, view, cache, link_base="http://notes.test"
    )


@pytest.fixture
def controller(store, coordinator, service, history, view, cache) -> SessionFlowController:
    return SessionFlowController(store, coordinator, service, history, view, cache)


@pytest.fixture
def owned_note(store, cache):
    """Session state of an existing note owned by this client."""
    cache.set("note_token_7", "tok-7")
    store.merge(
        current_note_id=7,
        unique_id="u7",
        creator_token="tok-7",
        is_creator=True,
        is_new_note=False,
        content="# Seven",
        last_saved_content="# Seven",
    )
    return store


# ---------------------------------------------------------------------------
# Live stack fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def wait_for_api():
    """
    Block until the API is ready or timeout expires.

    Polls /health endpoint with 1s intervals for up to 30s.
    Fails the test session if API is unreachable (Docker likely not running).
    """
    url = f"{BASE_URL}/health"
    timeout = 30
    start = time.time()

    print("\n[Test] Waiting for API...")
    while time.time() - start < timeout:
        try:
            res = httpx.get(url, timeout=1.0)
            if res.status_code == 200:
                print("API Ready")
                return
        except httpx.RequestError:
            pass
        time.sleep(1)

    pytest.fail("API unreachable. Docker is likely down.")


@pytest.fixture(scope="session")
def api_client(wait_for_api) -> Generator[httpx.Client, None, None]:
    """
    Pre-configured HTTP client for live tests.

    Paths are absolute (``/api/notes``); POST targets the bare collection URL.
    """
    with httpx.Client(base_url=BASE_URL, timeout=10.0) as client:
        yield client
