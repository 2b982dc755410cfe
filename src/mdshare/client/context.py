"""
Client wiring

Builds the store, cache, service, history, coordinator and flow controller
around one view, so front-ends only deal with a single object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mdshare.client.api import NoteService
from mdshare.client.autosave import AutosaveCoordinator
from mdshare.client.cache import KeyValueCache, build_cache
from mdshare.client.config import ClientSettings
from mdshare.client.history import RecentNotesHistory
from mdshare.client.session import SessionFlowController
from mdshare.client.state import AppStateStore
from mdshare.client.view import NoteView


@dataclass
class ClientContext:
    """Every client component, wired together."""

    settings: ClientSettings
    cache: KeyValueCache
    store: AppStateStore
    history: RecentNotesHistory
    service: NoteService
    coordinator: AutosaveCoordinator
    controller: SessionFlowController
    view: NoteView

    async def __aenter__(self) -> ClientContext:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Finish pending saves, then release the HTTP client."""
        await self.coordinator.flush()
        await self.service.aclose()


def create_client(
    view: NoteView,
    settings: ClientSettings | None = None,
    cache: KeyValueCache | None = None,
    service: NoteService | None = None,
) -> ClientContext:
    """Assemble a client; ``cache`` and ``service`` may be injected (tests)."""
    settings = settings or ClientSettings.from_env()
    cache = cache if cache is not None else build_cache(settings)
    service = service or NoteService(settings)
    store = AppStateStore(save_interval_ms=settings.save_interval_ms)
    history = RecentNotesHistory(store, cache, limit=settings.recent_notes_limit)
    coordinator = AutosaveCoordinator(
        store,
        service,
        history,
        view,
        cache,
        link_base=settings.link_base,
    )
    controller = SessionFlowController(
        store, coordinator, service, history, view, cache
    )
    return ClientContext(
        settings=settings,
        cache=cache,
        store=store,
        history=history,
        service=service,
        coordinator=coordinator,
        controller=controller,
        view=view,
    )
