"""Client engine - state store, autosave coordinator and session flows."""

from mdshare.client.api import ApiResult, NoteService
from mdshare.client.autosave import AutosaveCoordinator
from mdshare.client.cache import JsonFileCache, MemoryCache, RedisCache
from mdshare.client.config import ClientSettings
from mdshare.client.context import ClientContext, create_client
from mdshare.client.history import RecentNotesHistory
from mdshare.client.session import SessionFlowController
from mdshare.client.state import AppStateStore, RecentNote, SaveStatus, SessionState

__all__ = [
    "ApiResult",
    "AppStateStore",
    "AutosaveCoordinator",
    "ClientContext",
    "ClientSettings",
    "JsonFileCache",
    "MemoryCache",
    "NoteService",
    "RecentNote",
    "RecentNotesHistory",
    "RedisCache",
    "SaveStatus",
    "SessionFlowController",
    "SessionState",
    "create_client",
]
