"""
Client Configuration

Settings for the mdshare client engine (autosave, local cache, API access).
Reads from environment variables with sensible defaults.

Note:
    This is separate from mdshare.core.config so the client runs without
    any of the server's database settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

# Local cache keys
THEME_STORAGE_KEY = "theme"
RECENT_NOTES_STORAGE_KEY = "recent_notes"
NOTE_TOKEN_STORAGE_PREFIX = "note_token_"

DEFAULT_THEME = "light"
THEMES = ("light", "dark")


def _default_cache_path() -> str:
    return str(Path.home() / ".mdshare" / "cache.json")


@dataclass(frozen=True)
class ClientSettings:
    """
    Immutable configuration for the client.

    Attributes:
        api_url: Base URL of the note service (``/api/notes`` is appended).
        public_url: Base URL used when building share/edit links.
        save_interval_ms: Autosave debounce delay.
        recent_notes_limit: Maximum length of the recent-notes history.
        api_timeout: HTTP request timeout in seconds.
        cache_backend: ``file``, ``memory`` or ``redis``.
        cache_path: JSON file used by the ``file`` backend.
        redis_host / redis_port: Used by the ``redis`` backend.
    """

    api_url: str = "http://localhost:8000"
    public_url: str = ""
    save_interval_ms: int = 2000
    recent_notes_limit: int = 10
    api_timeout: float = 10.0
    cache_backend: str = "file"
    cache_path: str = field(default_factory=_default_cache_path)
    redis_host: str = "localhost"
    redis_port: int = 6379

    @property
    def notes_endpoint(self) -> str:
        return f"{self.api_url.rstrip('/')}/api/notes"

    @property
    def link_base(self) -> str:
        return (self.public_url or self.api_url).rstrip("/")

    @classmethod
    def from_env(cls) -> ClientSettings:
        """Load settings from environment variables."""
        api_url = os.getenv("MDSHARE_API_URL", "http://localhost:8000")
        return cls(
            api_url=api_url,
            public_url=os.getenv("MDSHARE_PUBLIC_URL", api_url),
            save_interval_ms=int(os.getenv("MDSHARE_SAVE_INTERVAL_MS", "2000")),
            recent_notes_limit=int(os.getenv("MDSHARE_RECENT_NOTES_LIMIT", "10")),
            api_timeout=float(os.getenv("MDSHARE_API_TIMEOUT", "10.0")),
            cache_backend=os.getenv("MDSHARE_CACHE_BACKEND", "file"),
            cache_path=os.getenv("MDSHARE_CACHE_PATH", _default_cache_path()),
            redis_host=os.getenv("REDIS_HOST", "localhost"),
            redis_port=int(os.getenv("REDIS_PORT", "6379")),
        )
