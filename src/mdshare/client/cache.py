"""
Persistent Key-Value Cache

Local string store for the client: theme preference, creator tokens
(``note_token_<id>``) and the serialized recent-notes history.

Backends:
    - MemoryCache: process-local, used by tests and ``--no-cache`` runs.
    - JsonFileCache: one JSON object on disk, rewritten on every change.
    - RedisCache: namespaced keys in Redis, for clients sharing a cache.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

import redis

from mdshare.client.config import NOTE_TOKEN_STORAGE_PREFIX, ClientSettings

logger = logging.getLogger(__name__)


class KeyValueCache(Protocol):
    """Minimal string key-value contract used by the client."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryCache:
    """Dict-backed cache. Nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class JsonFileCache:
    """
    Cache persisted as a single JSON object.

    The file is read once at construction and rewritten atomically
    (temp file + ``os.replace``) after every mutation. A missing or
    corrupt file starts an empty cache.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        self._data: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable cache file %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring cache file %s: not a JSON object", self.path)
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".cache-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()


class RedisCache:
    """
    Redis-backed cache with a key namespace.

    Connection problems are logged and degrade to a cache miss; the
    client keeps working without history or stored tokens.
    """

    def __init__(self, client: redis.Redis, namespace: str = "mdshare") -> None:
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> RedisCache:
        client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            decode_responses=True,
        )
        return cls(client)

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(self._key(key))  # type: ignore[return-value]
        except redis.RedisError as e:
            logger.error("Redis get failed for %s: %s", key, e)
            return None

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except redis.RedisError as e:
            logger.error("Redis set failed for %s: %s", key, e)

    def remove(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as e:
            logger.error("Redis delete failed for %s: %s", key, e)


def build_cache(settings: ClientSettings) -> KeyValueCache:
    """Instantiate the cache backend selected by ``settings.cache_backend``."""
    backend = settings.cache_backend.lower()
    if backend == "memory":
        return MemoryCache()
    if backend == "redis":
        return RedisCache.from_settings(settings)
    if backend == "file":
        return JsonFileCache(settings.cache_path)
    raise ValueError(f"Unknown cache backend: '{settings.cache_backend}'")


# ---------------------------------------------------------------------------
# Creator tokens
# ---------------------------------------------------------------------------


def get_note_token(cache: KeyValueCache, note_id: int | str) -> str | None:
    """Creator token cached for ``note_id``, if this client created it."""
    return cache.get(f"{NOTE_TOKEN_STORAGE_PREFIX}{note_id}")


def store_note_token(cache: KeyValueCache, note_id: int | str, token: str) -> None:
    """Remember the creator token issued for ``note_id``."""
    cache.set(f"{NOTE_TOKEN_STORAGE_PREFIX}{note_id}", token)
