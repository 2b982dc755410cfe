"""
File watcher

Polls a local markdown file and feeds every change to the autosave
coordinator, the way keystrokes would in an editor widget.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from mdshare.client.autosave import AutosaveCoordinator

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.25  # seconds


class FileWatcher:
    """Detect content changes of ``path`` by polling its mtime and text."""

    def __init__(
        self,
        path: str | Path,
        coordinator: AutosaveCoordinator,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.path = Path(path)
        self._coordinator = coordinator
        self._poll_interval = poll_interval
        self._mtime: float | None = None
        self._last_text: str | None = None

    def prime(self) -> None:
        """Take the current file contents as the baseline (no change emitted)."""
        self._mtime, self._last_text = self._read()

    def _read(self) -> tuple[float | None, str | None]:
        try:
            mtime = self.path.stat().st_mtime
            return mtime, self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None, None

    def poll(self) -> bool:
        """Check the file once. Returns True if a change was forwarded."""
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return False
        if mtime == self._mtime:
            return False

        self._mtime, text = self._read()
        if text is None or text == self._last_text:
            return False

        self._last_text = text
        logger.debug("Change detected in %s (%d chars)", self.path, len(text))
        self._coordinator.handle_content_change(text)
        return True

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Poll until ``stop`` is set (or forever)."""
        stop = stop or asyncio.Event()
        while not stop.is_set():
            self.poll()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self._poll_interval)
            except TimeoutError:
                continue
