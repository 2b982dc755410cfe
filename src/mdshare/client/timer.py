"""
Cancelable debounce timer on the asyncio event loop.

Arming schedules a coroutine callback after a delay and cancels whatever
was pending before, so only the last arm of a burst ever fires. Once a
callback has started it runs to completion: cancelling or re-arming the
timer never interrupts an in-flight save.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[None]]


class CancelableTimer:
    """Single-slot timer: at most one pending callback at any time."""

    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None
        self._running: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        """True while a callback is scheduled but has not started yet."""
        return self._handle is not None

    @property
    def running(self) -> int:
        """Number of fired callbacks still executing."""
        return len(self._running)

    def arm(self, delay_ms: int, callback: Callback) -> None:
        """(Re)schedule ``callback`` to run ``delay_ms`` from now."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay_ms / 1000, self._fire, callback)

    def cancel(self) -> bool:
        """Drop the pending callback. Returns True if one was pending."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        return True

    def _fire(self, callback: Callback) -> None:
        self._handle = None
        task = asyncio.ensure_future(self._run(callback))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self, callback: Callback) -> None:
        try:
            await callback()
        except Exception:
            logger.exception("Timer callback failed")

    async def wait_idle(self) -> None:
        """Wait until no fired callback is still running."""
        while self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)
