"""Unit tests for the cancelable debounce timer."""

import asyncio
from unittest.mock import patch

import pytest

from mdshare.client.timer import CancelableTimer


@pytest.mark.asyncio
async def test_only_last_arm_fires():
    timer = CancelableTimer()
    calls = []

    def make(tag):
        async def callback():
            calls.append(tag)

        return callback

    timer.arm(20, make("first"))
    timer.arm(20, make("second"))
    timer.arm(20, make("third"))
    await asyncio.sleep(0.08)
    await timer.wait_idle()

    assert calls == ["third"]
    assert not timer.pending


@pytest.mark.asyncio
async def test_cancel():
    timer = CancelableTimer()
    calls = []

    async def callback():
        calls.append(1)

    assert timer.cancel() is False
    timer.arm(20, callback)
    assert timer.pending
    assert timer.cancel() is True
    await asyncio.sleep(0.05)

    assert calls == []


@pytest.mark.asyncio
async def test_running_callback_is_not_interrupted_by_rearm():
    timer = CancelableTimer()
    started = asyncio.Event()
    release = asyncio.Event()
    finished = []

    async def slow():
        started.set()
        await release.wait()
        finished.append("slow")

    async def fast():
        finished.append("fast")

    timer.arm(0, slow)
    await started.wait()
    assert timer.running == 1

    timer.arm(1000, fast)
    timer.cancel()
    release.set()
    await timer.wait_idle()

    assert finished == ["slow"]
    assert timer.running == 0


@pytest.mark.asyncio
async def test_callback_errors_are_contained():
    timer = CancelableTimer()

    async def broken():
        raise RuntimeError("boom")

    with patch("mdshare.client.timer.logger") as mock_logger:
        timer.arm(0, broken)
        await asyncio.sleep(0.02)
        await timer.wait_idle()

    mock_logger.exception.assert_called_once_with("Timer callback failed")
    assert timer.running == 0
