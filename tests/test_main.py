"""Tests for the background purge of expired verification codes."""

import asyncio
import contextlib

from sparknest import main


def test_purge_loop_keeps_running_after_errors(monkeypatch):
    calls = []

    def failing_purge():
        calls.append(1)
        raise RuntimeError("unexpected failure")

    monkeypatch.setattr(main, "purge_expired_codes", failing_purge)

    async def run_until_three_attempts():
        task = asyncio.create_task(main._purge_loop(0))
        while len(calls) < 3:
            assert not task.done(), "purge loop stopped on the first error"
            await asyncio.sleep(0.01)
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    asyncio.run(asyncio.wait_for(run_until_three_attempts(), timeout=5))
    assert len(calls) >= 3
