from __future__ import annotations

import asyncio
import threading

import pytest

from coordstate._runner import LoopRunner
from coordstate.exceptions import StoreInterruptedError


async def _answer() -> int:
    return 42


async def _boom() -> None:
    raise KeyError("missing")


def test_runs_coroutines_on_background_loop() -> None:
    runner = LoopRunner()
    try:
        assert runner.run(_answer()) == 42
        with pytest.raises(KeyError):
            runner.run(_boom())
    finally:
        runner.close()
    assert runner.is_closed


def test_cancelled_coroutine_is_interrupted() -> None:
    async def _cancelled() -> None:
        raise asyncio.CancelledError

    runner = LoopRunner()
    try:
        with pytest.raises(StoreInterruptedError) as exc_info:
            runner.run(_cancelled(), key="/a")
        assert exc_info.value.key == "/a"
    finally:
        runner.close()


def test_external_loop_is_left_running() -> None:
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    try:
        runner = LoopRunner(loop)
        assert runner.run(_answer()) == 42
        runner.close()
        assert loop.is_running()
    finally:
        loop.call_soon_threadsafe(loop.stop)
        thread.join()
        loop.close()
