"""Background event loop used by the synchronous facade.

Backends are async. The synchronous :class:`~coordstate.state.State` submits
each operation to a single long-lived loop running in a daemon thread and
blocks on the resulting ``concurrent.futures.Future``. Any number of caller
threads can share one runner; the backend sees all calls on one loop.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

from coordstate.exceptions import StoreInterruptedError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoopRunner:
    """Run coroutines to completion on a background loop.

    Pass *loop* to reuse an already-running loop owned by the caller (it is
    then never stopped by :meth:`close`); otherwise a private loop and thread
    are started.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, *, name: str = "coordstate-loop") -> None:
        self._owns_loop = loop is None
        self._thread: threading.Thread | None = None
        if loop is None:
            loop = asyncio.new_event_loop()
            self._thread = threading.Thread(target=self._run_forever, args=(loop,), name=name, daemon=True)
            self._thread.start()
        self._loop = loop
        self._closed = False

    @staticmethod
    def _run_forever(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def is_closed(self) -> bool:
        return self._closed

    def run(self, coro: Coroutine[Any, Any, T], *, timeout: float | None = None, key: str = "") -> T:
        """Block until *coro* finishes on the background loop and return its result.

        Exceptions raised by the coroutine propagate unchanged. A timeout or
        cancellation of the wait raises :class:`StoreInterruptedError`.
        """
        if self._closed:
            coro.close()
            raise RuntimeError("LoopRunner is closed")
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            coro.close()
            raise RuntimeError("Cannot block on the runner's own event loop; use AsyncState instead")

        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(timeout)
        except concurrent.futures.TimeoutError as exc:
            future.cancel()
            _logger.error("Timed out after %ss waiting on store key=%s", timeout, key)
            raise StoreInterruptedError(f"Timed out after {timeout}s waiting on {key!r}", key=key) from exc
        except concurrent.futures.CancelledError as exc:
            _logger.error("Store operation cancelled key=%s", key)
            raise StoreInterruptedError(f"Operation on {key!r} was cancelled", key=key) from exc

    def close(self) -> None:
        """Stop the private loop and join its thread. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if not self._owns_loop:
            return
        asyncio.run_coroutine_threadsafe(_cancel_pending(), self._loop).result()
        self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread is not None:
            self._thread.join()
        self._loop.close()


async def _cancel_pending() -> None:
    current = asyncio.current_task()
    pending = [task for task in asyncio.all_tasks() if task is not current]
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
