"""Hierarchical, version-checked state store.

Persists the framework identity token and arbitrary objects under
``/``-separated keys on top of a versioned coordination store.

Every write is a fetch-mutate-store round trip: the fetch supplies the
version the store will check, so a concurrent writer that committed in
between makes the store fail with :class:`StoreConflictError`. Nothing here
retries, caches, or masks a failure; callers own their retry policy.

A zero-length payload means both "never written" and "placeholder created
by :meth:`AsyncState.mkdir`". Both read back as absent, so ``exists`` is
``False`` for structural path segments.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

from coordstate._constants import FRAMEWORK_ID_ERROR, FRAMEWORK_ID_KEY
from coordstate._runner import LoopRunner
from coordstate.backends.base import StateBackend
from coordstate.backends.consul import ConsulBackend
from coordstate.codecs import Codec, PickleCodec
from coordstate.config import StateConfig
from coordstate.exceptions import (
    CoordStateError,
    InvalidKeyError,
    StateDecodeError,
    StoreInterruptedError,
    StoreTransportError,
)
from coordstate.models.framework import FrameworkID
from coordstate.models.variable import Variable
from coordstate.paths import iter_prefixes, normalize_key

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncState:
    """Async facade over a :class:`StateBackend`.

    Usage::

        state = AsyncState(MemoryBackend())
        await state.set_and_create_parents("/tasks/1", {"host": "a"})
        await state.get("/tasks/1")
    """

    def __init__(
        self,
        backend: StateBackend,
        *,
        codec: Codec[Any] | None = None,
        framework_id_key: str = FRAMEWORK_ID_KEY,
    ) -> None:
        self._backend = backend
        self._codec: Codec[Any] = codec if codec is not None else PickleCodec()
        self._framework_id_key = framework_id_key

    @property
    def backend(self) -> StateBackend:
        return self._backend

    @property
    def codec(self) -> Codec[Any]:
        return self._codec

    @property
    def framework_id_key(self) -> str:
        return self._framework_id_key

    # ------------------------------------------------------------------
    # Store round trips
    # ------------------------------------------------------------------

    async def _fetch(self, key: str) -> Variable:
        try:
            return await self._backend.fetch(key)
        except CoordStateError:
            raise
        except asyncio.TimeoutError as exc:
            raise StoreInterruptedError(f"Fetch of {key!r} timed out", key=key) from exc
        except OSError as exc:
            raise StoreTransportError(f"Fetch of {key!r} failed: {exc}", key=key) from exc

    async def _store(self, variable: Variable) -> Variable:
        key = variable.name
        try:
            return await self._backend.store(variable)
        except CoordStateError:
            raise
        except asyncio.TimeoutError as exc:
            raise StoreInterruptedError(f"Store of {key!r} timed out", key=key) from exc
        except OSError as exc:
            raise StoreTransportError(f"Store of {key!r} failed: {exc}", key=key) from exc

    # ------------------------------------------------------------------
    # Framework identity
    # ------------------------------------------------------------------

    async def get_framework_id(self) -> FrameworkID:
        """Return the stored framework ID, or :meth:`FrameworkID.empty` if none."""
        try:
            variable = await self._fetch(self._framework_id_key)
            if variable.is_empty:
                return FrameworkID.empty()
            return FrameworkID.from_bytes(variable.value)
        except CoordStateError:
            _logger.error(FRAMEWORK_ID_ERROR, exc_info=True)
            raise

    async def set_framework_id(self, framework_id: FrameworkID) -> None:
        try:
            variable = await self._fetch(self._framework_id_key)
            await self._store(variable.mutate(framework_id.to_bytes()))
        except CoordStateError:
            _logger.error(FRAMEWORK_ID_ERROR, exc_info=True)
            raise
        _logger.debug("Stored framework ID %s", framework_id)

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    async def get(self, key: str, codec: Codec[T] | None = None) -> T | None:
        """Return the object stored at *key*, or ``None`` if it holds no payload.

        Raises :class:`StateDecodeError` if the payload does not decode with
        *codec* (default: the facade's codec) and
        :class:`~coordstate.exceptions.StateStoreError` if the fetch fails.
        """
        active: Codec[Any] = codec if codec is not None else self._codec
        try:
            variable = await self._fetch(key)
        except CoordStateError:
            _logger.error("Could not fetch key=%s", key, exc_info=True)
            raise
        if variable.is_empty:
            return None
        try:
            return active.decode(variable.value)
        except StateDecodeError as exc:
            _logger.error("Could not decode key=%s (%d bytes)", key, len(variable.value))
            raise StateDecodeError(f"Cannot decode {key!r}: {exc}", key=key) from exc

    async def set(self, key: str, value: T | None, codec: Codec[T] | None = None) -> None:
        """Store *value* at *key*. ``None`` stores an empty placeholder."""
        active: Codec[Any] = codec if codec is not None else self._codec
        try:
            variable = await self._fetch(key)
            payload = b"" if value is None else active.encode(value)
            await self._store(variable.mutate(payload))
        except CoordStateError:
            _logger.error("Could not store key=%s", key, exc_info=True)
            raise

    async def exists(self, key: str, codec: Codec[Any] | None = None) -> bool:
        """Equivalent to ``await get(key, codec) is not None``.

        Placeholders written by :meth:`mkdir` and keys never written both
        report ``False``. A payload that does not decode raises
        :class:`StateDecodeError` exactly like :meth:`get`.
        """
        return await self.get(key, codec) is not None

    async def mkdir(self, key: str, codec: Codec[Any] | None = None) -> None:
        """Create an empty placeholder for every missing segment of *key*.

        ``/a/b/c`` materializes ``/a``, ``/a/b`` and ``/a/b/c``. Segments that
        already hold a value are left alone, so the call is idempotent.
        Raises :class:`InvalidKeyError` before touching the store if *key*
        ends in ``/`` and is not the root. *codec* decodes existing segments.
        """
        try:
            path = normalize_key(key)
        except InvalidKeyError:
            _logger.error("Rejected key %r: trailing slash", key)
            raise
        for prefix in iter_prefixes(path):
            if not await self.exists(prefix, codec):
                await self.set(prefix, None)

    async def set_and_create_parents(self, key: str, value: T | None, codec: Codec[T] | None = None) -> None:
        await self.mkdir(key, codec)
        await self.set(key, value, codec)


class State:
    """Blocking facade over :class:`AsyncState`.

    Each call runs the matching coroutine on a background event loop and
    waits for it. Safe to share between threads.

    Parameters
    ----------
    backend : StateBackend
        Versioned store shared by every call.
    codec : Codec or None
        Default codec; :class:`PickleCodec` when omitted.
    framework_id_key : str
        Key holding the framework ID.
    timeout : float or None
        Seconds to wait on each operation before raising
        :class:`StoreInterruptedError`. ``None`` waits indefinitely and leaves
        timeouts to the backend.
    loop : asyncio.AbstractEventLoop or None
        Running loop (in another thread) to submit work to. A private loop
        thread is started when omitted.
    """

    def __init__(
        self,
        backend: StateBackend,
        *,
        codec: Codec[Any] | None = None,
        framework_id_key: str = FRAMEWORK_ID_KEY,
        timeout: float | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._async = AsyncState(backend, codec=codec, framework_id_key=framework_id_key)
        self._timeout = timeout
        self._runner = LoopRunner(loop)
        self._owns_backend = False

    @classmethod
    def from_config(cls, config: StateConfig, *, codec: Codec[Any] | None = None) -> State:
        """Build a facade over a :class:`ConsulBackend` described by *config*.

        The backend is closed together with the facade.
        """
        state = cls(
            ConsulBackend.from_config(config),
            codec=codec,
            framework_id_key=config.framework_id_key,
        )
        state._owns_backend = True
        return state

    @property
    def async_state(self) -> AsyncState:
        return self._async

    @property
    def backend(self) -> StateBackend:
        return self._async.backend

    def _run(self, coro: Coroutine[Any, Any, T], key: str) -> T:
        return self._runner.run(coro, timeout=self._timeout, key=key)

    def get_framework_id(self) -> FrameworkID:
        return self._run(self._async.get_framework_id(), self._async.framework_id_key)

    def set_framework_id(self, framework_id: FrameworkID) -> None:
        self._run(self._async.set_framework_id(framework_id), self._async.framework_id_key)

    def get(self, key: str, codec: Codec[T] | None = None) -> T | None:
        return self._run(self._async.get(key, codec), key)

    def set(self, key: str, value: T | None, codec: Codec[T] | None = None) -> None:
        self._run(self._async.set(key, value, codec), key)

    def exists(self, key: str, codec: Codec[Any] | None = None) -> bool:
        return self._run(self._async.exists(key, codec), key)

    def mkdir(self, key: str, codec: Codec[Any] | None = None) -> None:
        self._run(self._async.mkdir(key, codec), key)

    def set_and_create_parents(self, key: str, value: T | None, codec: Codec[T] | None = None) -> None:
        self._run(self._async.set_and_create_parents(key, value, codec), key)

    def close(self) -> None:
        """Release the background loop, and the backend if this facade built it."""
        if self._runner.is_closed:
            return
        close = getattr(self.backend, "close", None)
        try:
            if self._owns_backend and close is not None:
                self._run(close(), "")
        finally:
            self._runner.close()

    def __enter__(self) -> State:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
