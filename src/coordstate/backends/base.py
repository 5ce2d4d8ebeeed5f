"""Backing-store interface."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from coordstate.models.variable import Variable


@runtime_checkable
class StateBackend(Protocol):
    """Structural interface of a versioned key/value coordination store.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementations concrete.

    ``fetch`` must resolve for a key that was never written, returning an
    empty, version-0 :class:`Variable`. ``store`` commits only when the
    variable's version matches the store's current version for that key and
    raises :class:`~coordstate.exceptions.StoreConflictError` otherwise.
    """

    async def fetch(self, name: str) -> Variable: ...

    async def store(self, variable: Variable) -> Variable: ...
