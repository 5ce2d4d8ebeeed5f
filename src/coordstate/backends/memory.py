"""In-process, version-checked backend.

Stores :class:`Variable` objects in a dict keyed by name. Every commit bumps
the version by one, and a store carrying a stale version is rejected exactly
like the remote store would reject it.
"""

from __future__ import annotations

import logging
import threading

from coordstate.exceptions import StoreConflictError
from coordstate.models.variable import Variable

_logger = logging.getLogger(__name__)


class MemoryBackend:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._variables: dict[str, Variable] = {}

    async def fetch(self, name: str) -> Variable:
        with self._lock:
            current = self._variables.get(name)
        if current is None:
            return Variable(name=name)
        return current

    async def store(self, variable: Variable) -> Variable:
        with self._lock:
            current = self._variables.get(variable.name)
            current_version = current.version if current is not None else 0
            if variable.version != current_version:
                _logger.debug(
                    "Version conflict name=%s expected=%s current=%s",
                    variable.name,
                    variable.version,
                    current_version,
                )
                raise StoreConflictError(
                    f"Stale version {variable.version} for {variable.name!r} (current {current_version})",
                    key=variable.name,
                    version=variable.version,
                )
            committed = Variable(name=variable.name, value=variable.value, version=current_version + 1)
            self._variables[variable.name] = committed
        return committed

    def names(self) -> list[str]:
        """Return the committed names in sorted order."""
        return sorted(self._variables)

    def __len__(self) -> int:
        return len(self._variables)
