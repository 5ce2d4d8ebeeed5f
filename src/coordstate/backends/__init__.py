"""Backing-store implementations."""

from coordstate.backends.base import StateBackend
from coordstate.backends.consul import ConsulBackend
from coordstate.backends.memory import MemoryBackend

__all__ = [
    "ConsulBackend",
    "MemoryBackend",
    "StateBackend",
]
