"""Data models exchanged with the backing store."""

from coordstate.models.framework import FrameworkID
from coordstate.models.variable import Variable

__all__ = [
    "FrameworkID",
    "Variable",
]
