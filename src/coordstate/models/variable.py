"""Versioned value exchanged with the backing store."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Variable(BaseModel):
    """A byte payload tagged with the store's version marker.

    Parameters
    ----------
    name : str
        Key the payload is stored under.
    value : bytes
        Raw payload. Zero length means "never written" or "placeholder";
        the two are indistinguishable here.
    version : int
        Opaque optimistic-concurrency marker owned by the backend.
        ``0`` means the key has never been committed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    value: bytes = b""
    version: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        return len(self.value) == 0

    def mutate(self, value: bytes) -> Variable:
        """Return a copy carrying *value* and this variable's version.

        Pure: the backend is not contacted until the copy is stored.
        """
        return self.model_copy(update={"value": bytes(value)})
