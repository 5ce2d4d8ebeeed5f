"""Framework identity token."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from coordstate.exceptions import StateDecodeError


class FrameworkID(BaseModel):
    """Identifier of this process's registration with a cluster manager.

    Stored at a single well-known key. An empty ``value`` is the sentinel
    returned when nothing has been registered yet.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: str = ""

    @classmethod
    def empty(cls) -> FrameworkID:
        return cls(value="")

    @property
    def is_empty(self) -> bool:
        return not self.value

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> FrameworkID:
        """Decode a stored token.

        Raises :class:`StateDecodeError` when *data* is not a valid token.
        """
        try:
            return cls.model_validate_json(data)
        except ValueError as exc:
            raise StateDecodeError(f"Invalid framework ID payload ({len(data)} bytes)") from exc

    def __str__(self) -> str:
        return self.value
