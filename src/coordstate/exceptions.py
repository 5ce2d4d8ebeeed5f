"""Custom exception hierarchy for coordstate."""

from __future__ import annotations


class CoordStateError(Exception):
    """Base exception for all coordstate errors."""


class StateConfigError(CoordStateError):
    """Invalid or missing configuration."""


class InvalidKeyError(CoordStateError, ValueError):
    """Key shape rejected before any store interaction (e.g. trailing slash)."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class StateEncodeError(CoordStateError):
    """Value could not be encoded by the codec."""


class StateDecodeError(CoordStateError):
    """Stored payload could not be decoded into the requested type.

    Raised for corrupt bytes as well as type mismatches. Never treated as
    an absent value.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class StateStoreError(CoordStateError):
    """A fetch or store against the backing store did not complete."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class StoreTransportError(StateStoreError):
    """Network or HTTP-level failure talking to the backing store."""

    def __init__(
        self,
        message: str,
        *,
        key: str = "",
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, key=key)


class StoreInterruptedError(StoreTransportError):
    """The wait on a store operation timed out or was cancelled."""


class StoreConflictError(StateStoreError):
    """Store rejected a write because its version was stale.

    Callers own any fetch-mutate-store retry loop; this library never
    retries on their behalf.
    """

    def __init__(self, message: str, *, key: str = "", version: int | None = None) -> None:
        self.version = version
        super().__init__(message, key=key)
