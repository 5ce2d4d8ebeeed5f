"""Payload codecs.

A codec turns a caller's value into the bytes held by the backing store and
back. The facade treats codecs as an opaque capability: it only relies on
``encode`` producing bytes and ``decode`` either returning a value or raising
:class:`~coordstate.exceptions.StateDecodeError`.
"""

from __future__ import annotations

import json
import pickle
from typing import Any, Generic, Protocol, TypeVar

from pydantic import TypeAdapter

from coordstate.exceptions import StateDecodeError, StateEncodeError

T = TypeVar("T")


class Codec(Protocol[T]):
    """Serialize/deserialize values for the byte-oriented store.

    Implementations must be symmetric: ``decode(encode(v)) == v``.
    """

    def encode(self, value: T) -> bytes: ...

    def decode(self, data: bytes) -> T: ...


class PickleCodec:
    """Default codec for arbitrary Python objects.

    Only decode payloads written by trusted processes; unpickling runs code.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self._protocol = protocol

    def encode(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self._protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise StateEncodeError(f"Cannot pickle {type(value).__name__}: {exc}") from exc

    def decode(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except Exception as exc:  # unpickling can raise arbitrary exception types
            raise StateDecodeError(f"Cannot unpickle payload ({len(data)} bytes): {exc}") from exc


class JsonCodec:
    """UTF-8 JSON codec. Values must be JSON-serializable."""

    def encode(self, value: Any) -> bytes:
        try:
            return json.dumps(value, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise StateEncodeError(f"Cannot JSON-encode {type(value).__name__}: {exc}") from exc

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (ValueError, RecursionError) as exc:
            raise StateDecodeError(f"Invalid JSON payload ({len(data)} bytes): {exc}") from exc


class ModelCodec(Generic[T]):
    """Codec validating payloads against a caller-chosen type.

    Backed by a pydantic ``TypeAdapter``, so ``ModelCodec(MyModel)``,
    ``ModelCodec(list[int])`` and similar all work. A payload that parses
    but does not match the type raises :class:`StateDecodeError`.
    """

    def __init__(self, type_: type[T] | Any) -> None:
        self._type = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    @property
    def type(self) -> Any:
        return self._type

    def encode(self, value: T) -> bytes:
        try:
            return self._adapter.dump_json(value)
        except ValueError as exc:
            raise StateEncodeError(f"Cannot encode value as {self._type!r}: {exc}") from exc

    def decode(self, data: bytes) -> T:
        try:
            return self._adapter.validate_json(data)
        except ValueError as exc:
            raise StateDecodeError(f"Payload does not match {self._type!r}: {exc}") from exc
