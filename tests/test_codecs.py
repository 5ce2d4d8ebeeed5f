from __future__ import annotations

import pytest
from pydantic import BaseModel

from coordstate.codecs import JsonCodec, ModelCodec, PickleCodec
from coordstate.exceptions import StateDecodeError, StateEncodeError


class TaskInfo(BaseModel):
    host: str
    port: int


def test_pickle_codec_handles_arbitrary_objects() -> None:
    codec = PickleCodec()
    value = {"nodes": [("a", 1), ("b", 2)], "ids": {1, 2}}
    assert codec.decode(codec.encode(value)) == value


def test_pickle_codec_rejects_garbage() -> None:
    with pytest.raises(StateDecodeError):
        PickleCodec().decode(b"\x00not a pickle")


def test_pickle_codec_rejects_unpicklable() -> None:
    with pytest.raises(StateEncodeError):
        PickleCodec().encode(lambda: None)


def test_json_codec_is_compact_utf8() -> None:
    assert JsonCodec().encode({"a": [1, 2]}) == b'{"a":[1,2]}'
    assert JsonCodec().decode('{"name":"é"}'.encode()) == {"name": "é"}


def test_json_codec_errors() -> None:
    with pytest.raises(StateDecodeError):
        JsonCodec().decode(b"{broken")
    with pytest.raises(StateDecodeError):
        JsonCodec().decode(b"\xff\xfe")
    with pytest.raises(StateEncodeError):
        JsonCodec().encode(object())


def test_model_codec_validates_type() -> None:
    codec = ModelCodec(TaskInfo)
    payload = codec.encode(TaskInfo(host="node-1", port=9200))

    assert codec.decode(payload) == TaskInfo(host="node-1", port=9200)
    with pytest.raises(StateDecodeError):
        codec.decode(b'{"host": "node-1"}')


def test_model_codec_supports_generic_types() -> None:
    codec = ModelCodec(list[int])
    assert codec.decode(b"[1, 2, 3]") == [1, 2, 3]
    with pytest.raises(StateDecodeError):
        codec.decode(b'["x"]')


@pytest.mark.parametrize(
    "payload",
    [
        b"\x80\x04\x95)M\xb4\xd2\x12\xee\xc5\xea",
        b'\x80\x05\x96p\xe8\x9ei\xc1"\xd9\x14\x15.',
    ],
)
def test_pickle_codec_wraps_every_unpickling_failure(payload: bytes) -> None:
    with pytest.raises(StateDecodeError):
        PickleCodec().decode(payload)


def test_json_codec_rejects_deep_nesting() -> None:
    with pytest.raises(StateDecodeError):
        JsonCodec().decode(b"[" * 200_000 + b"]" * 200_000)
