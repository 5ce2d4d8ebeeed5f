from __future__ import annotations

import pytest
from pydantic import ValidationError

from coordstate.exceptions import StateDecodeError
from coordstate.models import FrameworkID, Variable


def test_variable_defaults_to_empty_uncommitted() -> None:
    variable = Variable(name="frameworkId")
    assert variable.value == b""
    assert variable.version == 0
    assert variable.is_empty


def test_mutate_keeps_name_and_version() -> None:
    original = Variable(name="/a", value=b"old", version=7)
    mutated = original.mutate(b"new")

    assert mutated.name == "/a"
    assert mutated.version == 7
    assert mutated.value == b"new"
    assert original.value == b"old"


def test_variable_is_frozen() -> None:
    variable = Variable(name="/a")
    with pytest.raises(ValidationError):
        variable.value = b"x"  # type: ignore[misc]


def test_framework_id_round_trip() -> None:
    framework_id = FrameworkID(value="20150101-000000-1-0000")
    assert FrameworkID.from_bytes(framework_id.to_bytes()) == framework_id
    assert str(framework_id) == "20150101-000000-1-0000"


def test_framework_id_empty_sentinel() -> None:
    empty = FrameworkID.empty()
    assert empty.is_empty
    assert empty == FrameworkID()
    assert not FrameworkID(value="fw-1").is_empty


def test_framework_id_rejects_corrupt_bytes() -> None:
    with pytest.raises(StateDecodeError):
        FrameworkID.from_bytes(b"\x0a\x03abc")
    with pytest.raises(StateDecodeError):
        FrameworkID.from_bytes(b'{"value": 5, "extra": true}')


def test_framework_id_is_kept_verbatim() -> None:
    framework_id = FrameworkID(value=" fw-1 ")
    assert FrameworkID.from_bytes(framework_id.to_bytes()).value == " fw-1 "
