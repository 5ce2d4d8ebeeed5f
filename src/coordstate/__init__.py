"""coordstate - Hierarchical, version-checked state on a coordination store."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("coordstate")
except PackageNotFoundError:
    __version__ = "0+local"
from coordstate.backends import ConsulBackend, MemoryBackend, StateBackend
from coordstate.codecs import Codec, JsonCodec, ModelCodec, PickleCodec
from coordstate.config import StateConfig
from coordstate.exceptions import (
    CoordStateError,
    InvalidKeyError,
    StateConfigError,
    StateDecodeError,
    StateEncodeError,
    StateStoreError,
    StoreConflictError,
    StoreInterruptedError,
    StoreTransportError,
)
from coordstate.models import FrameworkID, Variable
from coordstate.state import AsyncState, State

__all__ = [
    "__version__",
    "AsyncState",
    "Codec",
    "ConsulBackend",
    "CoordStateError",
    "FrameworkID",
    "InvalidKeyError",
    "JsonCodec",
    "MemoryBackend",
    "ModelCodec",
    "PickleCodec",
    "State",
    "StateBackend",
    "StateConfig",
    "StateConfigError",
    "StateDecodeError",
    "StateEncodeError",
    "StateStoreError",
    "StoreConflictError",
    "StoreInterruptedError",
    "StoreTransportError",
    "Variable",
]
