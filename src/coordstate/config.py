"""Configuration for coordstate."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from coordstate._constants import DEFAULT_BASE_URL, DEFAULT_ROOT, DEFAULT_TIMEOUT_S, FRAMEWORK_ID_KEY
from coordstate.exceptions import StateConfigError


@dataclasses.dataclass(frozen=True)
class StateConfig:
    """Backing-store configuration.

    Parameters
    ----------
    base_url : str
        Coordination store HTTP endpoint. Defaults to a local Consul agent.
    root : str
        Prefix every key is stored under, so several frameworks can share
        one cluster. Empty means keys are used as-is.
    framework_id_key : str
        Key holding the framework identity token.
    token : str or None
        ACL token sent with every request.
    datacenter : str or None
        Datacenter to address; ``None`` uses the agent's own.
    timeout : float
        Seconds to wait for a single store round trip. ``0`` disables the
        limit.
    """

    base_url: str = DEFAULT_BASE_URL
    root: str = DEFAULT_ROOT
    framework_id_key: str = FRAMEWORK_ID_KEY
    token: str | None = None
    datacenter: str | None = None
    timeout: float = DEFAULT_TIMEOUT_S

    def __post_init__(self) -> None:
        if not self.base_url:
            raise StateConfigError("base_url must be non-empty")
        if not self.framework_id_key.strip():
            raise StateConfigError("framework_id_key must be non-empty")
        if self.timeout < 0:
            raise StateConfigError(f"timeout must be >= 0, got {self.timeout}")

    @classmethod
    def from_env(cls, **overrides: Any) -> StateConfig:
        """Create configuration from ``COORDSTATE_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        StateConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "COORDSTATE_URL": "base_url",
            "COORDSTATE_ROOT": "root",
            "COORDSTATE_FRAMEWORK_ID_KEY": "framework_id_key",
            "COORDSTATE_TOKEN": "token",
            "COORDSTATE_DATACENTER": "datacenter",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # timeout is numeric, handle separately
        timeout_env = env.get("COORDSTATE_TIMEOUT")
        if timeout_env is not None and "timeout" not in overrides:
            try:
                config_kwargs["timeout"] = float(timeout_env)
            except ValueError as exc:
                raise StateConfigError(f"COORDSTATE_TIMEOUT is not a number: {timeout_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
