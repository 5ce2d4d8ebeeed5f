"""Consul KV backend over HTTP.

Consul's key/value store is consensus-backed and exposes optimistic
concurrency through check-and-set: every entry carries a ``ModifyIndex`` and
``PUT ?cas=<index>`` only succeeds when the index is still current
(``cas=0`` means "create only if absent"). That maps one to one onto
:class:`Variable` versions.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from coordstate._constants import CONSUL_KV_PREFIX, CONSUL_TOKEN_HEADER, PATH_SEPARATOR
from coordstate._redact import describe_payload, redact_headers
from coordstate.config import StateConfig
from coordstate.exceptions import StoreConflictError, StoreInterruptedError, StoreTransportError
from coordstate.models.variable import Variable

_logger = logging.getLogger(__name__)


class ConsulBackend:
    """Versioned backend talking to a Consul agent.

    Usage::

        async with ConsulBackend.from_config(StateConfig.from_env()) as backend:
            variable = await backend.fetch("frameworkId")
    """

    def __init__(
        self,
        base_url: str,
        *,
        root: str = "",
        token: str | None = None,
        datacenter: str | None = None,
        timeout: float | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip(PATH_SEPARATOR)
        self._root = root.strip(PATH_SEPARATOR)
        self._token = token
        self._datacenter = datacenter
        self._timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None
        self._external_session = session is not None
        self._http_session = session

    @classmethod
    def from_config(cls, config: StateConfig, *, session: aiohttp.ClientSession | None = None) -> ConsulBackend:
        return cls(
            config.base_url,
            root=config.root,
            token=config.token,
            datacenter=config.datacenter,
            timeout=config.timeout,
            session=session,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ConsulBackend:
        self._http()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
        self._http_session = None

    def _http(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            if self._timeout is not None:
                self._http_session = aiohttp.ClientSession(timeout=self._timeout)
            else:
                self._http_session = aiohttp.ClientSession()
        return self._http_session

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------

    def _url(self, name: str) -> str:
        relative = name.lstrip(PATH_SEPARATOR)
        path = f"{self._root}{PATH_SEPARATOR}{relative}" if self._root else relative
        return f"{self._base_url}{CONSUL_KV_PREFIX}{quote(path, safe=PATH_SEPARATOR)}"

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"accept": "application/json"}
        if self._token:
            headers[CONSUL_TOKEN_HEADER] = self._token
        return headers

    def _params(self, **extra: Any) -> dict[str, str]:
        params = {key: str(value) for key, value in extra.items()}
        if self._datacenter:
            params["dc"] = self._datacenter
        return params

    async def _request(
        self,
        method: str,
        name: str,
        *,
        params: dict[str, str],
        data: bytes | None = None,
    ) -> tuple[int, str]:
        url = self._url(name)
        headers = self._headers()
        _logger.debug(
            "%s %s params=%s headers=%s body=%s",
            method,
            url,
            params,
            redact_headers(headers),
            describe_payload(data),
        )
        try:
            async with self._http().request(method, url, params=params, headers=headers, data=data) as resp:
                text = await resp.text()
                return resp.status, text
        except asyncio.TimeoutError as exc:
            raise StoreInterruptedError(f"{method} {name!r} timed out", key=name) from exc
        except aiohttp.ClientError as exc:
            raise StoreTransportError(f"{method} {name!r} failed: {exc}", key=name) from exc

    # ------------------------------------------------------------------
    # StateBackend
    # ------------------------------------------------------------------

    async def fetch(self, name: str) -> Variable:
        status, text = await self._request("GET", name, params=self._params())
        if status == 404:
            return Variable(name=name)
        if status != 200:
            raise StoreTransportError(
                f"HTTP {status} fetching {name!r}: {text[:200]}",
                key=name,
                status_code=status,
            )
        return _parse_entry(name, text)

    async def store(self, variable: Variable) -> Variable:
        name = variable.name
        status, text = await self._request(
            "PUT",
            name,
            params=self._params(cas=variable.version),
            data=variable.value,
        )
        if status != 200:
            raise StoreTransportError(
                f"HTTP {status} storing {name!r}: {text[:200]}",
                key=name,
                status_code=status,
            )
        if text.strip() != "true":
            raise StoreConflictError(
                f"Check-and-set rejected for {name!r} at version {variable.version}",
                key=name,
                version=variable.version,
            )
        # Consul only acknowledges the write; the index is read back separately.
        # If another writer commits between the PUT and the read-back the index
        # is theirs; the payload returned is always the one written here.
        committed = await self.fetch(name)
        return Variable(name=name, value=variable.value, version=committed.version)


def _parse_entry(name: str, text: str) -> Variable:
    try:
        entries = json.loads(text)
    except json.JSONDecodeError as exc:
        raise StoreTransportError(f"Invalid JSON fetching {name!r}: {text[:200]}", key=name) from exc

    if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
        raise StoreTransportError(f"Unexpected KV response for {name!r}", key=name)

    entry: dict[str, Any] = entries[0]
    encoded = entry.get("Value")
    try:
        value = base64.b64decode(encoded, validate=True) if encoded else b""
    except (binascii.Error, ValueError) as exc:
        raise StoreTransportError(f"Invalid base64 value for {name!r}", key=name) from exc

    try:
        version = int(entry.get("ModifyIndex", 0))
    except (TypeError, ValueError) as exc:
        raise StoreTransportError(f"Invalid ModifyIndex for {name!r}", key=name) from exc
    return Variable(name=name, value=value, version=version)
