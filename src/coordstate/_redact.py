"""Redaction of Consul request details for debug logs."""

from __future__ import annotations

from collections.abc import Mapping

from coordstate._constants import CONSUL_TOKEN_HEADER

_SENSITIVE_HEADERS: frozenset[str] = frozenset({CONSUL_TOKEN_HEADER.lower(), "authorization"})


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of *headers* with ACL credentials masked."""
    return {key: "<redacted>" if key.lower() in _SENSITIVE_HEADERS else value for key, value in headers.items()}


def describe_payload(data: bytes | None) -> str:
    """Summarize a request body without exposing its bytes."""
    if data is None:
        return "<none>"
    return f"<bytes:{len(data)}b>"
