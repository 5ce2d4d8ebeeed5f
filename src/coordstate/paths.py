"""Key normalization and hierarchical path walking.

The backing store has a flat key space. Hierarchy is emulated by writing an
empty placeholder under every ancestor prefix of a key, so ``/a/b/c`` is
materialized as ``/a``, ``/a/b`` and ``/a/b/c``.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from coordstate._constants import PATH_SEPARATOR, ROOT_PATH
from coordstate.exceptions import InvalidKeyError

_WHITESPACE = re.compile(r"\s+")


def normalize_key(key: str) -> str:
    """Strip whitespace and enforce the trailing-slash rule.

    Raises :class:`InvalidKeyError` for keys ending in ``/`` other than the
    root ``/`` itself.
    """
    normalized = _WHITESPACE.sub("", key)
    if normalized.endswith(PATH_SEPARATOR) and normalized != ROOT_PATH:
        raise InvalidKeyError(f"Invalid trailing slash in key {key!r}", key=key)
    return normalized


def iter_prefixes(key: str) -> Iterator[str]:
    """Yield every prefix of *key* that ends in a non-empty segment, shortest first.

    *key* must already be normalized. A leading ``/`` is preserved on every
    prefix; empty segments (``//``) are kept in the prefix but never yielded
    on their own.

    >>> list(iter_prefixes("/a/b/c"))
    ['/a', '/a/b', '/a/b/c']
    >>> list(iter_prefixes("a/b"))
    ['a', 'a/b']
    >>> list(iter_prefixes("/"))
    []
    """
    prefix = ""
    for index, segment in enumerate(key.split(PATH_SEPARATOR)):
        if index:
            prefix += PATH_SEPARATOR
        prefix += segment
        if segment:
            yield prefix
