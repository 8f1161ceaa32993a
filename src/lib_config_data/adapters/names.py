"""Flat-key name transformation shared by environment and properties sources.

Purpose
-------
Turn a flat delimited key (``APP_SERVER__MAX_THREADS``, ``app.server.port``)
into the list of object path segments the document model understands.

Contents
--------
* :func:`upper_underscore_to_camel` – default segment rename for environment
  variables (``MAX_THREADS`` → ``maxThreads``).
* :func:`identity` – segment rename used by properties sources.
* :class:`NameTransformer` – prefix filter, prefix strip, split, rename.
* :func:`build_tree` – apply a transformer to a whole flat mapping.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from ..domain.document import set_path

Rename = Callable[[str], str]


def upper_underscore_to_camel(segment: str) -> str:
    """Convert an upper-underscore segment into lower camel case.

    Examples
    --------
    >>> upper_underscore_to_camel("MAX_THREADS")
    'maxThreads'
    >>> upper_underscore_to_camel("SERVER")
    'server'
    >>> upper_underscore_to_camel("JDBC_URL_2")
    'jdbcUrl2'
    """

    words = [word for word in segment.split("_") if word]
    if not words:
        return ""
    head, *tail = words
    return head.lower() + "".join(word[:1].upper() + word[1:].lower() for word in tail)


def identity(segment: str) -> str:
    """Return *segment* unchanged."""

    return segment


@dataclass(frozen=True, slots=True)
class NameTransformer:
    """Map a raw flat key to object path segments.

    Parameters
    ----------
    prefix:
        Required key prefix (case-sensitive). ``None`` or ``""`` accepts all keys.
    delimiter:
        Object boundary used to split the stripped key.
    rename:
        Function applied to every segment after splitting.

    Examples
    --------
    >>> env = NameTransformer(prefix="APP_", delimiter="__", rename=upper_underscore_to_camel)
    >>> env("APP_SERVER__MAX_THREADS")
    ['server', 'maxThreads']
    >>> env("OTHER_SERVER") is None
    True
    >>> NameTransformer(prefix="app.")("app.server.port")
    ['server', 'port']
    """

    prefix: str | None = None
    delimiter: str = "."
    rename: Rename = field(default=identity)

    def __call__(self, raw_key: str) -> list[str] | None:
        """Return path segments for *raw_key* or ``None`` when the key is dropped."""

        if self.prefix:
            if not raw_key.startswith(self.prefix):
                return None
            raw_key = raw_key[len(self.prefix) :]
        if not raw_key:
            return None
        segments = [self.rename(part) for part in raw_key.split(self.delimiter)]
        if not all(segments):
            return None
        return segments


def build_tree(entries: Iterable[tuple[str, Any]], transformer: NameTransformer) -> dict[str, Any]:
    """Insert every accepted entry of *entries* into a fresh object node.

    Examples
    --------
    >>> build_tree([("server.port", "8080"), ("db.jdbcUrl", "jdbc:h2:mem:")], NameTransformer())
    {'server': {'port': '8080'}, 'db': {'jdbcUrl': 'jdbc:h2:mem:'}}
    """

    root: dict[str, Any] = {}
    for key, value in entries:
        segments = transformer(key)
        if segments is None:
            continue
        set_path(root, segments, value, key=key)
    return root
