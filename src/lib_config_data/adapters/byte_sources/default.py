"""Byte-source adapters for in-memory payloads, files, and URLs.

Purpose
-------
Give properties and structured sources one way to obtain their raw bytes,
deferred until ``build()`` so files and URLs reflect their build-time content.

Contents
--------
* :class:`BytesSource` – wraps an in-memory payload.
* :class:`PathSource` – reads a filesystem path.
* :class:`UrlSource` – fetches a URL via :mod:`urllib.request`.
* :func:`resolve_path_or_url` – URL parse first, filesystem path fallback.
* :func:`to_byte_source` – coerce the public argument shapes into a source.
"""

from __future__ import annotations

import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from ...application.ports import ByteSource
from ...domain.errors import MisuseError, SourceUnreadable
from ...observability import SOURCE_READ, SOURCE_UNREADABLE, log_debug, log_error, make_event

_URL_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class BytesSource:
    """In-memory payload.

    Examples
    --------
    >>> BytesSource(b"port=8080").read()
    b'port=8080'
    """

    payload: bytes
    name: str = "<bytes>"

    def read(self) -> bytes:
        return self.payload

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class PathSource:
    """Filesystem path read in full at build time."""

    path: Path

    def read(self) -> bytes:
        """Return the file bytes or raise :class:`SourceUnreadable`."""

        try:
            payload = self.path.read_bytes()
        except OSError as exc:
            log_error(SOURCE_UNREADABLE, **make_event(str(self.path), error=str(exc)))
            raise SourceUnreadable(f"Cannot read configuration file {self.path}: {exc}") from exc
        log_debug(SOURCE_READ, **make_event(str(self.path), size=len(payload)))
        return payload

    def describe(self) -> str:
        return str(self.path)


@dataclass(frozen=True, slots=True)
class UrlSource:
    """URL fetched in full at build time (``http``, ``https``, ``file`` ...)."""

    url: str

    def read(self) -> bytes:
        """Return the response body or raise :class:`SourceUnreadable`."""

        request = urllib.request.Request(self.url, headers={"User-Agent": "lib-config-data"})
        try:
            with urllib.request.urlopen(request, timeout=_URL_TIMEOUT_SECONDS) as response:
                payload = response.read()
        except (urllib.error.URLError, OSError, ValueError) as exc:
            log_error(SOURCE_UNREADABLE, **make_event(self.url, error=str(exc)))
            raise SourceUnreadable(f"Cannot read configuration URL {self.url}: {exc}") from exc
        log_debug(SOURCE_READ, **make_event(self.url, size=len(payload)))
        return payload

    def describe(self) -> str:
        return self.url


def resolve_path_or_url(path_or_url: str) -> ByteSource:
    """Interpret *path_or_url* as a URL when it carries a scheme, else as a path.

    Single-letter schemes are treated as Windows drive letters.

    Examples
    --------
    >>> resolve_path_or_url("https://example.com/app.json")
    UrlSource(url='https://example.com/app.json')
    >>> type(resolve_path_or_url("config/app.json")).__name__
    'PathSource'
    """

    scheme = urlparse(path_or_url).scheme
    if len(scheme) > 1:
        return UrlSource(path_or_url)
    return PathSource(Path(path_or_url))


def to_byte_source(source: object) -> ByteSource:
    """Coerce bytes, :class:`~pathlib.Path`, ``str`` or a byte source.

    Raises
    ------
    MisuseError
        When *source* has none of the supported shapes.
    """

    if isinstance(source, (bytes, bytearray)):
        return BytesSource(bytes(source))
    if isinstance(source, Path):
        return PathSource(source)
    if isinstance(source, str):
        return resolve_path_or_url(source)
    if isinstance(source, ByteSource):
        return source
    raise MisuseError(f"Unsupported configuration source argument of type {type(source).__name__}")
