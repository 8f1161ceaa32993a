"""Properties and process-property sources.

Purpose
-------
Turn flat ``name=value`` sets into nested document nodes using ``.`` as the
object delimiter. Keys are used verbatim; no case transformation is applied.

Contents
--------
* :func:`parse_properties` – strict ``.properties`` syntax reader.
* :class:`PropertiesSource` – source over an in-memory mapping or raw bytes.
* :class:`SystemPropertiesSource` – source over the interpreter's ``-X``
  options (``python -X app.port=8080``).

Known limitation
----------------
Bracket-indexed keys (``users[0]=alice``) are not reconstructed into arrays;
``"users[0]"`` stays a literal object key.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ...application.ports import ByteSource
from ...domain.errors import ParseError
from ...observability import SOURCE_INVALID, log_error, make_event
from ..names import NameTransformer, build_tree

if TYPE_CHECKING:
    from ...application.mapper import MapperConfig

DEFAULT_PROP_PREFIX = "app."
OBJECT_DELIMITER = "."

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_KEY_TERMINATORS = "=: \t\f"
_UNICODE_ESCAPE = re.compile(r"[0-9a-fA-F]{4}")


def parse_properties(payload: bytes, source: str = "<bytes>") -> dict[str, str]:
    """Parse ``.properties`` *payload* into a flat mapping.

    Supports ``#``/``!`` comments, ``=``/``:``/whitespace separators, trailing
    backslash continuations, and ``\\t \\n \\r \\f \\uXXXX`` escapes. Later
    duplicates win.

    Examples
    --------
    >>> parse_properties(b"# demo\\nserver.port = 8080\\nserver.name: api \\\\\\n    v1\\n")
    {'server.port': '8080', 'server.name': 'api v1'}
    >>> parse_properties(b"bad=\\\\u12", "demo.properties")
    Traceback (most recent call last):
    ...
    lib_config_data.domain.errors.ParseError: Malformed \\uXXXX escape on line 1 in demo.properties
    """

    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        log_error(SOURCE_INVALID, **make_event(source, fmt="properties", error=str(exc)))
        raise ParseError(f"Properties {source} are not valid UTF-8: {exc}", source=source) from exc

    result: dict[str, str] = {}
    for line_number, logical in _logical_lines(text):
        try:
            key, value = _split_entry(logical)
            result[_unescape(key)] = _unescape(value)
        except ValueError as exc:
            log_error(SOURCE_INVALID, **make_event(source, fmt="properties", line=line_number))
            raise ParseError(f"{exc} on line {line_number} in {source}", source=source, line=line_number) from exc
    return result


def _logical_lines(text: str) -> list[tuple[int, str]]:
    """Join continuation lines and drop blanks/comments, keeping start line numbers."""

    lines: list[tuple[int, str]] = []
    pending: list[str] = []
    start = 0
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.lstrip(" \t\f")
        if not pending:
            if not line or line[0] in "#!":
                continue
            start = number
        if _ends_with_continuation(line):
            pending.append(line[:-1])
            continue
        pending.append(line)
        lines.append((start, "".join(pending)))
        pending = []
    if pending:
        lines.append((start, "".join(pending)))
    return lines


def _ends_with_continuation(line: str) -> bool:
    """Return ``True`` when *line* ends in an odd number of backslashes."""

    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _split_entry(line: str) -> tuple[str, str]:
    """Split a logical line at the first unescaped separator."""

    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _KEY_TERMINATORS:
            break
        index += 1
    key = line[:index]
    rest = line[index:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return key, rest


def _unescape(value: str) -> str:
    """Resolve backslash escapes; raise ``ValueError`` on malformed ``\\u``."""

    if "\\" not in value:
        return value
    out: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char != "\\":
            out.append(char)
            index += 1
            continue
        escaped = value[index + 1 : index + 2]
        if escaped == "u":
            digits = value[index + 2 : index + 6]
            if not _UNICODE_ESCAPE.fullmatch(digits):
                raise ValueError("Malformed \\uXXXX escape")
            out.append(chr(int(digits, 16)))
            index += 6
            continue
        out.append(_ESCAPES.get(escaped, escaped))
        index += 2
    return "".join(out)


@dataclass(frozen=True, slots=True)
class PropertiesSource:
    """Configuration source over a flat property set.

    Parameters
    ----------
    properties:
        In-memory mapping or a :class:`ByteSource` yielding ``.properties`` text.
    prefix:
        Optional exact prefix; non-matching keys are dropped, matching keys lose it.

    Examples
    --------
    >>> from lib_config_data.application.mapper import MapperConfig
    >>> source = PropertiesSource({"server.port": "8080", "server.threads": "10", "db.jdbcUrl": "jdbc:h2:mem:"})
    >>> source.load(MapperConfig())
    {'server': {'port': '8080', 'threads': '10'}, 'db': {'jdbcUrl': 'jdbc:h2:mem:'}}
    """

    properties: Mapping[str, Any] | ByteSource
    prefix: str | None = None

    def describe(self) -> str:
        if isinstance(self.properties, Mapping):
            return "props:<mapping>"
        return f"props:{self.properties.describe()}"

    def load(self, mapper: MapperConfig) -> Mapping[str, Any]:
        """Read the entries (bytes are parsed now) and nest them by ``.``."""

        identity = self.describe()
        if isinstance(self.properties, Mapping):
            entries = _entries_from_mapping(self.properties, identity)
        else:
            entries = parse_properties(self.properties.read(), identity)
        transformer = NameTransformer(prefix=self.prefix, delimiter=OBJECT_DELIMITER)
        try:
            return build_tree(entries.items(), transformer)
        except ParseError as exc:
            raise ParseError(f"Invalid properties in {identity}: {exc}", source=identity) from exc


@dataclass(frozen=True, slots=True)
class SystemPropertiesSource:
    """Configuration source over process properties.

    Python's counterpart to JVM system properties are the interpreter ``-X``
    options; ``properties`` may be injected for tests.
    """

    prefix: str | None = DEFAULT_PROP_PREFIX
    properties: Mapping[str, Any] | None = None

    def describe(self) -> str:
        return f"sysprops:{self.prefix}" if self.prefix else "sysprops"

    def load(self, mapper: MapperConfig) -> Mapping[str, Any]:
        current = sys._xoptions if self.properties is None else self.properties
        return PropertiesSource(dict(current), prefix=self.prefix).load(mapper)


def _as_text(value: Any) -> str:
    """Render a property value as text; flag-style ``True`` becomes ``"true"``."""

    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _entries_from_mapping(properties: Mapping[str, Any], identity: str) -> dict[str, str]:
    """Render mapping values as text; a ``None`` value has no textual form."""

    entries: dict[str, str] = {}
    for key, value in properties.items():
        if value is None:
            log_error(SOURCE_INVALID, **make_event(identity, fmt="properties", key=str(key)))
            raise ParseError(f"Property {key!r} in {identity} has no value", source=identity)
        entries[str(key)] = _as_text(value)
    return entries
