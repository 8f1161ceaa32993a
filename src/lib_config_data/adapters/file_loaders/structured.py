"""Structured document codecs and the structured configuration source.

Purpose
-------
Convert raw JSON, YAML, or TOML bytes into document nodes. Codecs are small
wrappers around ``json``/``yaml.safe_load``/``tomllib`` so error reporting and
observability policies live in one place.

Contents
--------
* :func:`decode_json` / :func:`decode_yaml` / :func:`decode_toml` – default
  codecs registered in :class:`lib_config_data.application.mapper.MapperConfig`.
* :class:`StructuredSource` – configuration source pairing a byte source with
  a declared format.

System Role
-----------
Invoked by :meth:`lib_config_data.core.ConfigDataSpec.build` through
:meth:`StructuredSource.load`. The document's native nesting is preserved; no
name transformation is applied.
"""

from __future__ import annotations

import datetime
import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import yaml

from ...application.ports import ByteSource
from ...domain.errors import MisuseError, ParseError
from ...observability import SOURCE_INVALID, log_error, make_event

if TYPE_CHECKING:
    from ...application.mapper import MapperConfig


def decode_json(payload: bytes, source: str) -> Any:
    """Decode a JSON *payload*.

    Examples
    --------
    >>> decode_json(b'{"enabled": true}', "<bytes>")
    {'enabled': True}
    >>> decode_json(b'{invalid}', "demo.json")
    Traceback (most recent call last):
    ...
    lib_config_data.domain.errors.ParseError: Invalid JSON in demo.json: Expecting property name enclosed in double quotes: line 1 column 2 (char 1)
    """

    try:
        return json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        _report(source, "json", exc)
        raise ParseError(f"Invalid JSON in {source}: {exc}", source=source, line=getattr(exc, "lineno", None)) from exc


def decode_yaml(payload: bytes, source: str) -> Any:
    """Decode a YAML *payload*; an empty document becomes an empty object.

    Keys are always strings (``80:`` and ``on:`` become ``"80"`` and
    ``"true"``) and timestamps become ISO-8601 text.

    Examples
    --------
    >>> decode_yaml(b"server:\\n  port: 8080\\n", "<bytes>")
    {'server': {'port': 8080}}
    >>> decode_yaml(b"# nothing here\\n", "<bytes>")
    {}
    >>> decode_yaml(b"ports:\\n  80: web\\nrelease: 2024-01-01\\n", "<bytes>")
    {'ports': {'80': 'web'}, 'release': '2024-01-01'}
    """

    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        _report(source, "yaml", exc)
        raise ParseError(
            f"Invalid YAML in {source}: {exc}",
            source=source,
            line=mark.line + 1 if mark is not None else None,
        ) from exc
    return {} if data is None else _to_document(data, source, "yaml")


def decode_toml(payload: bytes, source: str) -> Any:
    """Decode a TOML *payload*; dates and times become ISO-8601 text.

    Examples
    --------
    >>> decode_toml(b"[db]\\nport = 5432\\n", "<bytes>")
    {'db': {'port': 5432}}
    """

    try:
        data = tomllib.loads(payload.decode("utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        _report(source, "toml", exc)
        raise ParseError(f"Invalid TOML in {source}: {exc}", source=source, line=getattr(exc, "lineno", None)) from exc
    return _to_document(data, source, "toml")


def _to_document(value: Any, source: str, fmt: str) -> Any:
    """Reduce decoder output to JSON-compatible nodes with string keys."""

    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for key, item in value.items():
            name = _key_text(key, source, fmt)
            if name in result:
                error = ValueError(f"duplicate key {name!r}")
                _report(source, fmt, error)
                raise ParseError(f"Invalid {fmt.upper()} in {source}: {error}", source=source)
            result[name] = _to_document(item, source, fmt)
        return result
    if isinstance(value, (list, tuple)):
        return [_to_document(item, source, fmt) for item in value]
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    error = TypeError(f"unsupported value of type {type(value).__name__}")
    _report(source, fmt, error)
    raise ParseError(f"Invalid {fmt.upper()} in {source}: {error}", source=source)


def _key_text(key: Any, source: str, fmt: str) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    if isinstance(key, (int, float)):
        return str(key)
    if isinstance(key, (datetime.date, datetime.time)):
        return key.isoformat()
    error = TypeError(f"unsupported key of type {type(key).__name__}")
    _report(source, fmt, error)
    raise ParseError(f"Invalid {fmt.upper()} in {source}: {error}", source=source)


def _report(source: str, fmt: str, exc: Exception) -> None:
    log_error(SOURCE_INVALID, **make_event(source, fmt=fmt, error=str(exc)))


@dataclass(frozen=True, slots=True)
class StructuredSource:
    """Configuration source decoding *content* with the codec named *fmt*.

    Examples
    --------
    >>> from lib_config_data.adapters.byte_sources.default import BytesSource
    >>> from lib_config_data.application.mapper import MapperConfig
    >>> StructuredSource("json", BytesSource(b'{"port": 8080}')).load(MapperConfig())
    {'port': 8080}
    """

    fmt: str
    content: ByteSource

    def describe(self) -> str:
        return f"{self.fmt}:{self.content.describe()}"

    def load(self, mapper: MapperConfig) -> Mapping[str, Any]:
        """Read the bytes, decode them, and ensure the root is an object."""

        codec = mapper.codecs.get(self.fmt)
        if codec is None:
            raise MisuseError(f"No codec registered for format {self.fmt!r}; known: {sorted(mapper.codecs)}")
        identity = self.describe()
        data = codec(self.content.read(), identity)
        if not isinstance(data, Mapping):
            log_error(SOURCE_INVALID, **make_event(identity, fmt=self.fmt))
            raise ParseError(f"Document {identity} did not produce an object at its root", source=identity)
        return data
