"""Composition root for ``lib_config_data``.

Purpose
-------
Provide the builder that records configuration sources in the order they
should apply, then parses, merges, and wraps them into an immutable
:class:`ConfigData` on :meth:`ConfigDataSpec.build`.

Contents
--------
* :class:`SourceLoadError` – error raised when a source fails to materialise.
* :class:`ConfigDataSpec` – mutable builder with one method per source kind.
* :func:`config_data` – one-call convenience wrapper.

System Role
-----------
This module connects adapters (environment, properties, structured documents)
with the merge policy and the domain value object while emitting structured
observability signals. It is the canonical place to wire new source kinds.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Union

from .adapters.byte_sources.default import BytesSource, PathSource, UrlSource, to_byte_source
from .adapters.env.default import (
    DEFAULT_ENV_PREFIX,
    DefaultEnvironmentParser,
    EnvironmentSource,
    default_env_prefix,
)
from .adapters.file_loaders.structured import StructuredSource
from .adapters.names import Rename, upper_underscore_to_camel
from .adapters.properties.default import DEFAULT_PROP_PREFIX, PropertiesSource, SystemPropertiesSource
from .application.mapper import MapperAction, MapperConfig, apply_actions
from .application.merge import merge_documents
from .application.ports import ByteSource, ConfigurationSource, EnvironmentParser
from .domain.config import EMPTY_CONFIG_DATA, ConfigData, SourceInfo
from .domain.errors import BindingError, ConfigError, MisuseError, ParseError, SourceUnreadable
from .observability import (
    CONFIGURATION_MERGED,
    SOURCE_FAILED,
    SOURCE_LOADED,
    bind_trace_id,
    log_debug,
    log_error,
    log_info,
    make_event,
)

Content = Union[bytes, Path, str, ByteSource]
"""Accepted shapes for file-like sources: raw bytes, a path, a path-or-URL string, or a byte source."""


class SourceLoadError(ConfigError):
    """Raised when a source fails for a reason outside the domain taxonomy.

    Why
    ----
    Callers catch one exception family (:class:`ConfigError`); unexpected
    adapter failures (e.g. a custom parser raising ``KeyError``) are wrapped
    with the identity of the source that produced them.
    """


class ConfigDataSpec:
    """Accumulate configuration sources and build :class:`ConfigData`.

    Sources are recorded, not read, when registered. :meth:`build` reads them
    in registration order; later sources take precedence. Every call to
    :meth:`build` starts from scratch.

    Examples
    --------
    >>> data = (
    ...     ConfigDataSpec()
    ...     .props({"server.port": "8080", "server.threads": "10"})
    ...     .json(b'{"server": {"threads": 20}}')
    ...     .build()
    ... )
    >>> data.as_dict()
    {'server': {'port': '8080', 'threads': 20}}
    """

    def __init__(self) -> None:
        self._sources: list[ConfigurationSource] = []
        self._mapper_actions: list[MapperAction] = []

    @property
    def sources(self) -> tuple[ConfigurationSource, ...]:
        """Registered sources in precedence order (lowest first)."""

        return tuple(self._sources)

    def configure_mapper(self, action: MapperAction) -> ConfigDataSpec:
        """Record *action* to customise the mapper before any source is parsed.

        Actions are pure ``MapperConfig -> MapperConfig`` functions applied in
        registration order at build time.
        """

        self._mapper_actions.append(action)
        return self

    def add(self, source: ConfigurationSource) -> ConfigDataSpec:
        """Register a custom source exposing ``load(mapper)`` and ``describe()``."""

        if not isinstance(source, ConfigurationSource):
            raise MisuseError(f"{type(source).__name__} does not provide load(mapper) and describe()")
        self._sources.append(source)
        return self

    def env(
        self,
        prefix: str | None = DEFAULT_ENV_PREFIX,
        rename: Rename = upper_underscore_to_camel,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> ConfigDataSpec:
        """Add environment variables starting with *prefix* (``APP_`` by default).

        The prefix is removed, ``__`` splits objects, and *rename* turns each
        segment into a field name (lower camel case by default).
        """

        return self.add(EnvironmentSource(DefaultEnvironmentParser(prefix, rename), environ))

    def env_parser(self, parser: EnvironmentParser, *, environ: Mapping[str, str] | None = None) -> ConfigDataSpec:
        """Add environment variables interpreted entirely by *parser*."""

        return self.add(EnvironmentSource(parser, environ))

    def sys_props(self, prefix: str | None = DEFAULT_PROP_PREFIX) -> ConfigDataSpec:
        """Add process properties (interpreter ``-X`` options) starting with *prefix*."""

        return self.add(SystemPropertiesSource(prefix))

    def props(self, source: Mapping[str, Any] | Content, prefix: str | None = None) -> ConfigDataSpec:
        """Add a properties mapping, or ``.properties`` bytes/file/URL."""

        if isinstance(source, Mapping):
            return self.add(PropertiesSource(dict(source), prefix))
        return self.add(PropertiesSource(to_byte_source(source), prefix))

    def json(self, source: Content) -> ConfigDataSpec:
        """Add a JSON document."""

        return self.structured("json", source)

    def yaml(self, source: Content) -> ConfigDataSpec:
        """Add a YAML document."""

        return self.structured("yaml", source)

    def toml(self, source: Content) -> ConfigDataSpec:
        """Add a TOML document."""

        return self.structured("toml", source)

    def structured(self, fmt: str, source: Content) -> ConfigDataSpec:
        """Add a document decoded by the codec registered for *fmt*."""

        return self.add(StructuredSource(fmt, to_byte_source(source)))

    def build(self) -> ConfigData:
        """Parse every source in order, merge them, and return :class:`ConfigData`.

        Why
        ----
        Loading happens here (not at registration) so live sources reflect
        their build-time state and repeated builds re-read from scratch.

        What
        ----
        Applies mapper actions, loads each source sequentially, and aborts on
        the first failure: later sources are not read and no partial result
        is produced.

        Side Effects
        ------------
        Binds a fresh trace identifier and emits structured log events.
        """

        bind_trace_id(uuid.uuid4().hex)
        mapper = apply_actions(self._mapper_actions)
        layers: list[tuple[str, Any]] = []
        for source in self._sources:
            identity = source.describe()
            node = _load_source(source, identity, mapper)
            log_debug(SOURCE_LOADED, **make_event(identity, keys=len(node)))
            layers.append((identity, node))

        merged, meta = merge_documents(layers)
        log_info(CONFIGURATION_MERGED, **make_event(None, total_sources=len(layers), keys=len(meta)))
        return ConfigData(merged, meta, mapper)


def _load_source(source: ConfigurationSource, identity: str, mapper: MapperConfig) -> Mapping[str, Any]:
    """Load one source, translating foreign failures into :class:`SourceLoadError`."""

    try:
        node = source.load(mapper)
    except ConfigError:
        raise
    except Exception as exc:
        log_error(SOURCE_FAILED, **make_event(identity, error=str(exc)))
        raise SourceLoadError(f"Failed to load configuration source {identity}: {exc}") from exc
    if not isinstance(node, Mapping):
        raise ParseError(f"Source {identity} did not produce an object", source=identity)
    return node


def config_data(configure: Callable[[ConfigDataSpec], Any]) -> ConfigData:
    """Build configuration data from a spec shaped by *configure*.

    Examples
    --------
    >>> data = config_data(lambda spec: spec.props({"port": "8080"}))
    >>> data["port"]
    '8080'
    """

    spec = ConfigDataSpec()
    configure(spec)
    return spec.build()


__all__ = [
    "BindingError",
    "BytesSource",
    "ConfigData",
    "ConfigDataSpec",
    "ConfigError",
    "DEFAULT_ENV_PREFIX",
    "DEFAULT_PROP_PREFIX",
    "EMPTY_CONFIG_DATA",
    "EnvironmentSource",
    "MapperConfig",
    "MisuseError",
    "ParseError",
    "PathSource",
    "PropertiesSource",
    "SourceInfo",
    "SourceLoadError",
    "SourceUnreadable",
    "StructuredSource",
    "SystemPropertiesSource",
    "UrlSource",
    "config_data",
    "default_env_prefix",
]
