"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts the builder relies on so new source kinds can
be plugged in without inheriting from library classes.

Contents
--------
* :class:`ByteSource` – yields raw bytes for file/URL/in-memory inputs.
* :class:`ConfigurationSource` – produces a document node at build time.
* :class:`EnvironmentParser` – turns an environment mapping into a node.
* :class:`Codec` – decodes raw bytes of one structured format.

System Role
-----------
Built-in sources in :mod:`lib_config_data.adapters` satisfy these protocols
structurally; callers may supply their own implementations to
:meth:`lib_config_data.core.ConfigDataSpec.add` and
:meth:`lib_config_data.core.ConfigDataSpec.env_parser`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .mapper import MapperConfig


@runtime_checkable
class ByteSource(Protocol):
    """Provide the raw bytes behind a properties or structured source."""

    def read(self) -> bytes:
        """Return the full payload or raise ``SourceUnreadable``."""

    def describe(self) -> str:
        """Return a human readable identity (path, URL, ``<bytes>``)."""


@runtime_checkable
class ConfigurationSource(Protocol):
    """Produce a document node when the configuration is built.

    Why
    ----
    Loading is deferred until ``build()`` so sources backed by live state
    (environment, process properties, files) reflect their build-time value.
    """

    def load(self, mapper: MapperConfig) -> Any:
        """Return the document node for this source."""

    def describe(self) -> str:
        """Return the identity used in logs, errors, and provenance."""


@runtime_checkable
class EnvironmentParser(Protocol):
    """Replace the default prefix/split/rename environment handling wholesale."""

    def parse(self, environ: Mapping[str, str]) -> Mapping[str, Any]:
        """Return a complete object node built from *environ*."""


class Codec(Protocol):
    """Decode bytes of a structured format into a document node."""

    def __call__(self, payload: bytes, source: str) -> Any:
        """Raise ``ParseError`` for malformed payloads."""
