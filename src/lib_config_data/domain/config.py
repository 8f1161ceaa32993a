"""Immutable configuration data returned by ``ConfigDataSpec.build()``.

Purpose
-------
Anchor the value object that carries the merged document, the resolved mapper
configuration, and provenance. It performs no I/O; binding is a pure read.

Contents
--------
* :class:`SourceInfo` – typed provenance record (source identity, dotted key).
* :class:`ConfigData` – read-only ``Mapping`` over the merged document with
  typed binding (:meth:`ConfigData.bind`), pointer access, dotted lookups and
  exporters.
* :data:`EMPTY_CONFIG_DATA` – canonical empty instance.

System Role
-----------
Every successful build yields a fresh :class:`ConfigData`. Instances never
change after construction, so concurrent readers need no locking.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, TypedDict, TypeVar, overload

from ..application.mapper import MapperConfig, bind_node
from .document import MISSING, at_pointer, copy_node

T = TypeVar("T")


class SourceInfo(TypedDict):
    """Describe which source supplied a merged leaf.

    Attributes
    ----------
    source:
        Source identity (``"json:/etc/app.json"``, ``"env:APP_"`` ...).
    key:
        Fully qualified dotted key (for example ``"server.port"``).
    """

    source: str
    key: str


@dataclass(frozen=True, slots=True)
class ConfigData(Mapping[str, Any]):
    """Immutable merged configuration with typed binding.

    Parameters
    ----------
    _data:
        Merged root node (an object). Copied on construction.
    _meta:
        Provenance keyed by dotted leaf key.
    mapper:
        Mapper configuration used by :meth:`bind`.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Server:
    ...     port: int
    ...     threads: int = 1
    >>> data = ConfigData({"server": {"port": "8080"}}, {})
    >>> data.bind(Server, "/server")
    Server(port=8080, threads=1)
    >>> data.get("server.port")
    '8080'
    """

    _data: Mapping[str, Any]
    _meta: Mapping[str, SourceInfo] = field(default_factory=dict)
    mapper: MapperConfig = field(default_factory=MapperConfig)

    # Unhashable, like dict.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        """Snapshot incoming mappings so later caller mutation cannot leak in."""

        object.__setattr__(self, "_data", MappingProxyType(copy_node(self._data)))
        object.__setattr__(self, "_meta", MappingProxyType(dict(self._meta)))

    def __getitem__(self, key: str) -> Any:
        return copy_node(self._data[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def bind(self, target: type[T], pointer: str | None = None) -> T:
        """Bind the node at *pointer* (root when omitted) to *target*.

        Why
        ----
        Applications consume configuration as typed objects (pydantic models,
        dataclasses, typed containers) rather than raw trees.

        What
        ----
        A missing pointer binds an empty object so defaults of *target* apply.
        The node is deep-copied first; the stored document is never mutated.

        Raises
        ------
        BindingError
            When the node does not fit *target*.
        MisuseError
            When *target* cannot be instantiated without a registered factory.

        Examples
        --------
        >>> ConfigData({"limits": {"a": "1", "b": "2"}}).bind(dict[str, int], "/limits")
        {'a': 1, 'b': 2}
        """

        node = at_pointer(self._data, pointer)
        if node is MISSING:
            node = {}
        return bind_node(copy_node(node), target, self.mapper, pointer=pointer or "")

    def node(self, pointer: str | None = None) -> Any:
        """Return a mutable copy of the node at *pointer* or ``None`` when absent.

        Examples
        --------
        >>> ConfigData({"db": {"url": "jdbc:h2:mem:"}}).node("/db")
        {'url': 'jdbc:h2:mem:'}
        """

        found = at_pointer(self._data, pointer)
        return None if found is MISSING else copy_node(found)

    def as_dict(self) -> dict[str, Any]:
        """Construct a deep (mutable) ``dict`` copy of the merged document."""

        return copy_node(self._data)

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise the merged document to JSON.

        Examples
        --------
        >>> ConfigData({"server": {"port": "8080"}}).to_json()
        '{"server":{"port":"8080"}}'
        """

        return json.dumps(self.as_dict(), indent=indent, separators=(",", ":"), ensure_ascii=False)

    @overload
    def get(self, key: str, *, default: T) -> Any | T:  # type: ignore[override]
        ...

    @overload
    def get(self, key: str, *, default: None = ...) -> Any | None:  # type: ignore[override]
        ...

    def get(self, key: str, *, default: Any = None) -> Any:
        """Resolve *key* as a dotted path, returning ``default`` when missing.

        Examples
        --------
        >>> cfg = ConfigData({"service": {"timeout": 5}})
        >>> cfg.get("service.timeout")
        5
        >>> cfg.get("missing.path", default="fallback")
        'fallback'
        """

        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, Mapping) or part not in current:
                return default
            current = current[part]
        return copy_node(current)

    def origin(self, key: str) -> SourceInfo | None:
        """Return provenance for dotted leaf *key* or ``None`` when absent."""

        return self._meta.get(key)

    def provenance(self) -> dict[str, SourceInfo]:
        """Return a copy of all provenance records."""

        return {key: dict(info) for key, info in self._meta.items()}  # type: ignore[misc]


EMPTY_CONFIG_DATA = ConfigData({}, {})
"""Canonical empty configuration; safe to share because it is immutable."""
