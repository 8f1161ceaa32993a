"""Canonical document model shared by every configuration source.

Purpose
-------
Describe the tree every source is normalised into before merging. Nodes are
plain JSON-compatible Python values so parsers (``json``, ``yaml``,
``tomllib``) produce them natively and the binder can hand them straight to
pydantic.

Contents
--------
* :data:`Node` – type alias for a document node.
* :data:`MISSING` – sentinel returned when a pointer does not resolve.
* :func:`node_kind` – classify a node as ``object``, ``array`` or ``scalar``.
* :func:`at_pointer` – RFC 6901 JSON pointer lookup.
* :func:`set_path` – insert a value creating intermediate objects.
* :func:`copy_node` – deep, mutable clone.

System Role
-----------
Pure functions without I/O; used by the flat-key sources, the merge engine,
and :class:`lib_config_data.domain.config.ConfigData`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final, Literal, Union

from .errors import MisuseError, ParseError

Node = Union[Mapping[str, Any], list[Any], str, int, float, bool, None]
"""A document node: object (``Mapping``), array (``list``) or scalar."""

NodeKind = Literal["object", "array", "scalar"]


class _Missing:
    """Sentinel type for unresolved pointers."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"


MISSING: Final = _Missing()


def node_kind(node: Any) -> NodeKind:
    """Classify *node*.

    Examples
    --------
    >>> node_kind({"a": 1}), node_kind([1]), node_kind("x"), node_kind(None)
    ('object', 'array', 'scalar', 'scalar')
    """

    if isinstance(node, Mapping):
        return "object"
    if isinstance(node, (list, tuple)):
        return "array"
    return "scalar"


def at_pointer(node: Any, pointer: str | None) -> Any:
    """Resolve an RFC 6901 JSON *pointer* inside *node*.

    ``None`` and ``""`` address the root. Returns :data:`MISSING` when any
    segment does not resolve.

    Examples
    --------
    >>> doc = {"server": {"port": "8080"}, "hosts": ["a", "b"], "a/b": 1}
    >>> at_pointer(doc, "/server/port")
    '8080'
    >>> at_pointer(doc, "/hosts/1")
    'b'
    >>> at_pointer(doc, "/a~1b")
    1
    >>> at_pointer(doc, "/server/missing")
    <MISSING>
    """

    if not pointer:
        return node
    if not pointer.startswith("/"):
        raise MisuseError(f"Invalid JSON pointer {pointer!r}: must start with '/'")
    current = node
    for raw in pointer[1:].split("/"):
        segment = raw.replace("~1", "/").replace("~0", "~")
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, str):
            if not segment.isdigit() or int(segment) >= len(current):
                return MISSING
            current = current[int(segment)]
        else:
            return MISSING
    return current


def set_path(root: dict[str, Any], segments: Sequence[str], value: Any, *, key: str) -> None:
    """Assign *value* at *segments* inside *root*, creating objects as needed.

    Why
    ----
    Flat-key sources (environment, properties) describe a tree one leaf at a
    time. A leaf that collides with an existing branch (or the reverse) is a
    malformed source, reported with the original flat *key*.

    Examples
    --------
    >>> doc: dict = {}
    >>> set_path(doc, ["server", "port"], "8080", key="server.port")
    >>> set_path(doc, ["server", "threads"], "10", key="server.threads")
    >>> doc
    {'server': {'port': '8080', 'threads': '10'}}
    >>> set_path(doc, ["server", "port", "x"], "1", key="server.port.x")
    Traceback (most recent call last):
    ...
    lib_config_data.domain.errors.ParseError: Cannot nest key 'server.port.x' under scalar value at 'server.port'
    """

    cursor = root
    for depth, segment in enumerate(segments[:-1]):
        child = cursor.setdefault(segment, {})
        if not isinstance(child, dict):
            blocked = ".".join(segments[: depth + 1])
            raise ParseError(f"Cannot nest key {key!r} under scalar value at {blocked!r}")
        cursor = child
    leaf = segments[-1]
    if isinstance(cursor.get(leaf), dict):
        raise ParseError(f"Cannot assign scalar key {key!r} over nested object at {'.'.join(segments)!r}")
    cursor[leaf] = value


def copy_node(node: Any) -> Any:
    """Return a deep, mutable copy of *node* (mappings become ``dict``).

    Examples
    --------
    >>> original = {"a": {"b": [1, {"c": 2}]}}
    >>> clone = copy_node(original)
    >>> clone["a"]["b"][1]["c"] = 3
    >>> original["a"]["b"][1]["c"]
    2
    """

    if isinstance(node, Mapping):
        return {key: copy_node(value) for key, value in node.items()}
    if isinstance(node, (list, tuple)):
        return [copy_node(item) for item in node]
    return node


def escape_pointer_segment(segment: str) -> str:
    """Escape *segment* for inclusion in a JSON pointer.

    Examples
    --------
    >>> escape_pointer_segment("a/b~c")
    'a~1b~0c'
    """

    return segment.replace("~", "~0").replace("/", "~1")
