"""Application-layer merge policy.

Purpose
-------
Fold an ordered sequence of document nodes into one while tracking which
source supplied each leaf. Free of I/O so alternative builders can reuse it.

Contents
    - ``merge_documents``: public entry point driven by a simple loop.
    - ``_merge_node`` / ``_merge_object``: recursive stanzas applying the
      object-merges-object, everything-else-replaces rule.
    - ``_record`` / ``_clear_branch``: tiny helpers that narrate how
      provenance is updated when values change.

System Role
-----------
Receives ``(source_identity, node)`` pairs from
:meth:`lib_config_data.core.ConfigDataSpec.build` in registration order and
returns the data consumed by :class:`lib_config_data.domain.config.ConfigData`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable

from ..domain.document import copy_node


def merge_documents(
    layers: Iterable[tuple[str, Any]],
) -> tuple[Any, dict[str, dict[str, str]]]:
    """Merge document *layers* left to right, later layers taking precedence.

    Objects merge key by key (first-seen key order, latest values); any other
    pairing (scalar, array, object vs. scalar) is a wholesale replacement.

    Parameters
    ----------
    layers:
        Iterable of ``(source_identity, node)`` tuples ordered from lowest to
        highest precedence. Nodes are never mutated.

    Returns
    -------
    tuple[Any, dict[str, dict[str, str]]]
        ``(merged, provenance)`` where ``provenance`` maps dotted leaf keys to
        ``{"source", "key"}``.

    Examples
    --------
    >>> merged, meta = merge_documents([
    ...     ("a", {"server": {"port": 8080, "threads": 10}}),
    ...     ("b", {"server": {"threads": 20}}),
    ... ])
    >>> merged, meta["server.threads"]["source"]
    ({'server': {'port': 8080, 'threads': 20}}, 'b')
    >>> merge_documents([("a", {"server": {"port": 8080}}), ("b", {"server": "disabled"})])[0]
    {'server': 'disabled'}
    """

    merged: Any = {}
    meta: dict[str, dict[str, str]] = {}
    for source, node in layers:
        merged = _merge_node(merged, node, meta, source, [])
    return merged, meta


def _merge_node(
    current: Any,
    incoming: Any,
    meta: dict[str, dict[str, str]],
    source: str,
    segments: list[str],
) -> Any:
    """Return the result of layering *incoming* over *current*."""

    if isinstance(current, dict) and isinstance(incoming, Mapping):
        if incoming and segments:
            meta.pop(".".join(segments), None)
        _merge_object(current, incoming, meta, source, segments)
        return current
    _clear_branch(meta, segments)
    replacement = copy_node(incoming)
    _record(replacement, meta, source, segments)
    return replacement


def _merge_object(
    target: dict[str, Any],
    incoming: Mapping[str, Any],
    meta: dict[str, dict[str, str]],
    source: str,
    segments: list[str],
) -> None:
    """Merge *incoming* into *target* key by key, in place."""

    for key, value in incoming.items():
        path = segments + [key]
        if key in target:
            target[key] = _merge_node(target[key], value, meta, source, path)
        else:
            clone = copy_node(value)
            _record(clone, meta, source, path)
            target[key] = clone


def _record(node: Any, meta: dict[str, dict[str, str]], source: str, segments: list[str]) -> None:
    """Attribute every leaf below *segments* to *source*."""

    if isinstance(node, dict) and node:
        for key, value in node.items():
            _record(value, meta, source, segments + [key])
        return
    if segments:
        dotted = ".".join(segments)
        meta[dotted] = {"source": source, "key": dotted}


def _clear_branch(meta: dict[str, dict[str, str]], segments: list[str]) -> None:
    """Remove provenance entries that belong to *segments* or its descendants."""

    if not segments:
        meta.clear()
        return
    prefix = ".".join(segments)
    for meta_key in list(meta.keys()):
        if meta_key == prefix or meta_key.startswith(prefix + "."):
            meta.pop(meta_key, None)
