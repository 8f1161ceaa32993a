"""Structured logging for configuration builds.

Every record goes through the ``lib_config_data`` logger, which ships with a
``NullHandler`` so the library stays silent until an application attaches its
own handler. Records carry an ``extra={"context": {...}}`` payload holding the
trace identifier of the running :meth:`~lib_config_data.core.ConfigDataSpec.build`
plus the fields produced by :func:`make_event`.

Events
    ``source_read``, ``source_unreadable`` (byte sources), ``source_invalid``
    (decoding failures), ``source_loaded`` (a source produced its node),
    ``env_variables_loaded``, ``source_failed`` (foreign exception wrapped by
    the builder), ``configuration_merged`` and ``binding_failed``.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

SOURCE_READ: Final[str] = "source_read"
SOURCE_UNREADABLE: Final[str] = "source_unreadable"
SOURCE_INVALID: Final[str] = "source_invalid"
SOURCE_LOADED: Final[str] = "source_loaded"
SOURCE_FAILED: Final[str] = "source_failed"
ENV_VARIABLES_LOADED: Final[str] = "env_variables_loaded"
CONFIGURATION_MERGED: Final[str] = "configuration_merged"
BINDING_FAILED: Final[str] = "binding_failed"

EVENTS: Final[frozenset[str]] = frozenset(
    {
        SOURCE_READ,
        SOURCE_UNREADABLE,
        SOURCE_INVALID,
        SOURCE_LOADED,
        SOURCE_FAILED,
        ENV_VARIABLES_LOADED,
        CONFIGURATION_MERGED,
        BINDING_FAILED,
    }
)

TRACE_ID: ContextVar[str | None] = ContextVar("lib_config_data_trace_id", default=None)
"""Identifier of the build currently running in this context."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_config_data")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind *trace_id* to the current context, or clear it with ``None``.

    >>> bind_trace_id("abc123")
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    """

    TRACE_ID.set(trace_id)


def make_event(
    source: str | None,
    *,
    fmt: str | None = None,
    pointer: str | None = None,
    **detail: Any,
) -> dict[str, Any]:
    """Assemble the fields of one configuration event.

    Parameters
    ----------
    source:
        Identity of the source involved (``"json:/etc/app.json"``, ``"env:APP_"``),
        or ``None`` for build-wide events.
    fmt:
        Document format (``json``, ``yaml``, ``properties`` ...) when known.
    pointer:
        JSON pointer the event refers to, used by binding events.
    detail:
        Extra diagnostic fields (key counts, error text, ...).

    Examples
    --------
    >>> make_event("env:APP_", keys=3)
    {'source': 'env:APP_', 'format': None, 'pointer': None, 'keys': 3}
    >>> make_event(None, pointer="/server", target="Server")["pointer"]
    '/server'
    """

    return {"source": source, "format": fmt, "pointer": pointer, **detail}


def log_debug(event: str, **fields: Any) -> None:
    _emit(logging.DEBUG, event, fields)


def log_info(event: str, **fields: Any) -> None:
    _emit(logging.INFO, event, fields)


def log_error(event: str, **fields: Any) -> None:
    _emit(logging.ERROR, event, fields)


def _emit(level: int, event: str, fields: Mapping[str, Any]) -> None:
    context = {"trace_id": TRACE_ID.get(), "event": event}
    context.update(fields)
    _LOGGER.log(level, event, extra={"context": context})
