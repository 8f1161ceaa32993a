"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by sources, the builder, and the binder. The
hierarchy lives in the domain layer so every outer layer can raise and catch
it without depending on adapters.

Contents
--------
* :class:`ConfigError` – umbrella base class for all library failures.
* :class:`SourceUnreadable` – a file or URL backing a source cannot be read.
* :class:`ParseError` – a source produced malformed syntax.
* :class:`BindingError` – the merged document cannot become the requested type.
* :class:`MisuseError` – the caller asked for something the library cannot do.

System Role
-----------
None of these errors is recoverable inside the library: ``build()`` and
``bind()`` abort on the first one and surface it unchanged (or wrapped with
source identity) to the caller.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_config_data``."""


class SourceUnreadable(ConfigError):
    """Raised when the bytes behind a source (file, URL) cannot be obtained.

    Typical Sources
    ---------------
    Missing files, permission problems, unreachable URLs.
    """


class ParseError(ConfigError):
    """Raised when a source cannot be parsed into a document node.

    Attributes
    ----------
    source:
        Identity of the failing source (``json:/etc/app.json``).
    line:
        One-based line number when the parser reported one.
    """

    def __init__(self, message: str, *, source: str | None = None, line: int | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.line = line


class BindingError(ConfigError):
    """Raised when a document node cannot be converted into the target type.

    Attributes
    ----------
    path:
        JSON pointer of the offending value within the merged document.
    """

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message)
        self.path = path


class MisuseError(ConfigError):
    """Signals an API misuse, e.g. binding a type that cannot be instantiated.

    Why
    ----
    Distinguish programming mistakes from bad configuration input so callers
    can fail loudly during development.
    """
