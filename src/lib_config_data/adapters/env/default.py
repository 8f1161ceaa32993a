"""Environment variable source.

Purpose
-------
Translate process environment variables into a nested document node.

Key behaviours
--------------
* Keeps only variables starting with the prefix (``DEFAULT_ENV_PREFIX`` unless
  overridden) and strips it.
* ``__`` separates objects, ``_`` separates words inside a segment
  (``APP_SERVER__MAX_THREADS`` → ``{"server": {"maxThreads": ...}}``).
* Values stay strings; the binder performs numeric/boolean coercion.
* A custom :class:`~lib_config_data.application.ports.EnvironmentParser`
  replaces prefix handling and renaming wholesale.
* Emits structured logging via :mod:`lib_config_data.observability`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ...application.ports import EnvironmentParser
from ...domain.errors import ParseError
from ...observability import ENV_VARIABLES_LOADED, log_debug, make_event
from ..names import NameTransformer, Rename, build_tree, upper_underscore_to_camel

if TYPE_CHECKING:
    from ...application.mapper import MapperConfig

DEFAULT_ENV_PREFIX = "APP_"
OBJECT_DELIMITER = "__"


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix('lib-config-data')
    'LIB_CONFIG_DATA_'
    """

    return slug.replace("-", "_").upper() + "_"


@dataclass(frozen=True, slots=True)
class DefaultEnvironmentParser:
    """Prefix filter, ``__`` split, and per-segment rename.

    Examples
    --------
    >>> parser = DefaultEnvironmentParser(prefix="APP_")
    >>> parser.parse({"APP_SERVER__MAX_THREADS": "4", "APP_DB__JDBC_URL": "jdbc:h2:mem:", "PATH": "/bin"})
    {'db': {'jdbcUrl': 'jdbc:h2:mem:'}, 'server': {'maxThreads': '4'}}
    """

    prefix: str | None = DEFAULT_ENV_PREFIX
    rename: Rename = upper_underscore_to_camel

    def parse(self, environ: Mapping[str, str]) -> dict[str, Any]:
        transformer = NameTransformer(prefix=self.prefix, delimiter=OBJECT_DELIMITER, rename=self.rename)
        return build_tree(sorted(environ.items()), transformer)


@dataclass(frozen=True, slots=True)
class EnvironmentSource:
    """Configuration source backed by an environment mapping.

    Parameters
    ----------
    parser:
        Strategy turning the environment into a node.
    environ:
        Mapping to read from. Defaults to :data:`os.environ`, read at load time.
    """

    parser: EnvironmentParser = DefaultEnvironmentParser()
    environ: Mapping[str, str] | None = None

    def describe(self) -> str:
        prefix = getattr(self.parser, "prefix", None)
        return f"env:{prefix}" if prefix else "env"

    def load(self, mapper: MapperConfig) -> Mapping[str, Any]:
        """Return the node produced by the parser for the current environment."""

        environ = dict(os.environ if self.environ is None else self.environ)
        try:
            data = self.parser.parse(environ)
        except ParseError as exc:
            raise ParseError(f"Invalid environment configuration: {exc}", source=self.describe()) from exc
        if not isinstance(data, Mapping):
            raise ParseError("Environment parser did not produce an object", source=self.describe())
        log_debug(ENV_VARIABLES_LOADED, **make_event(self.describe(), keys=sorted(data.keys())))
        return data
