"""Public package surface for the configuration aggregation engine.

Register sources on :class:`ConfigDataSpec` in precedence order, call
``build()``, and bind the merged document into typed objects with
:meth:`ConfigData.bind`.
"""

from __future__ import annotations

from .application.mapper import MapperConfig
from .core import ConfigDataSpec, SourceLoadError, config_data, default_env_prefix
from .domain.config import EMPTY_CONFIG_DATA, ConfigData
from .domain.errors import BindingError, ConfigError, MisuseError, ParseError, SourceUnreadable

__all__ = [
    "BindingError",
    "ConfigData",
    "ConfigDataSpec",
    "ConfigError",
    "EMPTY_CONFIG_DATA",
    "MapperConfig",
    "MisuseError",
    "ParseError",
    "SourceLoadError",
    "SourceUnreadable",
    "config_data",
    "default_env_prefix",
]
