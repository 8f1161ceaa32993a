"""Adapter contract tests for the application-layer ports.

Built-in sources must keep satisfying the protocols in
``src/lib_config_data/application/ports.py`` so callers can swap in their own
implementations through the same seams.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lib_config_data.adapters.byte_sources.default import BytesSource, PathSource, UrlSource
from lib_config_data.adapters.env.default import DefaultEnvironmentParser, EnvironmentSource
from lib_config_data.adapters.file_loaders.structured import StructuredSource
from lib_config_data.adapters.properties.default import PropertiesSource, SystemPropertiesSource
from lib_config_data.application import ports


@pytest.mark.parametrize(
    "source",
    [
        EnvironmentSource(environ={}),
        PropertiesSource({}),
        SystemPropertiesSource(properties={}),
        StructuredSource("json", BytesSource(b"{}")),
    ],
)
def test_sources_satisfy_configuration_source(source) -> None:
    assert isinstance(source, ports.ConfigurationSource)
    assert source.describe()


@pytest.mark.parametrize("source", [BytesSource(b""), PathSource(Path("app.json")), UrlSource("file:///x")])
def test_byte_sources_satisfy_byte_source(source) -> None:
    assert isinstance(source, ports.ByteSource)


def test_default_parser_satisfies_environment_parser() -> None:
    assert isinstance(DefaultEnvironmentParser(), ports.EnvironmentParser)


def test_sources_are_immutable() -> None:
    source = PropertiesSource({}, "app.")
    with pytest.raises(AttributeError):
        source.prefix = "other."  # type: ignore[misc]
