"""Properties and process-property sources."""

from __future__ import annotations

import pytest

from lib_config_data.adapters.byte_sources.default import BytesSource, PathSource
from lib_config_data.adapters.properties.default import (
    DEFAULT_PROP_PREFIX,
    PropertiesSource,
    SystemPropertiesSource,
    parse_properties,
)
from lib_config_data.application.mapper import MapperConfig
from lib_config_data.domain.errors import ParseError, SourceUnreadable

MAPPER = MapperConfig()
SAMPLE_SYS_PROPS = {"user.name": "jdoe", "file.encoding": "UTF-8", "user.language": "en"}


def props_source(entries, prefix=None) -> PropertiesSource:
    if isinstance(entries, str):
        return PropertiesSource(BytesSource(entries.encode("utf-8")), prefix)
    return PropertiesSource(dict(entries), prefix)


@pytest.mark.parametrize("prefix", [None, ""])
def test_supports_no_prefix(prefix) -> None:
    data = props_source({"port": "8080", "threads": "10"}, prefix).load(MAPPER)
    assert data == {"port": "8080", "threads": "10"}
    assert len(data) == 2


@pytest.mark.parametrize(
    ("prefix", "entries"),
    [
        (DEFAULT_PROP_PREFIX, SAMPLE_SYS_PROPS | {f"{DEFAULT_PROP_PREFIX}port": "8080", f"{DEFAULT_PROP_PREFIX}threads": "10"}),
        ("app.", SAMPLE_SYS_PROPS | {"app.port": "8080", "app.threads": "10"}),
    ],
)
def test_prefix_keeps_only_matching_entries_minus_prefix(prefix, entries) -> None:
    data = props_source(entries, prefix).load(MAPPER)
    assert data == {"port": "8080", "threads": "10"}
    assert len(data) == 2


def test_entries_are_broken_into_sub_objects_on_dots() -> None:
    data = props_source({"server.port": "8080", "server.threads": "10", "db.jdbcUrl": "jdbc:h2:mem:"}).load(MAPPER)
    assert data == {"server": {"port": "8080", "threads": "10"}, "db": {"jdbcUrl": "jdbc:h2:mem:"}}
    assert len(data) == 2


def test_indexed_keys_stay_literal_object_keys() -> None:
    data = props_source("users[0]=alice\nusers[1]=bob\n").load(MAPPER)
    assert data == {"users[0]": "alice", "users[1]": "bob"}
    assert "users" not in data


def test_indexed_object_keys_stay_literal() -> None:
    data = props_source("dbs[0].name=test\ndbs[0].url=jdbc:mysql://test/test\n").load(MAPPER)
    assert data == {"dbs[0]": {"name": "test", "url": "jdbc:mysql://test/test"}}


def test_later_duplicate_wins() -> None:
    data = props_source("port=1\nport=2\n").load(MAPPER)
    assert data == {"port": "2"}


def test_non_string_mapping_values_become_text() -> None:
    assert props_source({"port": 8080, "debug": True}).load(MAPPER) == {"port": "8080", "debug": "true"}


def test_property_file_syntax() -> None:
    payload = (
        "# comment\n"
        "! another comment\n"
        "\n"
        "a=1\n"
        "b : 2\n"
        "c 3\n"
        "d\n"
        "e=multi \\\n"
        "    line\n"
        "f=tab\\there\n"
        "g=\\u0041\n"
        "key\\ with\\ spaces=x\n"
        "h=a=b\n"
    ).encode("utf-8")
    assert parse_properties(payload) == {
        "a": "1",
        "b": "2",
        "c": "3",
        "d": "",
        "e": "multi line",
        "f": "tab\there",
        "g": "A",
        "key with spaces": "x",
        "h": "a=b",
    }


def test_malformed_unicode_escape_reports_line() -> None:
    with pytest.raises(ParseError) as excinfo:
        props_source("ok=1\nbad=\\u00zz\n").load(MAPPER)
    assert excinfo.value.line == 2
    assert excinfo.value.source == "props:<bytes>"


def test_invalid_utf8_is_parse_error() -> None:
    with pytest.raises(ParseError):
        PropertiesSource(BytesSource(b"a=\xff\xfe")).load(MAPPER)


def test_scalar_object_collision_is_parse_error() -> None:
    with pytest.raises(ParseError, match="server"):
        props_source("server=off\nserver.port=1\n").load(MAPPER)


def test_properties_file(tmp_path) -> None:
    path = tmp_path / "app.properties"
    path.write_text("server.port=8080\n", encoding="utf-8")
    assert PropertiesSource(PathSource(path)).load(MAPPER) == {"server": {"port": "8080"}}


def test_missing_properties_file(tmp_path) -> None:
    with pytest.raises(SourceUnreadable):
        PropertiesSource(PathSource(tmp_path / "missing.properties")).load(MAPPER)


def test_system_properties_with_injected_mapping() -> None:
    source = SystemPropertiesSource(properties=SAMPLE_SYS_PROPS | {"app.server.port": "8080", "app.debug": True})
    assert source.load(MAPPER) == {"server": {"port": "8080"}, "debug": "true"}


def test_system_properties_read_interpreter_x_options(monkeypatch: pytest.MonkeyPatch) -> None:
    import sys

    monkeypatch.setattr(sys, "_xoptions", {"app.port": "9090", "dev": True})
    assert SystemPropertiesSource().load(MAPPER) == {"port": "9090"}
    assert SystemPropertiesSource(prefix=None).load(MAPPER) == {"app": {"port": "9090"}, "dev": "true"}


def test_mapping_value_none_is_rejected() -> None:
    with pytest.raises(ParseError, match="'server.port'") as excinfo:
        PropertiesSource({"server.port": None}).load(MAPPER)
    assert excinfo.value.source == "props:<mapping>"
