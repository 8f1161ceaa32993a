"""ConfigData value object: immutability, lookups, and typed binding."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, ConfigDict

from lib_config_data import BindingError, ConfigData, MapperConfig, MisuseError
from lib_config_data.domain.config import EMPTY_CONFIG_DATA


class ServerConfig(BaseModel):
    port: int
    threads: int = 4
    debug: bool = False


class StrictServerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    port: int


@dataclass
class DatabaseConfig:
    jdbc_url: str
    pool: list[str] = field(default_factory=list)


class Opaque:
    """Plain class pydantic has no schema for."""

    def __init__(self, value: str) -> None:
        self.value = value


def make_data(mapper: MapperConfig | None = None) -> ConfigData:
    data = {
        "server": {"port": "8080", "threads": "10", "debug": "true", "unknown": "ignored"},
        "db": {"jdbc_url": "jdbc:h2:mem:", "pool": ["a", "b"]},
        "feature": True,
    }
    meta = {"server.port": {"source": "props:<mapping>", "key": "server.port"}}
    return ConfigData(data, meta, mapper or MapperConfig())


def test_mapping_interface() -> None:
    data = make_data()
    assert data["feature"] is True
    assert "server" in data
    assert len(data) == 3
    assert sorted(data) == ["db", "feature", "server"]


def test_bind_subtree_coerces_strings_and_ignores_unknown_fields() -> None:
    server = make_data().bind(ServerConfig, "/server")
    assert server == ServerConfig(port=8080, threads=10, debug=True)


def test_bind_dataclass() -> None:
    assert make_data().bind(DatabaseConfig, "/db") == DatabaseConfig("jdbc:h2:mem:", ["a", "b"])


def test_bind_whole_document() -> None:
    class Root(BaseModel):
        server: ServerConfig
        feature: bool

    root = make_data().bind(Root)
    assert root.server.port == 8080
    assert root.feature is True


def test_bind_missing_pointer_uses_defaults() -> None:
    class LoggingConfig(BaseModel):
        level: str = "info"

    assert make_data().bind(LoggingConfig, "/logging").level == "info"


def test_bind_failure_reports_path() -> None:
    data = ConfigData({"server": {"port": "not-a-number"}})
    with pytest.raises(BindingError) as excinfo:
        data.bind(ServerConfig, "/server")
    assert excinfo.value.path == "/server/port"
    assert "/server/port" in str(excinfo.value)


def test_bind_missing_required_field_reports_path() -> None:
    with pytest.raises(BindingError) as excinfo:
        ConfigData({"server": {}}).bind(ServerConfig, "/server")
    assert excinfo.value.path == "/server/port"


def test_target_own_config_can_forbid_unknown_fields() -> None:
    with pytest.raises(BindingError) as excinfo:
        make_data().bind(StrictServerConfig, "/server")
    assert excinfo.value.path.startswith("/server/")


def test_strict_mapper_refuses_string_coercion() -> None:
    data = make_data(MapperConfig().with_strict())
    with pytest.raises(BindingError):
        data.bind(ServerConfig, "/server")


def test_unbuildable_type_is_misuse() -> None:
    with pytest.raises(MisuseError, match="Opaque"):
        make_data().bind(Opaque, "/server")


def test_registered_factory_builds_unbuildable_type() -> None:
    mapper = MapperConfig().with_factory(Opaque, lambda node: Opaque(node["port"]))
    assert make_data(mapper).bind(Opaque, "/server").value == "8080"


def test_factory_value_error_becomes_binding_error() -> None:
    def refuse(node):
        raise ValueError("port out of range")

    mapper = MapperConfig().with_factory(Opaque, refuse)
    with pytest.raises(BindingError, match="port out of range") as excinfo:
        make_data(mapper).bind(Opaque, "/server")
    assert excinfo.value.path == "/server"


def test_binding_never_mutates_document() -> None:
    class Loose(BaseModel):
        pool: list[str]

    data = make_data()
    bound = data.bind(Loose, "/db")
    bound.pool.append("c")
    assert data.get("db.pool") == ["a", "b"]


def test_constructor_snapshots_input() -> None:
    source = {"server": {"port": "8080"}}
    data = ConfigData(source)
    source["server"]["port"] = "9090"
    assert data.get("server.port") == "8080"


def test_returned_values_are_copies() -> None:
    data = make_data()
    data["server"]["port"] = "1"
    data.node("/db")["pool"].append("z")
    data.as_dict()["feature"] = False
    assert data.get("server.port") == "8080"
    assert data.get("db.pool") == ["a", "b"]
    assert data["feature"] is True


def test_node_and_get_lookups() -> None:
    data = make_data()
    assert data.node("/db/pool/1") == "b"
    assert data.node("/nope") is None
    assert data.get("server.threads") == "10"
    assert data.get("server.nope", default=0) == 0


def test_to_json_and_origin() -> None:
    data = make_data()
    assert json.loads(data.to_json())["db"]["jdbc_url"] == "jdbc:h2:mem:"
    assert data.origin("server.port") == {"source": "props:<mapping>", "key": "server.port"}
    assert data.origin("missing") is None
    assert data.provenance() == {"server.port": {"source": "props:<mapping>", "key": "server.port"}}


def test_empty_config_data() -> None:
    assert len(EMPTY_CONFIG_DATA) == 0
    assert EMPTY_CONFIG_DATA.as_dict() == {}


def test_factory_lookup_failure_becomes_binding_error() -> None:
    mapper = MapperConfig().with_factory(Opaque, lambda node: Opaque(node["host"]))
    with pytest.raises(BindingError, match="KeyError") as excinfo:
        make_data(mapper).bind(Opaque, "/server")
    assert excinfo.value.path == "/server"


def test_factory_config_error_passes_through() -> None:
    def refuse(node):
        raise MisuseError("opaque values need a host")

    mapper = MapperConfig().with_factory(Opaque, refuse)
    with pytest.raises(MisuseError, match="need a host"):
        make_data(mapper).bind(Opaque, "/server")


@pytest.mark.parametrize("pointer", ["server", "server/port"])
def test_relative_pointer_is_misuse(pointer: str) -> None:
    data = make_data()
    with pytest.raises(MisuseError, match="must start with '/'"):
        data.bind(dict, pointer)
    with pytest.raises(MisuseError):
        data.node(pointer)


def test_config_data_is_unhashable_but_comparable() -> None:
    with pytest.raises(TypeError):
        hash(make_data())
    assert make_data() == make_data()
