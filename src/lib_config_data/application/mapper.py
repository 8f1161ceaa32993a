"""Document-mapper configuration record and the binder built on pydantic.

Purpose
-------
Hold every caller customisation of how bytes become nodes (codecs) and how
nodes become typed objects (factories, strictness) in one immutable record,
assembled from pure actions at ``build()`` time.

Contents
--------
* :class:`MapperConfig` – immutable codec/factory/strictness record.
* :data:`MapperAction` – ``MapperConfig -> MapperConfig`` customisation step.
* :func:`apply_actions` – fold actions over the default record.
* :func:`bind_node` – convert a node into an instance of a target type.

System Role
-----------
Structured sources look up their codec here; :class:`ConfigData` delegates
every ``bind`` call to :func:`bind_node`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, TypeVar

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from ..adapters.file_loaders.structured import decode_json, decode_toml, decode_yaml
from ..domain.document import escape_pointer_segment
from ..domain.errors import BindingError, ConfigError, MisuseError
from ..observability import BINDING_FAILED, log_error, make_event
from .ports import Codec

T = TypeVar("T")

Factory = Callable[[Any], Any]


def _default_codecs() -> Mapping[str, Codec]:
    return MappingProxyType({"json": decode_json, "yaml": decode_yaml, "toml": decode_toml})


@dataclass(frozen=True, slots=True)
class MapperConfig:
    """Immutable description of the document mapper.

    Attributes
    ----------
    codecs:
        Format name → decoder ``(payload, source) -> node``.
    factories:
        Target type → ``node -> instance`` factory used instead of pydantic.
    strict:
        Run pydantic validation in strict mode (no ``"8080"`` → ``8080``
        coercion). Off by default because flat-key sources only produce strings.

    Examples
    --------
    >>> config = MapperConfig().with_codec("lines", lambda payload, source: {"lines": payload.decode().split()})
    >>> sorted(config.codecs)
    ['json', 'lines', 'toml', 'yaml']
    """

    codecs: Mapping[str, Codec] = field(default_factory=_default_codecs)
    factories: Mapping[type, Factory] = field(default_factory=lambda: MappingProxyType({}))
    strict: bool = False

    def with_codec(self, fmt: str, codec: Codec) -> MapperConfig:
        """Return a copy with *codec* registered for *fmt*."""

        return replace(self, codecs=MappingProxyType({**self.codecs, fmt: codec}))

    def with_factory(self, target: type, factory: Factory) -> MapperConfig:
        """Return a copy that builds *target* through *factory*."""

        return replace(self, factories=MappingProxyType({**self.factories, target: factory}))

    def with_strict(self, strict: bool = True) -> MapperConfig:
        """Return a copy with strict coercion switched on or off."""

        return replace(self, strict=strict)


MapperAction = Callable[[MapperConfig], MapperConfig]


def apply_actions(actions: Iterable[MapperAction]) -> MapperConfig:
    """Fold *actions* over the default :class:`MapperConfig` in order.

    Examples
    --------
    >>> apply_actions([lambda m: m.with_strict()]).strict
    True
    """

    config = MapperConfig()
    for action in actions:
        config = action(config)
        if not isinstance(config, MapperConfig):
            raise MisuseError("Mapper actions must return a MapperConfig")
    return config


def bind_node(node: Any, target: type[T], mapper: MapperConfig, *, pointer: str = "") -> T:
    """Convert *node* into an instance of *target*.

    A factory registered for *target* wins; otherwise pydantic validates the
    node. Unknown object fields are ignored unless the target's own pydantic
    configuration forbids them.

    Raises
    ------
    BindingError
        When the node does not fit *target*; ``path`` points at the offending
        value.
    MisuseError
        When *target* has no factory and pydantic cannot build it.
    """

    factory = mapper.factories.get(target)
    if factory is not None:
        try:
            return factory(node)
        except ConfigError:
            raise
        except Exception as exc:
            raise _binding_error(pointer or "/", target, f"{type(exc).__name__}: {exc}") from exc
    adapter = _adapter_for(target)
    try:
        return adapter.validate_python(node, strict=mapper.strict)
    except ValidationError as exc:
        first = exc.errors()[0]
        failing = pointer + "".join("/" + escape_pointer_segment(str(part)) for part in first["loc"])
        raise _binding_error(failing or "/", target, first["msg"]) from exc


def _binding_error(path: str, target: Any, reason: str) -> BindingError:
    log_error(BINDING_FAILED, **make_event(None, pointer=path, target=_type_name(target), error=reason))
    return BindingError(f"Cannot bind {path} to {_type_name(target)}: {reason}", path=path)


def _adapter_for(target: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(target)
    except PydanticSchemaGenerationError as exc:
        raise MisuseError(
            f"Cannot instantiate configuration type {_type_name(target)}; register a factory for it"
        ) from exc


def _type_name(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)
