"""Serialization bridge: values to and from self-describing JSON text.

The serialized form is a JSON object with a single key, the registered type
path, whose value is the field data:

    {"game.components.Health": {"hp": 5, "max_hp": 10}}

Structs encode as objects, tuple structs and tuples as arrays, enum.Enum
members by name. ReflectEnum unit variants encode as the variant name, tuple
variants as {"Name": [...]}, struct variants as {"Name": {...}}. Nested values
are decoded from the declared type hints. Types can take over with the
ReflectSerialize / ReflectDeserialize capabilities.

Usage:
    text = serialize_value(Health(hp=5), registry)
    value = deserialize_value(text, registry)
"""

from __future__ import annotations

import dataclasses
import enum
import json
import types
from typing import Any, Union, get_args, get_origin

from reflectecs.errors import DeserializeError, SerializeError
from reflectecs.registry import (
    ReflectDeserialize,
    ReflectEnum,
    ReflectSerialize,
    TypeRegistry,
    VariantInfo,
    VariantKind,
    enum_root,
    type_info_of,
    variant_info_of,
)
from reflectecs.registry.describe import hint_class, is_namedtuple, is_pydantic


def serialize_value(value: Any, registry: TypeRegistry, indent: int | None = None) -> str:
    """Encode a value as `{type_path: data}` JSON text.

    Raises:
        SerializeError: If the value's type is not registered or any nested
            value cannot be encoded.
    """
    registration = registry.get(type(value))
    if registration is None:
        raise SerializeError(f"Type {type(value).__qualname__} is not registered")
    payload = {registration.type_path: to_data(value, registry)}
    try:
        return json.dumps(payload, indent=indent)
    except (TypeError, ValueError) as err:
        raise SerializeError(f"Cannot encode {registration.type_path}: {err}") from err


def deserialize_value(text: str, registry: TypeRegistry, hint: Any = None) -> Any:
    """Decode `{type_path: data}` JSON text into a value of the registered type.

    `hint` is the declared type of the slot the value is meant for. When it
    names the same class as the type path, its parameters drive the decoding
    of nested values, so `{"builtins.list": [...]}` read for a `list[Item]`
    field comes back as Items rather than plain dicts.

    Raises:
        DeserializeError: On invalid JSON, an unknown type path or data that
            does not fit the type.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as err:
        raise DeserializeError(f"Invalid JSON: {err}") from err
    if not isinstance(payload, dict) or len(payload) != 1:
        raise DeserializeError("Expected an object with exactly one type path key")
    ((type_path, data),) = payload.items()
    registration = registry.get_with_type_path(type_path)
    if registration is None:
        raise DeserializeError(f"Unknown type path {type_path!r}")
    return from_data(data, _slot_hint(registration.type, hint), registry)


def _slot_hint(cls: type, hint: Any) -> Any:
    if hint is None:
        return cls
    if hint_class(hint) is cls:
        return hint
    if get_origin(hint) in (Union, types.UnionType):
        for arg in get_args(hint):
            if hint_class(arg) is cls:
                return arg
    return cls


def to_data(value: Any, registry: TypeRegistry) -> Any:
    """Convert a value into JSON-compatible data."""
    hook = registry.get_type_data(type(value), ReflectSerialize)
    if hook is not None:
        return hook.to_data(value)
    if isinstance(value, enum.Enum):
        return value.name
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, ReflectEnum):
        return _variant_to_data(value, registry)
    if is_namedtuple(type(value)):
        return [to_data(item, registry) for item in value]
    if dataclasses.is_dataclass(value) or is_pydantic(type(value)):
        return {
            field.name: to_data(getattr(value, field.name), registry)
            for field in type_info_of(type(value)).fields
        }
    if isinstance(value, (list, tuple)):
        return [to_data(item, registry) for item in value]
    if isinstance(value, dict):
        if not all(isinstance(key, str) for key in value):
            raise SerializeError("Only maps with string keys can be serialized")
        return {key: to_data(item, registry) for key, item in value.items()}
    raise SerializeError(f"Cannot serialize value of type {type(value).__qualname__}")


def _variant_to_data(value: ReflectEnum, registry: TypeRegistry) -> Any:
    variant = variant_info_of(value)
    if variant is None:
        raise SerializeError(f"{type(value).__qualname__} is not a declared variant")
    if variant.kind is VariantKind.UNIT:
        return variant.name
    if variant.kind is VariantKind.TUPLE:
        return {variant.name: [to_data(getattr(value, f.name), registry) for f in variant.fields]}
    return {
        variant.name: {f.name: to_data(getattr(value, f.name), registry) for f in variant.fields}
    }


def from_data(data: Any, hint: Any, registry: TypeRegistry) -> Any:
    """Build a value of type `hint` from JSON-compatible data."""
    if hint is Any:
        return data
    origin = get_origin(hint)
    if origin in (Union, types.UnionType):
        return _union_from_data(data, hint, registry)
    if origin is list:
        (item_hint,) = get_args(hint) or (Any,)
        return [from_data(item, item_hint, registry) for item in _expect(data, list, hint)]
    if origin is tuple:
        return _tuple_from_data(data, hint, registry)
    if origin is dict:
        args = get_args(hint)
        value_hint = args[1] if len(args) == 2 else Any
        return {
            key: from_data(item, value_hint, registry)
            for key, item in _expect(data, dict, hint).items()
        }

    cls = hint_class(hint)
    if cls is None:
        raise DeserializeError(f"Unsupported type hint {hint!r}")
    hook = registry.get_type_data(cls, ReflectDeserialize)
    if hook is not None:
        try:
            return hook.from_data(data)
        except (TypeError, ValueError) as err:
            raise DeserializeError(f"{cls.__qualname__} rejected {data!r}: {err}") from err
    return _class_from_data(data, cls, registry)


def _class_from_data(data: Any, cls: type, registry: TypeRegistry) -> Any:
    if cls is type(None):
        if data is not None:
            raise DeserializeError(f"Expected null, got {data!r}")
        return None
    if cls is bool:
        return _expect(data, bool, cls)
    if cls is int:
        if isinstance(data, bool) or not isinstance(data, int):
            raise DeserializeError(f"Expected int, got {data!r}")
        return data
    if cls is float:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise DeserializeError(f"Expected float, got {data!r}")
        return float(data)
    if cls is str:
        return _expect(data, str, cls)
    if issubclass(cls, enum.Enum):
        try:
            return cls[_expect(data, str, cls)]
        except KeyError as err:
            raise DeserializeError(f"{cls.__qualname__} has no member {data!r}") from err
    root = enum_root(cls)
    if root is not None:
        return _variant_from_data(data, root, registry)
    info = type_info_of(cls)
    if is_namedtuple(cls):
        items = _expect(data, list, cls)
        if len(items) != len(info.fields):
            raise DeserializeError(
                f"{cls.__qualname__} takes {len(info.fields)} fields, got {len(items)}"
            )
        values = [from_data(item, f.type_hint, registry) for item, f in zip(items, info.fields)]
        return cls(*values)
    if dataclasses.is_dataclass(cls) or is_pydantic(cls):
        return _construct(cls, _struct_kwargs(_expect(data, dict, cls), cls, info.fields, registry))
    if cls in (list, tuple, dict):
        return cls(_expect(data, dict if cls is dict else list, cls))
    raise DeserializeError(f"Cannot deserialize {cls.__qualname__}")


def _union_from_data(data: Any, hint: Any, registry: TypeRegistry) -> Any:
    args = get_args(hint)
    if data is None and type(None) in args:
        return None
    for arg in args:
        if arg is type(None):
            continue
        try:
            return from_data(data, arg, registry)
        except DeserializeError:
            continue
    raise DeserializeError(f"{data!r} matches no member of {hint!r}")


def _tuple_from_data(data: Any, hint: Any, registry: TypeRegistry) -> tuple[Any, ...]:
    items = _expect(data, list, hint)
    args = get_args(hint)
    if len(args) == 2 and args[1] is Ellipsis:
        return tuple(from_data(item, args[0], registry) for item in items)
    if len(items) != len(args):
        raise DeserializeError(f"{hint!r} takes {len(args)} items, got {len(items)}")
    return tuple(from_data(item, arg, registry) for item, arg in zip(items, args))


def _variant_from_data(data: Any, root: type[ReflectEnum], registry: TypeRegistry) -> Any:
    info = type_info_of(root)
    if isinstance(data, str):
        variant = _variant_named(info.variants, data, root)
        if variant.kind is not VariantKind.UNIT:
            raise DeserializeError(f"Variant {data} of {root.__qualname__} carries data")
        return variant.variant()
    if not isinstance(data, dict) or len(data) != 1:
        raise DeserializeError(f"Expected a variant of {root.__qualname__}, got {data!r}")
    ((name, payload),) = data.items()
    variant = _variant_named(info.variants, name, root)
    if variant.kind is VariantKind.TUPLE:
        items = _expect(payload, list, variant.variant)
        if len(items) != len(variant.fields):
            raise DeserializeError(
                f"Variant {name} takes {len(variant.fields)} fields, got {len(items)}"
            )
        values = [from_data(item, f.type_hint, registry) for item, f in zip(items, variant.fields)]
        return _construct(variant.variant, dict(zip((f.name for f in variant.fields), values)))
    if variant.kind is VariantKind.STRUCT:
        kwargs = _struct_kwargs(
            _expect(payload, dict, variant.variant), variant.variant, variant.fields, registry
        )
        return _construct(variant.variant, kwargs)
    raise DeserializeError(f"Variant {name} of {root.__qualname__} carries no data")


def _variant_named(variants: tuple[VariantInfo, ...], name: str, root: type) -> VariantInfo:
    for variant in variants:
        if variant.name == name:
            return variant
    raise DeserializeError(f"{root.__qualname__} has no variant {name!r}")


def _struct_kwargs(
    data: dict[str, Any], cls: type, fields: tuple[Any, ...], registry: TypeRegistry
) -> dict[str, Any]:
    by_name = {f.name: f for f in fields}
    unknown = set(data) - set(by_name)
    if unknown:
        raise DeserializeError(f"{cls.__qualname__} has no fields {sorted(unknown)}")
    return {
        name: from_data(item, by_name[name].type_hint, registry) for name, item in data.items()
    }


def _construct(cls: type, kwargs: dict[str, Any]) -> Any:
    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as err:
        # Missing required fields or pydantic validation failures
        raise DeserializeError(f"Cannot construct {cls.__qualname__}: {err}") from err


def _expect[V](data: Any, kind: type[V], hint: Any) -> V:
    if not isinstance(data, kind):
        name = getattr(hint, "__qualname__", repr(hint))
        raise DeserializeError(f"Expected {kind.__name__} for {name}, got {data!r}")
    return data
