"""Derive structural descriptors from Python classes.

Pure functions: a class goes in, a TypeInfo comes out. Descriptors of ordinary
classes are cached; ReflectEnum roots are described on each call because
variants may be declared after the root is first seen.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import types
import typing
from typing import Any, Union, get_args, get_origin

from reflectecs.registry.enums import ReflectEnum, enum_root
from reflectecs.registry.models import FieldInfo, TypeInfo, TypeKind, VariantInfo, VariantKind

logger = logging.getLogger(__name__)

_CACHE: dict[type, TypeInfo] = {}


def is_pydantic(cls: type) -> bool:
    """Check if class is a Pydantic model without importing pydantic."""
    for base in getattr(cls, "__mro__", ()):
        if base.__module__.startswith("pydantic") and base.__name__ == "BaseModel":
            return True
    return False


def is_namedtuple(cls: type) -> bool:
    return isinstance(cls, type) and issubclass(cls, tuple) and hasattr(cls, "_fields")


def is_optional(hint: Any) -> bool:
    return get_origin(hint) in (Union, types.UnionType) and type(None) in get_args(hint)


def hint_class(hint: Any) -> type | None:
    """Return the runtime class a type hint stands for, if it has one."""
    origin = get_origin(hint)
    if isinstance(origin, type):
        return origin
    if isinstance(hint, type):
        return hint
    return None


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError) as err:
        # Unresolvable forward references leave the fields untyped
        logger.debug(f"Could not resolve type hints of {cls.__qualname__}: {err}")
        return {}


def _dataclass_fields(cls: type) -> tuple[FieldInfo, ...]:
    hints = _type_hints(cls)
    return tuple(
        FieldInfo(name=f.name, index=i, type_hint=hints.get(f.name, Any))
        for i, f in enumerate(dataclasses.fields(cls))
    )


def _pydantic_fields(cls: type) -> tuple[FieldInfo, ...]:
    return tuple(
        FieldInfo(name=name, index=i, type_hint=info.annotation)
        for i, (name, info) in enumerate(cls.model_fields.items())  # type: ignore[attr-defined]
    )


def _namedtuple_fields(cls: type) -> tuple[FieldInfo, ...]:
    hints = _type_hints(cls)
    return tuple(
        FieldInfo(name=name, index=i, type_hint=hints.get(name, Any))
        for i, name in enumerate(cls._fields)  # type: ignore[attr-defined]
    )


def _variant_info(index: int, variant: type[ReflectEnum]) -> VariantInfo:
    fields = _dataclass_fields(variant) if dataclasses.is_dataclass(variant) else ()
    if not fields:
        kind = VariantKind.UNIT
    elif variant.__positional__:
        kind = VariantKind.TUPLE
    else:
        kind = VariantKind.STRUCT
    return VariantInfo(
        name=variant.__name__, index=index, kind=kind, fields=fields, variant=variant
    )


def _describe_reflect_enum(root: type[ReflectEnum]) -> TypeInfo:
    return TypeInfo(
        type=root,
        kind=TypeKind.ENUM,
        variants=tuple(_variant_info(i, v) for i, v in enumerate(root.__variants__)),
        frozen=True,
    )


def _describe(cls: type) -> TypeInfo:
    if issubclass(cls, enum.Enum):
        variants = tuple(
            VariantInfo(name=member.name, index=i, kind=VariantKind.UNIT, variant=member)
            for i, member in enumerate(cls)
        )
        return TypeInfo(type=cls, kind=TypeKind.ENUM, variants=variants, frozen=True)
    if is_namedtuple(cls):
        return TypeInfo(
            type=cls, kind=TypeKind.TUPLE_STRUCT, fields=_namedtuple_fields(cls), frozen=True
        )
    if dataclasses.is_dataclass(cls):
        frozen = cls.__dataclass_params__.frozen  # type: ignore[attr-defined]
        return TypeInfo(
            type=cls, kind=TypeKind.STRUCT, fields=_dataclass_fields(cls), frozen=frozen
        )
    if is_pydantic(cls):
        frozen = bool(cls.model_config.get("frozen", False))  # type: ignore[attr-defined]
        return TypeInfo(type=cls, kind=TypeKind.STRUCT, fields=_pydantic_fields(cls), frozen=frozen)
    if issubclass(cls, list):
        return TypeInfo(type=cls, kind=TypeKind.LIST)
    if issubclass(cls, tuple):
        return TypeInfo(type=cls, kind=TypeKind.TUPLE, frozen=True)
    if issubclass(cls, dict):
        return TypeInfo(type=cls, kind=TypeKind.MAP)
    return TypeInfo(type=cls, kind=TypeKind.VALUE, frozen=True)


def type_info_of(cls: type) -> TypeInfo:
    """Return the structural descriptor of a class.

    Variants of a ReflectEnum are described through their root.
    """
    root = enum_root(cls)
    if root is not None:
        return _describe_reflect_enum(root)
    info = _CACHE.get(cls)
    if info is None:
        info = _describe(cls)
        _CACHE[cls] = info
    return info


def variant_info_of(value: Any) -> VariantInfo | None:
    """Return the active variant of an enum value, or None for non-enums."""
    if isinstance(value, enum.Enum):
        return type_info_of(type(value)).variants[list(type(value)).index(value)]
    if isinstance(value, ReflectEnum):
        info = type_info_of(type(value))
        for variant in info.variants:
            if variant.variant is type(value):
                return variant
    return None
