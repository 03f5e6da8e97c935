"""Enum variant cycling.

Steps an enum value to the next or previous variant in declaration order. The
new variant is default-constructed: unit variants directly, tuple and struct
variants from one default per field, looked up through the registry by each
field's type hint.

Usage:
    toggle_enum_variant(world, location, "mode", EnumDirection.FORWARD, wrap=True)
    next_index_in_direction(2, 3, EnumDirection.FORWARD, wrap=False)   # None
"""

from __future__ import annotations

import enum
import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

from reflectecs.errors import ReflectSetSuccess, TypeMismatchError
from reflectecs.reflect.access import field_scope
from reflectecs.registry import (
    TypeRegistry,
    VariantInfo,
    VariantKind,
    type_info_of,
    variant_info_of,
)

if TYPE_CHECKING:
    from reflectecs.reflect.target import Location
    from reflectecs.world.access import ReflectAccess

logger = logging.getLogger(__name__)


class EnumDirection(Enum):
    FORWARD = auto()
    BACKWARD = auto()


def next_index_in_direction(
    index: int, length: int, direction: EnumDirection, wrap: bool
) -> int | None:
    """Index of the neighbouring variant, or None when there is none.

    A single-variant enum and an out-of-range index both give None. Without
    wrap, stepping past either end gives None.
    """
    if length == 1 or index < 0 or index > length - 1:
        return None
    if direction is EnumDirection.FORWARD:
        if index + 1 < length:
            return index + 1
        return 0 if wrap else None
    if index > 0:
        return index - 1
    return length - 1 if wrap else None


def construct_default_variant(variant: VariantInfo, registry: TypeRegistry) -> Any:
    """Build a value of `variant` with every field at its default.

    Raises:
        NoDefaultValueError: If any field's type has no default. No partial
            value is built.
    """
    if isinstance(variant.variant, enum.Enum):
        return variant.variant
    if variant.kind is VariantKind.UNIT:
        return variant.variant()
    defaults = [registry.default_value_for(field.type_hint) for field in variant.fields]
    if variant.kind is VariantKind.TUPLE:
        return variant.variant(*defaults)
    return variant.variant(**{f.name: d for f, d in zip(variant.fields, defaults)})


def next_enum_variant(
    value: Any, registry: TypeRegistry, direction: EnumDirection, wrap: bool
) -> Any | None:
    """Default value of the variant next to `value`'s, or None at an edge.

    Raises:
        TypeMismatchError: If `value` is not an enum.
        NoDefaultValueError: If the next variant cannot be default-constructed.
    """
    current = variant_info_of(value)
    if current is None:
        raise TypeMismatchError("enum", type(value))
    variants = type_info_of(type(value)).variants
    index = next_index_in_direction(current.index, len(variants), direction, wrap)
    if index is None:
        return None
    return construct_default_variant(variants[index], registry)


def toggle_enum_variant(
    world: ReflectAccess,
    location: Location,
    path: str,
    direction: EnumDirection = EnumDirection.FORWARD,
    wrap: bool | None = None,
) -> ReflectSetSuccess:
    """Replace the enum at `path` with its neighbouring variant.

    Args:
        wrap: Wrap around at either end. None uses the world's
            `wrap_enum_variants` setting.

    Returns:
        CHANGED, or NO_CHANGES when there is no neighbouring variant.
    """
    if wrap is None:
        wrap = world.settings.wrap_enum_variants
    with field_scope(world, location, path, mutable=True) as ref:
        current = ref.get()
        replacement = next_enum_variant(current, world.type_registry, direction, wrap)
        if replacement is None:
            return ReflectSetSuccess.NO_CHANGES
        ref.set(replacement)
    logger.debug(f"Toggled {location} {path!r} {direction.name.lower()} to {replacement!r}")
    return ReflectSetSuccess.CHANGED
