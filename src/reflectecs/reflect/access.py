"""Value accessor: read, write, compare and (de)serialize values by path.

Every operation resolves its location and path afresh, under a shared borrow
for reads and an exclusive borrow for writes, and keeps no state afterwards.

Usage:
    location = RecordLocation(entity, Health)
    read_path(world, location, "hp", int)            # 5
    set_path(world, location, "hp", 5)               # NO_CHANGES
    set_path(world, location, "hp", 6)               # CHANGED
    set_path_serialized(world, location, "hp", '{"builtins.int": 7}')
"""

from __future__ import annotations

import copy as cp
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from reflectecs.errors import EqualityUndefinedError, ReflectSetSuccess, TypeMismatchError
from reflectecs.reflect.path import FieldRef, resolve_path
from reflectecs.reflect.serde import deserialize_value, serialize_value
from reflectecs.reflect.value import downcast, reflect_debug, reflect_partial_eq
from reflectecs.registry import TypeRegistry, variant_info_of

if TYPE_CHECKING:
    from reflectecs.reflect.target import Location
    from reflectecs.world.access import ReflectAccess

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@contextmanager
def field_scope(
    world: ReflectAccess, location: Location, path: str, mutable: bool = False
) -> Iterator[FieldRef]:
    """Resolve a field and hold the matching borrow while the block runs.

    A mutable scope marks the record changed on exit, including exit by an
    exception, if anything was written through the handle.

    Raises:
        NoAccessError: If the borrow conflicts with an active one.
    """
    root = location.reflect(world)
    entity, component_type = location.borrow_key
    borrow = world.exclusive if mutable else world.shared
    with borrow(entity, component_type):
        writer = (lambda value: location.write(world, value)) if mutable else None
        ref = resolve_path(root, path, writer)
        try:
            yield ref
        finally:
            if ref.written:
                world.mark_changed(entity, component_type)


def read_path(
    world: ReflectAccess, location: Location, path: str, value_type: type[T] | None = None
) -> T | Any:
    """Read a copy of the value at `path`.

    Raises:
        TypeMismatchError: If `value_type` is given and the value is not one.
    """
    with field_scope(world, location, path) as ref:
        value = ref.get()
    if value_type is not None:
        return downcast(value, value_type)
    return value


def set_path(world: ReflectAccess, location: Location, path: str, value: Any) -> ReflectSetSuccess:
    """Write `value` at `path` unless it equals the current value.

    Equality comes from the current value's type. When it is undefined the
    write goes through. A value the field cannot hold fails even when it
    compares equal.

    Returns:
        NO_CHANGES if the values are equal (nothing written), else CHANGED.

    Raises:
        SetFailedError: If the value cannot be stored in the field.
    """
    registry = world.type_registry
    with field_scope(world, location, path, mutable=True) as ref:
        result = _guarded_set(ref, value, registry)
    if result is ReflectSetSuccess.CHANGED:
        logger.debug(f"Set {location} {path!r} = {reflect_debug(value, registry)}")
    return result


def _guarded_set(ref: FieldRef, value: Any, registry: TypeRegistry) -> ReflectSetSuccess:
    ref.check_assignable(value)
    if reflect_partial_eq(ref.get(), value, registry) is True:
        return ReflectSetSuccess.NO_CHANGES
    ref.set(cp.deepcopy(value))
    return ReflectSetSuccess.CHANGED


def apply_path(
    world: ReflectAccess, location: Location, path: str, value: Any
) -> ReflectSetSuccess:
    """Write `value` at `path` without comparing first."""
    with field_scope(world, location, path, mutable=True) as ref:
        ref.set(cp.deepcopy(value))
    logger.debug(f"Applied {location} {path!r} = {reflect_debug(value, world.type_registry)}")
    return ReflectSetSuccess.CHANGED


def read_path_serialized(world: ReflectAccess, location: Location, path: str) -> str:
    """Read the value at `path` as `{type_path: data}` JSON text."""
    value = read_path(world, location, path)
    return serialize_value(value, world.type_registry, indent=world.settings.serialize_indent)


def set_path_serialized(
    world: ReflectAccess, location: Location, path: str, data: str
) -> ReflectSetSuccess:
    """Decode `data` against the field's declared type and write it like set_path()."""
    registry = world.type_registry
    with field_scope(world, location, path, mutable=True) as ref:
        value = deserialize_value(data, registry, ref.type_hint)
        result = _guarded_set(ref, value, registry)
    if result is ReflectSetSuccess.CHANGED:
        logger.debug(f"Set {location} {path!r} from {data}")
    return result


def partial_eq_serialized(world: ReflectAccess, location: Location, path: str, data: str) -> bool:
    """Compare the value at `path` with serialized data.

    Raises:
        EqualityUndefinedError: If the current value's type has no equality.
    """
    registry = world.type_registry
    with field_scope(world, location, path) as ref:
        value = deserialize_value(data, registry, ref.type_hint)
        current = ref.get()
    result = reflect_partial_eq(current, value, registry)
    if result is None:
        raise EqualityUndefinedError(type(current))
    return result


def read_enum_variant_name(world: ReflectAccess, location: Location, path: str) -> str:
    """Name of the active variant of the enum at `path`.

    Raises:
        TypeMismatchError: If the value is not an enum.
    """
    with field_scope(world, location, path) as ref:
        value = ref.get()
    variant = variant_info_of(value)
    if variant is None:
        raise TypeMismatchError("enum", type(value))
    return variant.name


def with_field(
    world: ReflectAccess, location: Location, path: str, fn: Callable[[FieldRef], R]
) -> R:
    """Run `fn` with a read-only handle under a shared borrow."""
    with field_scope(world, location, path) as ref:
        return fn(ref)


def with_field_mut(
    world: ReflectAccess, location: Location, path: str, fn: Callable[[FieldRef], R]
) -> R:
    """Run `fn` with a writable handle under an exclusive borrow."""
    with field_scope(world, location, path, mutable=True) as ref:
        return fn(ref)


def type_key_for_path(registry: TypeRegistry, type_path: str) -> type | None:
    """Registered class for a type path such as "game.components.Health"."""
    return registry.type_key_for_path(type_path)
