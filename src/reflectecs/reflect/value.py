"""Value capability interface: equality, assignability, downcast, debug.

These are the operations the engine performs on a value without knowing its
static type. Equality and debug formatting come from the registration's
capability table; assignability and downcast use the structural rules below.
"""

from __future__ import annotations

import types
from typing import Any, Literal, TypeVar, Union, get_args, get_origin

from reflectecs.errors import TypeMismatchError
from reflectecs.registry import ReflectDebug, ReflectPartialEq, TypeRegistry, enum_root
from reflectecs.registry.describe import hint_class

T = TypeVar("T")


def reflect_partial_eq(a: Any, b: Any, registry: TypeRegistry) -> bool | None:
    """Compare two values with the equality capability of `a`'s type.

    Values of different types are never equal, so 5 and 5.0 or 1 and True
    compare False.

    Returns:
        True or False, or None when the type has no equality capability.
    """
    reflect_eq = registry.get_type_data(type(a), ReflectPartialEq)
    if reflect_eq is None:
        return None
    if type(a) is not type(b):
        return False
    return reflect_eq.partial_eq(a, b)


def reflect_debug(value: Any, registry: TypeRegistry) -> str:
    reflect_fmt = registry.get_type_data(type(value), ReflectDebug)
    return reflect_fmt.debug(value) if reflect_fmt is not None else repr(value)


def matches_hint(value: Any, hint: Any) -> bool:
    """Check a value against a type hint, shallowly.

    Generic parameters are not inspected: `list[int]` accepts any list.
    Booleans never satisfy `int` or `float`; ints satisfy `float`.
    """
    if hint is Any:
        return True
    if hint is type(None):
        return value is None
    origin = get_origin(hint)
    if origin in (Union, types.UnionType):
        return any(matches_hint(value, arg) for arg in get_args(hint))
    if origin is Literal:
        return value in get_args(hint)
    if isinstance(hint, TypeVar):
        return True
    cls = hint_class(hint)
    if cls is None:
        return False
    if cls is int or cls is float:
        if isinstance(value, bool):
            return False
        return isinstance(value, (int, float)) if cls is float else isinstance(value, int)
    return isinstance(value, cls)


def is_assignable(current: Any, value: Any, hint: Any) -> bool:
    """Whether `value` may replace `current` in a slot declared as `hint`.

    Same type always works; a sibling variant of the same data-carrying enum
    works; otherwise the value must match the slot's type hint. A hint of
    None means the slot has no declared type and only exact matches pass.
    """
    if type(value) is type(current):
        return True
    root = enum_root(type(current))
    if root is not None and enum_root(type(value)) is root:
        return True
    if hint is None:
        return False
    return matches_hint(value, hint)


def downcast(value: Any, value_type: type[T]) -> T:
    """Return `value` if it is an instance of `value_type`.

    Raises:
        TypeMismatchError: If it is not. `bool` is never accepted as `int`.
    """
    if value_type is int and isinstance(value, bool):
        raise TypeMismatchError(value_type, type(value))
    if not isinstance(value, value_type):
        raise TypeMismatchError(value_type, type(value))
    return value
