"""Reflection engine: path-addressed access to values held in a World.

Architecture Note:
    reflect/ is stateless. Every call receives the world it operates on and
    re-resolves its target, so targets can be stored and replayed freely.
"""

from reflectecs.reflect.access import (
    apply_path,
    field_scope,
    partial_eq_serialized,
    read_enum_variant_name,
    read_path,
    read_path_serialized,
    set_path,
    set_path_serialized,
    type_key_for_path,
    with_field,
    with_field_mut,
)
from reflectecs.reflect.commands import CopyComponents, SetSerialized, SetValue, ToggleEnum
from reflectecs.reflect.copy import reflect_copy_shared_components
from reflectecs.reflect.enums import (
    EnumDirection,
    construct_default_variant,
    next_enum_variant,
    next_index_in_direction,
    toggle_enum_variant,
)
from reflectecs.reflect.path import FieldRef, PathSegment, parse_path, resolve_path
from reflectecs.reflect.serde import deserialize_value, serialize_value
from reflectecs.reflect.target import ReflectTarget, RecordLocation, SingletonLocation
from reflectecs.reflect.traits import (
    reflect_trait_find_one,
    reflect_trait_iter,
    reflect_trait_iter_mut,
    reflect_trait_mut_expect_once,
    reflect_trait_once,
    with_reflect_trait,
    with_reflect_trait_mut,
)
from reflectecs.reflect.value import downcast, is_assignable, reflect_partial_eq

__all__ = [
    # Addressing
    "ReflectTarget",
    "RecordLocation",
    "SingletonLocation",
    # Paths
    "FieldRef",
    "PathSegment",
    "parse_path",
    "resolve_path",
    # Value access
    "read_path",
    "set_path",
    "apply_path",
    "read_path_serialized",
    "set_path_serialized",
    "partial_eq_serialized",
    "read_enum_variant_name",
    "with_field",
    "with_field_mut",
    "field_scope",
    "type_key_for_path",
    # Values
    "reflect_partial_eq",
    "is_assignable",
    "downcast",
    "serialize_value",
    "deserialize_value",
    # Enums
    "EnumDirection",
    "next_index_in_direction",
    "next_enum_variant",
    "construct_default_variant",
    "toggle_enum_variant",
    # Traits
    "with_reflect_trait",
    "with_reflect_trait_mut",
    "reflect_trait_find_one",
    "reflect_trait_once",
    "reflect_trait_mut_expect_once",
    "reflect_trait_iter",
    "reflect_trait_iter_mut",
    # Bulk copy
    "reflect_copy_shared_components",
    # Commands
    "SetValue",
    "SetSerialized",
    "ToggleEnum",
    "CopyComponents",
]
