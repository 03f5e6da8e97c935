"""Type registry: structural descriptors, capability tables and decorators."""

from reflectecs.registry.core import (
    TypeRegistration,
    TypeRegistry,
    component,
    get_registry,
    implements,
    resource,
    trait_method_names,
)
from reflectecs.registry.describe import type_info_of, variant_info_of
from reflectecs.registry.enums import ReflectEnum, enum_root
from reflectecs.registry.models import (
    FieldInfo,
    ReflectComponent,
    ReflectDebug,
    ReflectDefault,
    ReflectDeserialize,
    ReflectPartialEq,
    ReflectResource,
    ReflectSerialize,
    ReflectTrait,
    TraitObject,
    TypeInfo,
    TypeKind,
    VariantInfo,
    VariantKind,
)

__all__ = [
    # Registry
    "TypeRegistry",
    "TypeRegistration",
    "get_registry",
    "component",
    "resource",
    "implements",
    "trait_method_names",
    # Descriptors
    "TypeInfo",
    "TypeKind",
    "FieldInfo",
    "VariantInfo",
    "VariantKind",
    "type_info_of",
    "variant_info_of",
    "ReflectEnum",
    "enum_root",
    # Capabilities
    "ReflectDefault",
    "ReflectPartialEq",
    "ReflectDebug",
    "ReflectSerialize",
    "ReflectDeserialize",
    "ReflectComponent",
    "ReflectResource",
    "ReflectTrait",
    "TraitObject",
]
