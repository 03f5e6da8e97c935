"""ReflectECS: path-addressed reflection over an entity/component store.

Usage:
    from reflectecs import ReflectTarget, World, component, resource

    @component
    @dataclass
    class Health:
        hp: int = 10

    world = World()
    entity = world.spawn(Health(hp=5))

    target = ReflectTarget.new_record(entity, Health, "hp")
    target.read_value(world)            # 5
    target.set_value(world, 6)          # ReflectSetSuccess.CHANGED
    target.read_value_serialized(world) # '{"builtins.int": 6}'
"""

__version__ = "0.1.0"

# Configuration
from reflectecs.config import ReflectSettings

# Core primitives
from reflectecs.core import EntityId, SystemEntity

# Errors
from reflectecs.errors import (
    AmbiguousTraitError,
    CapabilityNotAvailableError,
    ComponentNotFoundError,
    DeserializeError,
    EntityNotFoundError,
    EqualityUndefinedError,
    FieldNotFoundError,
    InstanceNotFoundError,
    NoAccessError,
    NoDefaultValueError,
    ReflectError,
    ReflectSetSuccess,
    ResourceNotFoundError,
    SerializeError,
    SetFailedError,
    TypeMismatchError,
    TypeNotRegisteredError,
)

# Reflection engine
from reflectecs.reflect import (
    CopyComponents,
    EnumDirection,
    FieldRef,
    ReflectTarget,
    SetSerialized,
    SetValue,
    ToggleEnum,
    reflect_copy_shared_components,
    reflect_trait_find_one,
    reflect_trait_iter,
    reflect_trait_iter_mut,
    reflect_trait_mut_expect_once,
    reflect_trait_once,
    with_reflect_trait,
    with_reflect_trait_mut,
)

# Type registry
from reflectecs.registry import (
    ReflectComponent,
    ReflectDefault,
    ReflectDeserialize,
    ReflectEnum,
    ReflectPartialEq,
    ReflectResource,
    ReflectSerialize,
    ReflectTrait,
    TraitObject,
    TypeRegistry,
    component,
    get_registry,
    implements,
    resource,
)

# Storage
from reflectecs.storage import LocalStorage, Storage

# World
from reflectecs.world import CommandQueue, FnCommand, World, WorldView

__all__ = [
    # Version
    "__version__",
    # Core
    "EntityId",
    "SystemEntity",
    # Config
    "ReflectSettings",
    # Registry
    "TypeRegistry",
    "get_registry",
    "component",
    "resource",
    "implements",
    "ReflectEnum",
    "ReflectDefault",
    "ReflectPartialEq",
    "ReflectSerialize",
    "ReflectDeserialize",
    "ReflectComponent",
    "ReflectResource",
    "ReflectTrait",
    "TraitObject",
    # Storage
    "Storage",
    "LocalStorage",
    # World
    "World",
    "WorldView",
    "CommandQueue",
    "FnCommand",
    # Reflection
    "ReflectTarget",
    "FieldRef",
    "EnumDirection",
    "with_reflect_trait",
    "with_reflect_trait_mut",
    "reflect_trait_find_one",
    "reflect_trait_once",
    "reflect_trait_mut_expect_once",
    "reflect_trait_iter",
    "reflect_trait_iter_mut",
    "reflect_copy_shared_components",
    "SetValue",
    "SetSerialized",
    "ToggleEnum",
    "CopyComponents",
    # Errors
    "ReflectSetSuccess",
    "ReflectError",
    "TypeNotRegisteredError",
    "CapabilityNotAvailableError",
    "NoDefaultValueError",
    "InstanceNotFoundError",
    "EntityNotFoundError",
    "ComponentNotFoundError",
    "ResourceNotFoundError",
    "FieldNotFoundError",
    "TypeMismatchError",
    "SetFailedError",
    "SerializeError",
    "DeserializeError",
    "EqualityUndefinedError",
    "NoAccessError",
    "AmbiguousTraitError",
]
