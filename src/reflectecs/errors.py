"""Reflection error taxonomy and write outcomes.

Every engine operation either returns a value or raises a ReflectError subclass.
All of them are recoverable by the caller.

Usage:
    try:
        target.set_value(world, 6)
    except FieldNotFoundError as err:
        print(err.path, err.segment)
"""

from __future__ import annotations

from enum import Enum, auto


class ReflectSetSuccess(Enum):
    """Outcome of a guarded write."""

    CHANGED = auto()
    NO_CHANGES = auto()


class ReflectError(Exception):
    """Base class for every reflection failure."""


class TypeNotRegisteredError(ReflectError):
    """The type key has no entry in the type registry."""

    def __init__(self, type_key: object) -> None:
        name = getattr(type_key, "__qualname__", repr(type_key))
        super().__init__(f"Type {name} is not registered")
        self.type_key = type_key


class CapabilityNotAvailableError(ReflectError):
    """The registration exists but lacks the requested capability."""

    def __init__(self, type_key: object, capability: object) -> None:
        name = getattr(type_key, "__qualname__", repr(type_key))
        cap_name = getattr(capability, "__name__", repr(capability))
        super().__init__(f"Type {name} does not provide {cap_name}")
        self.type_key = type_key
        self.capability = capability


class NoDefaultValueError(CapabilityNotAvailableError):
    """A default value was required but no capability provides one."""


class InstanceNotFoundError(ReflectError):
    """The record or singleton holding the value does not exist."""


class EntityNotFoundError(InstanceNotFoundError):
    def __init__(self, entity: object) -> None:
        super().__init__(f"Entity {entity} not found")
        self.entity = entity


class ComponentNotFoundError(InstanceNotFoundError):
    def __init__(self, entity: object, component_type: object) -> None:
        name = getattr(component_type, "__qualname__", repr(component_type))
        super().__init__(f"Entity {entity} does not have component {name}")
        self.entity = entity
        self.component_type = component_type


class ResourceNotFoundError(InstanceNotFoundError):
    def __init__(self, resource_type: object) -> None:
        name = getattr(resource_type, "__qualname__", repr(resource_type))
        super().__init__(f"Resource {name} does not exist")
        self.resource_type = resource_type


class FieldNotFoundError(ReflectError):
    """A path segment does not exist on the value's current shape."""

    def __init__(self, path: str, segment: str, reason: str) -> None:
        super().__init__(f"Cannot resolve {segment!r} in path {path!r}: {reason}")
        self.path = path
        self.segment = segment
        self.reason = reason


class TypeMismatchError(ReflectError):
    """The resolved value is not of the requested type."""

    def __init__(self, expected: object, actual: object) -> None:
        expected_name = getattr(expected, "__qualname__", repr(expected))
        actual_name = getattr(actual, "__qualname__", repr(actual))
        super().__init__(f"Expected {expected_name}, found {actual_name}")
        self.expected = expected
        self.actual = actual


class SetFailedError(ReflectError):
    """Whole-value apply was rejected by the target shape."""


class SerializeError(ReflectError):
    pass


class DeserializeError(ReflectError):
    pass


class EqualityUndefinedError(ReflectError):
    """The value's type has no equality capability."""

    def __init__(self, type_key: object) -> None:
        name = getattr(type_key, "__qualname__", repr(type_key))
        super().__init__(f"Equality is not defined for {name}")
        self.type_key = type_key


class NoAccessError(ReflectError):
    """The store refused access because a conflicting scope is active."""


class AmbiguousTraitError(ReflectError):
    """More than one attached type implements a trait expected exactly once."""

    def __init__(self, entity: object, trait: object, matches: tuple[type, ...]) -> None:
        trait_name = getattr(trait, "__qualname__", repr(trait))
        names = ", ".join(m.__qualname__ for m in matches)
        super().__init__(
            f"Entity {entity} has {len(matches)} components implementing {trait_name}: {names}"
        )
        self.entity = entity
        self.trait = trait
        self.matches = matches
