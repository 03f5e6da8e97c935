"""Registry models: structural descriptors and capability type data.

Structural descriptors (TypeInfo, FieldInfo, VariantInfo) describe the shape of
a class. Capability type data (ReflectDefault, ReflectPartialEq, ...) is stored
per registration and looked up by its own class, or by trait for ReflectTrait.
"""

from __future__ import annotations

import functools
import operator
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

from reflectecs.core.identity import EntityId, SystemEntity
from reflectecs.errors import TypeMismatchError

if TYPE_CHECKING:
    from reflectecs.world.access import ReflectAccess


class TypeKind(Enum):
    """Structural shape of a type."""

    VALUE = auto()  # Opaque leaf: primitives and anything without fields
    STRUCT = auto()  # Named fields: dataclasses, pydantic models
    TUPLE_STRUCT = auto()  # Positional fields: NamedTuple
    ENUM = auto()  # enum.Enum or ReflectEnum
    LIST = auto()
    TUPLE = auto()
    MAP = auto()


class VariantKind(Enum):
    """Payload shape of one enum variant."""

    UNIT = auto()
    TUPLE = auto()
    STRUCT = auto()


@dataclass(frozen=True, slots=True)
class FieldInfo:
    """One field of a struct, tuple struct or variant."""

    name: str
    index: int
    type_hint: Any = Any


@dataclass(frozen=True, slots=True)
class VariantInfo:
    """One alternative of an enum.

    `variant` is the variant class for ReflectEnum, or the member for enum.Enum.
    """

    name: str
    index: int
    kind: VariantKind
    fields: tuple[FieldInfo, ...] = ()
    variant: Any = None

    def field(self, name: str) -> FieldInfo | None:
        for info in self.fields:
            if info.name == name:
                return info
        return None

    def field_at(self, index: int) -> FieldInfo | None:
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return None


@dataclass(frozen=True, slots=True)
class TypeInfo:
    """Structural descriptor of a class.

    Attributes:
        type: The described class (the enum root for ReflectEnum variants).
        kind: Structural shape.
        fields: Fields for STRUCT and TUPLE_STRUCT kinds.
        variants: Variants for ENUM kinds, in index order.
        frozen: True when instances cannot be mutated in place.
    """

    type: type
    kind: TypeKind
    fields: tuple[FieldInfo, ...] = ()
    variants: tuple[VariantInfo, ...] = ()
    frozen: bool = False

    @property
    def type_path(self) -> str:
        return f"{self.type.__module__}.{self.type.__qualname__}"

    def field(self, name: str) -> FieldInfo | None:
        for info in self.fields:
            if info.name == name:
                return info
        return None

    def field_at(self, index: int) -> FieldInfo | None:
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return None

    def variant_named(self, name: str) -> VariantInfo | None:
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None


# Capability type data


@dataclass(frozen=True, slots=True)
class ReflectDefault:
    """Constructs a default instance of the type."""

    factory: Callable[[], Any]

    def default(self) -> Any:
        return self.factory()


@dataclass(frozen=True, slots=True)
class ReflectPartialEq:
    """Deep equality between two values of the type."""

    eq: Callable[[Any, Any], Any] = operator.eq

    def partial_eq(self, a: Any, b: Any) -> bool:
        return bool(self.eq(a, b))


@dataclass(frozen=True, slots=True)
class ReflectDebug:
    """Debug formatting."""

    fmt: Callable[[Any], str] = repr

    def debug(self, value: Any) -> str:
        return self.fmt(value)


@dataclass(frozen=True, slots=True)
class ReflectSerialize:
    """Custom conversion of a value to JSON-compatible data."""

    to_data: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class ReflectDeserialize:
    """Custom reconstruction of a value from JSON-compatible data."""

    from_data: Callable[[Any], Any]


@dataclass(frozen=True, slots=True)
class ReflectComponent:
    """Whole-value access to a component on a record."""

    component_type: type

    def reflect(self, world: ReflectAccess, entity: EntityId) -> Any | None:
        """Return the live component, or None if the entity does not carry it."""
        return world.component_ref(entity, self.component_type)

    def write(self, world: ReflectAccess, entity: EntityId, value: Any) -> None:
        world.write_component(entity, value)


@dataclass(frozen=True, slots=True)
class ReflectResource:
    """Whole-value access to a singleton."""

    resource_type: type

    def reflect(self, world: ReflectAccess) -> Any | None:
        return world.component_ref(SystemEntity.WORLD, self.resource_type)

    def write(self, world: ReflectAccess, value: Any) -> None:
        world.write_component(SystemEntity.WORLD, value)


@dataclass(frozen=True, slots=True)
class ReflectTrait:
    """Function table of one trait implementation.

    Registered under the trait class itself, so one registration can hold
    several traits.
    """

    trait: type
    implementor: type
    functions: Mapping[str, Callable[..., Any]] = field(default_factory=dict)

    def get(self, value: Any) -> TraitObject:
        """Bind a value of the implementing type to this function table."""
        if not isinstance(value, self.implementor):
            raise TypeMismatchError(self.implementor, type(value))
        return TraitObject(value, self)

    def call(self, name: str, value: Any, *args: Any, **kwargs: Any) -> Any:
        return getattr(self.get(value), name)(*args, **kwargs)


class TraitObject:
    """A value viewed through one trait's function table.

    Attribute access resolves trait methods only, bound to the value.
    """

    __slots__ = ("_reflect_trait", "_value")

    def __init__(self, value: Any, reflect_trait: ReflectTrait) -> None:
        self._value = value
        self._reflect_trait = reflect_trait

    @property
    def value(self) -> Any:
        return self._value

    def __getattr__(self, name: str) -> Any:
        function = self._reflect_trait.functions.get(name)
        if function is None:
            raise AttributeError(
                f"{self._reflect_trait.trait.__qualname__} has no method {name!r}"
            )
        return functools.partial(function, self._value)

    def __repr__(self) -> str:
        return f"TraitObject({self._reflect_trait.trait.__qualname__}, {self._value!r})"
