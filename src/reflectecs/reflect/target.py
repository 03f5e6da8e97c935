"""Target addressing: where a reflected value lives.

A ReflectTarget is a pure value naming a record component or a singleton plus
a field path inside it. Nothing is validated at construction and nothing is
cached; every operation re-resolves the target against the world it is given.

Usage:
    target = ReflectTarget.new_record(entity, Health, "hp")
    target.read_value(world)                 # 5
    target.set_value(world, 6)               # ReflectSetSuccess.CHANGED
    target.set_value(world, 6)               # ReflectSetSuccess.NO_CHANGES

    volume = ReflectTarget.new_singleton(AudioSettings, "volume")
    volume.read_value_serialized(world)      # '{"builtins.int": 7}'
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from reflectecs.core.identity import EntityId, SystemEntity
from reflectecs.errors import (
    CapabilityNotAvailableError,
    ComponentNotFoundError,
    EntityNotFoundError,
    ReflectSetSuccess,
    ResourceNotFoundError,
    TypeNotRegisteredError,
)
from reflectecs.reflect import access, enums
from reflectecs.registry import ReflectComponent, ReflectResource, enum_root

if TYPE_CHECKING:
    from reflectecs.reflect.path import FieldRef
    from reflectecs.world.access import ReflectAccess

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RecordLocation:
    """A component attached to a record."""

    entity: EntityId
    component_type: type

    @property
    def borrow_key(self) -> tuple[EntityId, type]:
        return self.entity, enum_root(self.component_type) or self.component_type

    def _capability(self, world: ReflectAccess) -> ReflectComponent:
        registration = world.type_registry.get(self.component_type)
        if registration is None:
            raise TypeNotRegisteredError(self.component_type)
        reflect_component = registration.get(ReflectComponent)
        if reflect_component is None:
            raise CapabilityNotAvailableError(self.component_type, ReflectComponent)
        return reflect_component

    def reflect(self, world: ReflectAccess) -> Any:
        """Return the live component.

        Raises:
            TypeNotRegisteredError: If the type is unknown to the registry.
            CapabilityNotAvailableError: If it is not registered as a component.
            EntityNotFoundError: If the entity does not exist.
            ComponentNotFoundError: If the entity lacks the component.
        """
        reflect_component = self._capability(world)
        if not world.entity_exists(self.entity):
            raise EntityNotFoundError(self.entity)
        value = reflect_component.reflect(world, self.entity)
        if value is None:
            raise ComponentNotFoundError(self.entity, self.component_type)
        return value

    def write(self, world: ReflectAccess, value: Any) -> None:
        self._capability(world).write(world, self.entity, value)

    def __str__(self) -> str:
        return f"{self.component_type.__qualname__}@{self.entity}"


@dataclass(frozen=True, slots=True)
class SingletonLocation:
    """A singleton (resource) value."""

    resource_type: type

    @property
    def borrow_key(self) -> tuple[EntityId, type]:
        return SystemEntity.WORLD, enum_root(self.resource_type) or self.resource_type

    def _capability(self, world: ReflectAccess) -> ReflectResource:
        registration = world.type_registry.get(self.resource_type)
        if registration is None:
            raise TypeNotRegisteredError(self.resource_type)
        reflect_resource = registration.get(ReflectResource)
        if reflect_resource is None:
            raise CapabilityNotAvailableError(self.resource_type, ReflectResource)
        return reflect_resource

    def reflect(self, world: ReflectAccess) -> Any:
        """Return the live singleton.

        Raises:
            TypeNotRegisteredError: If the type is unknown to the registry.
            CapabilityNotAvailableError: If it is not registered as a resource.
            ResourceNotFoundError: If no instance exists.
        """
        value = self._capability(world).reflect(world)
        if value is None:
            raise ResourceNotFoundError(self.resource_type)
        return value

    def write(self, world: ReflectAccess, value: Any) -> None:
        self._capability(world).write(world, value)

    def __str__(self) -> str:
        return self.resource_type.__qualname__


type Location = RecordLocation | SingletonLocation


@dataclass(frozen=True, slots=True)
class ReflectTarget:
    """Address of a value: a location plus a field path inside it."""

    location: Location
    field_path: str = ""

    @classmethod
    def new_singleton(cls, resource_type: type, field_path: str = "") -> ReflectTarget:
        return cls(SingletonLocation(resource_type), field_path)

    @classmethod
    def new_record(
        cls, entity: EntityId, component_type: type, field_path: str = ""
    ) -> ReflectTarget:
        return cls(RecordLocation(entity, component_type), field_path)

    def child(self, path: str) -> ReflectTarget:
        """Target a field below this one.

        Example:
            >>> ReflectTarget.new_record(e, Player, "stats").child("hp").field_path
            'stats.hp'
        """
        if not self.field_path or path.startswith("["):
            joined = self.field_path + path
        else:
            joined = f"{self.field_path}.{path.lstrip('.')}"
        return ReflectTarget(self.location, joined)

    def read_value(self, world: ReflectAccess, value_type: type[T] | None = None) -> T | Any:
        return access.read_path(world, self.location, self.field_path, value_type)

    def set_value(self, world: ReflectAccess, value: Any) -> ReflectSetSuccess:
        return access.set_path(world, self.location, self.field_path, value)

    def apply_value(self, world: ReflectAccess, value: Any) -> ReflectSetSuccess:
        return access.apply_path(world, self.location, self.field_path, value)

    def read_value_serialized(self, world: ReflectAccess) -> str:
        return access.read_path_serialized(world, self.location, self.field_path)

    def set_value_serialized(self, world: ReflectAccess, data: str) -> ReflectSetSuccess:
        return access.set_path_serialized(world, self.location, self.field_path, data)

    def partial_eq_serialized(self, world: ReflectAccess, data: str) -> bool:
        return access.partial_eq_serialized(world, self.location, self.field_path, data)

    def read_enum_variant_name(self, world: ReflectAccess) -> str:
        return access.read_enum_variant_name(world, self.location, self.field_path)

    def toggle_enum(
        self,
        world: ReflectAccess,
        direction: enums.EnumDirection = enums.EnumDirection.FORWARD,
        wrap: bool | None = None,
    ) -> ReflectSetSuccess:
        return enums.toggle_enum_variant(world, self.location, self.field_path, direction, wrap)

    def with_field[R](self, world: ReflectAccess, fn: Callable[[FieldRef], R]) -> R:
        return access.with_field(world, self.location, self.field_path, fn)

    def with_field_mut[R](self, world: ReflectAccess, fn: Callable[[FieldRef], R]) -> R:
        return access.with_field_mut(world, self.location, self.field_path, fn)

    def __str__(self) -> str:
        return f"{self.location}.{self.field_path}" if self.field_path else str(self.location)
