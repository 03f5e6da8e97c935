"""World: Central store for entities, components, and singletons.

Usage:
    world = World()

    # Spawn entities
    entity = world.spawn(Position(0, 0), Velocity(1, 0))

    # Singletons live on SystemEntity.WORLD
    world.set_singleton(Settings(volume=5))

    # Reflective access goes through ReflectTarget
    target = ReflectTarget.new_record(entity, Position, "x")
    target.set_value(world, 3.0)

    # Deferred commands
    world.defer(SetValue(target, 4.0))
    world.flush()
"""

from __future__ import annotations

import warnings
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager
from typing import Any, TypeVar

from reflectecs.config import ReflectSettings
from reflectecs.core.identity import EntityId, SystemEntity
from reflectecs.core.types import Copy
from reflectecs.errors import NoAccessError
from reflectecs.registry import TypeRegistry, get_registry
from reflectecs.registry.enums import enum_root
from reflectecs.storage.local import LocalStorage
from reflectecs.storage.protocol import Storage
from reflectecs.world.access import BorrowTracker, WorldView
from reflectecs.world.commands import Command, CommandOutcome, CommandQueue

ComponentT = TypeVar("ComponentT")


class World:
    """Central world state.

    Owns the storage backend, the type registry used for reflection, the
    borrow tracker, and the deferred command queue. Public getters return deep
    copies; the reflection engine reads live values through component_ref()
    while holding a borrow.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        type_registry: TypeRegistry | None = None,
        settings: ReflectSettings | None = None,
    ):
        self._storage = storage or LocalStorage()
        self._registry = type_registry if type_registry is not None else get_registry()
        self._settings = settings or ReflectSettings()
        self._borrows = BorrowTracker()
        self._commands = CommandQueue()
        self._storage.ensure_entity(SystemEntity.WORLD)

    @property
    def type_registry(self) -> TypeRegistry:
        return self._registry

    @property
    def settings(self) -> ReflectSettings:
        return self._settings

    @property
    def commands(self) -> CommandQueue:
        return self._commands

    def spawn(self, *components: Any) -> EntityId:
        """Create entity with components."""
        entity = self._storage.create_entity()
        seen_types: set[type] = set()
        for comp in components:
            comp_type = _storage_type(comp)
            if comp_type in seen_types:
                warnings.warn(
                    f"spawn() received multiple components of type {comp_type.__name__}. "
                    f"Only the last one will be kept.",
                    stacklevel=2,
                )
            seen_types.add(comp_type)
            self._storage.set_component(entity, comp)
        return entity

    def destroy(self, entity: EntityId) -> None:
        """Destroy entity and all its components."""
        self._storage.destroy_entity(entity)

    def entity_exists(self, entity: EntityId) -> bool:
        return self._storage.entity_exists(entity)

    def entities(self) -> Iterator[EntityId]:
        return self._storage.all_entities()

    def get_copy(
        self, entity: EntityId, component_type: type[ComponentT]
    ) -> Copy[ComponentT] | None:
        """Get component copy.

        Returns a deep copy to prevent accidental mutation of world state.
        Modifications must be written back via world.set() or a ReflectTarget.
        """
        return self._storage.get_component(entity, component_type, copy=True)

    def set(self, entity: EntityId, component: Any) -> None:
        """Set component.

        Raises:
            NoAccessError: If the component is currently borrowed.
            ValueError: If the entity does not exist.
        """
        key = (entity, _storage_type(component))
        if self._borrows.is_borrowed(key):
            raise NoAccessError(
                f"Cannot set {key[1].__qualname__} on entity {entity}: component is borrowed"
            )
        self._storage.set_component(entity, component)

    def remove(self, entity: EntityId, component_type: type) -> bool:
        """Remove component. Returns True if it existed.

        Raises:
            NoAccessError: If the component is currently borrowed.
        """
        if self._borrows.is_borrowed((entity, enum_root(component_type) or component_type)):
            raise NoAccessError(
                f"Cannot remove {component_type.__qualname__} on entity {entity}: "
                f"component is borrowed"
            )
        return self._storage.remove_component(entity, component_type)

    def has(self, entity: EntityId, component_type: type) -> bool:
        return self._storage.has_component(entity, component_type)

    def singleton_copy(self, component_type: type[ComponentT]) -> Copy[ComponentT] | None:
        """Get singleton component from WORLD entity."""
        return self.get_copy(SystemEntity.WORLD, component_type)

    def set_singleton(self, component: Any) -> None:
        """Set singleton component on WORLD entity."""
        self.set(SystemEntity.WORLD, component)

    # Engine-facing surface (see world.access.ReflectAccess)

    def component_ref(
        self, entity: EntityId, component_type: type[ComponentT]
    ) -> ComponentT | None:
        """Live component instance. Only valid inside a borrow scope."""
        return self._storage.get_component(entity, component_type, copy=False)

    def component_types(self, entity: EntityId) -> tuple[type, ...]:
        return self._storage.get_component_types(entity)

    def write_component(self, entity: EntityId, component: Any) -> None:
        """Replace a component without borrow checks. Caller holds the exclusive borrow."""
        self._storage.set_component(entity, component)

    def mark_changed(self, entity: EntityId, component_type: type) -> None:
        self._storage.mark_changed(entity, component_type)

    def last_changed(self, entity: EntityId, component_type: type) -> int | None:
        """Change tick of the last write to a component, None if absent."""
        return self._storage.last_changed(entity, component_type)

    @property
    def change_tick(self) -> int:
        return self._storage.change_tick

    def shared(self, entity: EntityId, component_type: type) -> AbstractContextManager[None]:
        """Shared borrow of one component for the duration of the block."""
        return self._borrows.shared((entity, component_type))

    def exclusive(self, entity: EntityId, component_type: type) -> AbstractContextManager[None]:
        """Exclusive borrow of one component for the duration of the block."""
        return self._borrows.exclusive((entity, component_type))

    # Read-only views and deferred commands

    def read_only(self) -> WorldView:
        """Read-only view; writes through it raise NoAccessError."""
        return WorldView(self)

    def defer(self, command: Command | Callable[[World], Any]) -> None:
        """Queue a single-shot command for the next flush()."""
        self._commands.push(command)

    def flush(self) -> list[CommandOutcome]:
        """Apply all queued commands in FIFO order."""
        return self._commands.apply(self)


def _storage_type(component: Any) -> type:
    return enum_root(type(component)) or type(component)
