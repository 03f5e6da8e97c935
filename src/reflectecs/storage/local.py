"""Local in-memory storage implementation.

Simple dict-based storage suitable for single-process use and testing.

Usage:
    storage = LocalStorage()
    world = World(storage=storage)
"""

from __future__ import annotations

import copy as cp
from collections.abc import Iterator
from typing import Any, TypeVar, cast

from reflectecs.core.identity import EntityId, SystemEntity
from reflectecs.core.types import Copy
from reflectecs.registry.enums import enum_root

T = TypeVar("T")


class LocalStorage:
    """In-memory storage using nested dicts.

    Structure:
        _components[entity][component_type] = component_instance
        _change_ticks[(entity, component_type)] = tick of the last write

    Component dicts keep insertion order, which is the attachment order
    reported by get_component_types(). Replacing a component keeps its slot.

    Entity indices are recycled through a free list; each reuse bumps the
    generation so stale EntityIds stop resolving.
    """

    def __init__(self) -> None:
        self._components: dict[EntityId, dict[type, Any]] = {}
        self._next_index = SystemEntity._RESERVED_COUNT
        self._free_list: list[EntityId] = []
        self._change_ticks: dict[tuple[EntityId, type], int] = {}
        self._tick = 0

    def create_entity(self) -> EntityId:
        """Create a new entity, reusing a freed index when available.

        Returns:
            Newly allocated EntityId.
        """
        if self._free_list:
            entity = self._free_list.pop()
        else:
            entity = EntityId(index=self._next_index, generation=0)
            self._next_index += 1
        self._components[entity] = {}
        return entity

    def ensure_entity(self, entity: EntityId) -> None:
        """Create a reserved entity (e.g. SystemEntity.WORLD) if missing.

        Raises:
            ValueError: If the index is not in the reserved range.
        """
        if entity.index >= SystemEntity._RESERVED_COUNT:
            raise ValueError(f"Entity {entity} is not a reserved entity")
        self._components.setdefault(entity, {})

    def destroy_entity(self, entity: EntityId) -> None:
        """Destroy an entity and remove all its components."""
        components = self._components.pop(entity, None)
        if components is None:
            return
        for component_type in components:
            self._change_ticks.pop((entity, component_type), None)
        if entity.index >= SystemEntity._RESERVED_COUNT:
            self._free_list.append(EntityId(index=entity.index, generation=entity.generation + 1))

    def entity_exists(self, entity: EntityId) -> bool:
        return entity in self._components

    def all_entities(self) -> Iterator[EntityId]:
        yield from list(self._components)

    def get_component(
        self, entity: EntityId, component_type: type[T], copy: bool = True
    ) -> Copy[T] | T | None:
        """Get a component from an entity.

        Args:
            entity: Entity to query.
            component_type: Type of component to retrieve.
            copy: Whether to return a deep copy (default True). With copy=False
                the live instance is returned; mutate it only under an
                exclusive borrow and call mark_changed().

        Returns:
            Component instance or None if not present.
        """
        component = self._components.get(entity, {}).get(component_type)
        if component is None:
            return None
        return cp.deepcopy(component) if copy else cast(T, component)

    def set_component(self, entity: EntityId, component: Any) -> None:
        """Set or update a component on an entity.

        Raises:
            ValueError: If the entity does not exist.
        """
        components = self._components.get(entity)
        if components is None:
            raise ValueError(f"Entity {entity} does not exist")
        # Variants of a ReflectEnum are stored under their root
        component_type = enum_root(type(component)) or type(component)
        components[component_type] = component
        self.mark_changed(entity, component_type)

    def remove_component(self, entity: EntityId, component_type: type) -> bool:
        components = self._components.get(entity)
        if components is None or component_type not in components:
            return False
        del components[component_type]
        self._change_ticks.pop((entity, component_type), None)
        return True

    def has_component(self, entity: EntityId, component_type: type) -> bool:
        return component_type in self._components.get(entity, {})

    def get_component_types(self, entity: EntityId) -> tuple[type, ...]:
        """Get component types present on an entity, in attachment order."""
        return tuple(self._components.get(entity, {}))

    def mark_changed(self, entity: EntityId, component_type: type) -> None:
        """Stamp a component with the next change tick."""
        if component_type not in self._components.get(entity, {}):
            return
        self._tick += 1
        self._change_ticks[(entity, component_type)] = self._tick

    def last_changed(self, entity: EntityId, component_type: type) -> int | None:
        return self._change_ticks.get((entity, component_type))

    @property
    def change_tick(self) -> int:
        """Most recent change tick handed out."""
        return self._tick
