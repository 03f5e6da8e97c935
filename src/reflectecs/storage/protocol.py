"""Storage protocol for swappable record backends.

The reflection engine never talks to storage directly; it goes through World,
which owns a Storage and adds borrow tracking on top.

Usage:
    storage = LocalStorage()
    world = World(storage=storage)
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Protocol, TypeVar

from reflectecs.core.identity import EntityId

T = TypeVar("T")


class Storage(Protocol):
    """Abstract storage interface. Implementations handle actual data."""

    def create_entity(self) -> EntityId:
        """Allocate new entity."""
        ...

    def ensure_entity(self, entity: EntityId) -> None:
        """Make a reserved entity exist without going through allocation."""
        ...

    def destroy_entity(self, entity: EntityId) -> None:
        """Remove entity and all its components."""
        ...

    def entity_exists(self, entity: EntityId) -> bool:
        """Check if entity is alive."""
        ...

    def all_entities(self) -> Iterator[EntityId]:
        """Iterate all living entities."""
        ...

    def get_component(
        self, entity: EntityId, component_type: type[T], copy: bool = True
    ) -> T | None:
        """Get component from entity, deep-copied unless copy=False."""
        ...

    def set_component(self, entity: EntityId, component: Any) -> None:
        """Set/update component on entity and mark it changed."""
        ...

    def remove_component(self, entity: EntityId, component_type: type) -> bool:
        """Remove component from entity. Returns True if existed."""
        ...

    def has_component(self, entity: EntityId, component_type: type) -> bool:
        """Check if entity has component."""
        ...

    def get_component_types(self, entity: EntityId) -> tuple[type, ...]:
        """Get component types on entity, in attachment order."""
        ...

    def mark_changed(self, entity: EntityId, component_type: type) -> None:
        """Record an in-place mutation of a component."""
        ...

    def last_changed(self, entity: EntityId, component_type: type) -> int | None:
        """Change tick of the last write to a component, None if absent."""
        ...

    @property
    def change_tick(self) -> int:
        """Most recent change tick handed out."""
        ...
