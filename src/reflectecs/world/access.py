"""Access scoping: borrow tracking, the engine-facing store protocol, read-only views.

Every reflection call borrows the (entity, type) pair it touches: shared for
reads, exclusive for writes. A conflicting borrow raises NoAccessError. This
surfaces re-entrant access such as a trait callback reading the component it
is currently mutating.

Usage:
    with world.exclusive(entity, Position):
        ...

    view = world.read_only()
    target.read_value(view)              # fine
    target.set_value(view, 1)            # NoAccessError
    view.defer(SetValue(target, 1))      # runs on world.flush()
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from reflectecs.core.identity import EntityId, SystemEntity
from reflectecs.core.types import Copy
from reflectecs.errors import NoAccessError

if TYPE_CHECKING:
    from reflectecs.config import ReflectSettings
    from reflectecs.registry import TypeRegistry
    from reflectecs.world.commands import Command
    from reflectecs.world.world import World

T = TypeVar("T")

BorrowKey = tuple[EntityId, type]


class BorrowTracker:
    """Counts active borrows per (entity, type).

    A positive count is the number of shared borrows, -1 marks an exclusive one.
    """

    def __init__(self) -> None:
        self._borrows: dict[BorrowKey, int] = {}

    def is_borrowed(self, key: BorrowKey) -> bool:
        return key in self._borrows

    @contextmanager
    def shared(self, key: BorrowKey) -> Iterator[None]:
        state = self._borrows.get(key, 0)
        if state < 0:
            raise NoAccessError(f"{_describe(key)} is exclusively borrowed")
        self._borrows[key] = state + 1
        try:
            yield
        finally:
            remaining = self._borrows[key] - 1
            if remaining:
                self._borrows[key] = remaining
            else:
                del self._borrows[key]

    @contextmanager
    def exclusive(self, key: BorrowKey) -> Iterator[None]:
        if key in self._borrows:
            raise NoAccessError(f"{_describe(key)} is already borrowed")
        self._borrows[key] = -1
        try:
            yield
        finally:
            del self._borrows[key]


def _describe(key: BorrowKey) -> str:
    entity, component_type = key
    return f"{component_type.__qualname__} on entity {entity}"


class ReflectAccess(Protocol):
    """Store interface consumed by the reflection engine."""

    @property
    def type_registry(self) -> TypeRegistry: ...

    @property
    def settings(self) -> ReflectSettings: ...

    def entity_exists(self, entity: EntityId) -> bool:
        """Check if entity is alive."""
        ...

    def component_ref(self, entity: EntityId, component_type: type[T]) -> T | None:
        """Live component, no copy."""
        ...

    def component_types(self, entity: EntityId) -> tuple[type, ...]:
        """Component types on entity, in attachment order."""
        ...

    def write_component(self, entity: EntityId, component: Any) -> None:
        """Replace a component. Caller holds the exclusive borrow."""
        ...

    def mark_changed(self, entity: EntityId, component_type: type) -> None:
        """Record an in-place mutation."""
        ...

    def shared(self, entity: EntityId, component_type: type) -> AbstractContextManager[None]:
        """Shared borrow scope."""
        ...

    def exclusive(self, entity: EntityId, component_type: type) -> AbstractContextManager[None]:
        """Exclusive borrow scope."""
        ...

    def defer(self, command: Command) -> None:
        """Queue a single-shot command for the next flush."""
        ...


class WorldView:
    """Read-only view of a World.

    Reads and shared borrows go through to the world. Exclusive borrows and
    writes raise NoAccessError; mutations must be deferred as commands.
    """

    def __init__(self, world: World) -> None:
        self._world = world

    @property
    def type_registry(self) -> TypeRegistry:
        return self._world.type_registry

    @property
    def settings(self) -> ReflectSettings:
        return self._world.settings

    def entity_exists(self, entity: EntityId) -> bool:
        return self._world.entity_exists(entity)

    def component_ref(self, entity: EntityId, component_type: type[T]) -> T | None:
        return self._world.component_ref(entity, component_type)

    def component_types(self, entity: EntityId) -> tuple[type, ...]:
        return self._world.component_types(entity)

    def write_component(self, entity: EntityId, component: Any) -> None:
        raise NoAccessError(f"Cannot write {type(component).__qualname__}: view is read-only")

    def mark_changed(self, entity: EntityId, component_type: type) -> None:
        raise NoAccessError(f"Cannot mutate {component_type.__qualname__}: view is read-only")

    def shared(self, entity: EntityId, component_type: type) -> AbstractContextManager[None]:
        return self._world.shared(entity, component_type)

    def exclusive(self, entity: EntityId, component_type: type) -> AbstractContextManager[None]:
        raise NoAccessError(
            f"Cannot borrow {component_type.__qualname__} exclusively: view is read-only"
        )

    def defer(self, command: Command) -> None:
        self._world.defer(command)

    def get_copy(self, entity: EntityId, component_type: type[T]) -> Copy[T] | None:
        component = self._world.component_ref(entity, component_type)
        return copy.deepcopy(component)

    def has(self, entity: EntityId, component_type: type) -> bool:
        return self._world.has(entity, component_type)

    def singleton_copy(self, component_type: type[T]) -> Copy[T] | None:
        return self.get_copy(SystemEntity.WORLD, component_type)

    def entities(self) -> Iterator[EntityId]:
        return self._world.entities()
