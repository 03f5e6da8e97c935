"""Reflection operations packaged as deferred commands.

Each command captures its target and payload when created and runs once when
the world's command queue is flushed. Use them from read-only contexts.

Usage:
    view = world.read_only()
    view.defer(SetValue(ReflectTarget.new_record(entity, Health, "hp"), 6))
    view.defer(ToggleEnum(ReflectTarget.new_singleton(Settings, "mode")))
    outcomes = world.flush()
"""

from __future__ import annotations

import copy as cp
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from reflectecs.errors import ReflectSetSuccess
from reflectecs.reflect.copy import reflect_copy_shared_components
from reflectecs.reflect.enums import EnumDirection
from reflectecs.reflect.target import ReflectTarget

if TYPE_CHECKING:
    from reflectecs.core.identity import EntityId
    from reflectecs.core.types import TypeFilter
    from reflectecs.world.world import World


@dataclass(frozen=True, slots=True)
class SetValue:
    """Guarded write of a value. The value is copied when the command is created."""

    target: ReflectTarget
    value: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", cp.deepcopy(self.value))

    def apply(self, world: World) -> ReflectSetSuccess:
        return self.target.set_value(world, self.value)


@dataclass(frozen=True, slots=True)
class SetSerialized:
    """Guarded write of serialized `{type_path: data}` text."""

    target: ReflectTarget
    data: str

    def apply(self, world: World) -> ReflectSetSuccess:
        return self.target.set_value_serialized(world, self.data)


@dataclass(frozen=True, slots=True)
class ToggleEnum:
    target: ReflectTarget
    direction: EnumDirection = EnumDirection.FORWARD
    wrap: bool | None = None

    def apply(self, world: World) -> ReflectSetSuccess:
        return self.target.toggle_enum(world, self.direction, self.wrap)


@dataclass(frozen=True, slots=True)
class CopyComponents:
    target: EntityId
    source: EntityId
    type_filter: TypeFilter | None = None

    def apply(self, world: World) -> tuple[type, ...]:
        return reflect_copy_shared_components(world, self.target, self.source, self.type_filter)
