"""Inspector workflow: generic tooling editing typed data it never imports.

The "inspector" below only handles type paths, field paths and JSON text, the
way a remote editor would. Application types are registered with the global
decorators.
"""

import json
import sys
from dataclasses import dataclass, field
from typing import Protocol

sys.path.insert(0, "src")

from reflectecs import (
    ReflectEnum,
    ReflectSetSuccess,
    ReflectTarget,
    SetSerialized,
    ToggleEnum,
    World,
    component,
    get_registry,
    implements,
    reflect_copy_shared_components,
    reflect_trait_iter,
    resource,
)


class Summary(Protocol):
    def summary(self) -> str: ...


@implements(Summary)
@component
@dataclass
class InspectedName:
    value: str = ""

    def summary(self) -> str:
        return f"name={self.value}"


@implements(Summary)
@component
@dataclass
class InspectedTransform:
    x: float = 0.0
    y: float = 0.0
    layers: list[int] = field(default_factory=list)

    def summary(self) -> str:
        return f"at ({self.x}, {self.y})"


@component
class InspectedVisibility(ReflectEnum):
    pass


@dataclass
class Shown(InspectedVisibility):
    pass


@dataclass
class Hidden(InspectedVisibility):
    pass


@dataclass
class Faded(InspectedVisibility):
    alpha: float = 1.0


@resource
@dataclass
class InspectorPrefs:
    grid_size: int = 8


def inspect_record(world: World, entity) -> dict[str, dict]:
    """Dump every reflected component as {type_path: data}."""
    registry = world.type_registry
    dump = {}
    for component_type in world.component_types(entity):
        registration = registry.get(component_type)
        text = ReflectTarget.new_record(entity, component_type).read_value_serialized(world)
        dump[registration.type_path] = json.loads(text)[registration.type_path]
    return dump


def target_for(world: World, entity, type_path: str, field_path: str) -> ReflectTarget:
    cls = world.type_registry.type_key_for_path(type_path)
    assert cls is not None
    return ReflectTarget.new_record(entity, cls, field_path)


def test_inspector_round_trip():
    world = World(type_registry=get_registry())
    entity = world.spawn(InspectedName("crate"), InspectedTransform(1.0, 2.0), Shown())
    name_path = f"{__name__}.InspectedName"
    transform_path = f"{__name__}.InspectedTransform"
    visibility_path = f"{__name__}.InspectedVisibility"

    dump = inspect_record(world, entity)
    assert dump == {
        name_path: {"value": "crate"},
        transform_path: {"x": 1.0, "y": 2.0, "layers": []},
        visibility_path: "Shown",
    }

    # Edit from serialized input, as a remote UI would send it
    x = target_for(world, entity, transform_path, "x")
    assert x.set_value_serialized(world, '{"builtins.float": 1.0}') is (
        ReflectSetSuccess.NO_CHANGES
    )
    assert x.set_value_serialized(world, '{"builtins.float": 5.5}') is ReflectSetSuccess.CHANGED

    # Cycle the visibility dropdown to its last entry
    visibility = target_for(world, entity, visibility_path, "")
    visibility.toggle_enum(world)
    visibility.toggle_enum(world)
    assert visibility.read_enum_variant_name(world) == "Faded"
    assert visibility.child("alpha").read_value(world) == 0.0

    summaries: list[str] = []
    reflect_trait_iter(world, entity, Summary, lambda s: summaries.append(s.summary()) or True)
    assert summaries == ["name=crate", "at (5.5, 2.0)"]


def test_prefab_copy_and_deferred_edits():
    world = World(type_registry=get_registry())
    world.set_singleton(InspectorPrefs())
    prefab = world.spawn(InspectedTransform(3.0, 4.0, [1, 2]), Hidden())
    instance = world.spawn(InspectedName("copy"), InspectedTransform(), Shown())

    copied = reflect_copy_shared_components(world, instance, prefab)

    assert copied == (InspectedTransform, InspectedVisibility)
    assert world.get_copy(instance, InspectedTransform) == InspectedTransform(3.0, 4.0, [1, 2])
    assert world.get_copy(instance, InspectedVisibility) == Hidden()
    assert world.get_copy(instance, InspectedName) == InspectedName("copy")

    # A read-only tool queues edits instead of writing
    view = world.read_only()
    grid = ReflectTarget.new_singleton(InspectorPrefs, "grid_size")
    view.defer(SetSerialized(grid, '{"builtins.int": 16}'))
    view.defer(ToggleEnum(ReflectTarget.new_record(instance, InspectedVisibility)))

    assert world.singleton_copy(InspectorPrefs).grid_size == 8
    outcomes = world.flush()

    assert all(o.ok for o in outcomes)
    assert world.singleton_copy(InspectorPrefs).grid_size == 16
    assert world.get_copy(instance, InspectedVisibility) == Faded(0.0)
