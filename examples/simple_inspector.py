"""Basic ReflectECS usage: a text inspector.

Demonstrates:
- Listing a record's components by type path
- Reading and editing fields from JSON text, as a remote UI would send them
- Cycling an enum dropdown
- Trait dispatch for summaries
- Deferred edits from a read-only context
- Copying a prefab's components onto an instance
"""

import logging

from components import Describe, EditorPrefs, Health, Position, Visibility, Visible

from reflectecs import (
    ReflectError,
    ReflectTarget,
    SetSerialized,
    World,
    reflect_copy_shared_components,
    reflect_trait_iter,
)


def show_record(world: World, entity) -> None:
    """Print every component of a record as serialized JSON."""
    print(f"Entity {entity}:")
    for component_type in world.component_types(entity):
        registration = world.type_registry.get(component_type)
        if registration is None:
            print(f"  {component_type.__qualname__}: <not reflected>")
            continue
        text = ReflectTarget.new_record(entity, component_type).read_value_serialized(world)
        print(f"  {text}")


def summarize(world: World, entity) -> list[str]:
    summaries: list[str] = []
    reflect_trait_iter(world, entity, Describe, lambda d: summaries.append(d.describe()) or True)
    return summaries


def edit(world: World, entity, type_path: str, field_path: str, data: str) -> None:
    """Apply one edit coming from the UI and report the outcome."""
    component_type = world.type_registry.type_key_for_path(type_path)
    if component_type is None:
        print(f"  unknown type {type_path}")
        return
    target = ReflectTarget.new_record(entity, component_type, field_path)
    try:
        result = target.set_value_serialized(world, data)
    except ReflectError as err:
        print(f"  {target}: {type(err).__name__}: {err}")
        return
    print(f"  {target} <- {data}: {result.name}")


def main() -> None:
    logging.basicConfig(level=logging.INFO)

    world = World()
    world.set_singleton(EditorPrefs())
    crate = world.spawn(Position(1, 2), Health(hp=5, tags=["wood"]), Visible())

    show_record(world, crate)

    print("Edits:")
    edit(world, crate, "components.Health", "hp", '{"builtins.int": 5}')
    edit(world, crate, "components.Health", "hp", '{"builtins.int": 7}')
    edit(world, crate, "components.Health", "tags[0]", '{"builtins.str": "steel"}')
    edit(world, crate, "components.Health", "mana", '{"builtins.int": 1}')
    edit(world, crate, "components.Position", "x", '{"builtins.str": "left"}')

    visibility = ReflectTarget.new_record(crate, Visibility)
    for _ in range(3):
        visibility.toggle_enum(world, wrap=True)
        print(f"  visibility -> {visibility.read_enum_variant_name(world)}")

    print("Summary:", ", ".join(summarize(world, crate)))

    # Read-only tools queue their edits
    view = world.read_only()
    grid = ReflectTarget.new_singleton(EditorPrefs, "grid_size")
    view.defer(SetSerialized(grid, '{"builtins.int": 16}'))
    for outcome in world.flush():
        print(f"  deferred {outcome.command!r}: {'ok' if outcome.ok else outcome.error}")
    print(f"Grid size: {grid.read_value(world)}")

    instance = world.spawn(Position(), Health())
    copied = reflect_copy_shared_components(world, instance, crate)
    print(f"Copied {[t.__qualname__ for t in copied]} onto {instance}")
    show_record(world, instance)


if __name__ == "__main__":
    main()
