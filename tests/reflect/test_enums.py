"""Tests for enum variant cycling.

Critical Invariants:
- Without wrap, an N-variant enum changes exactly N-1 times in one direction
- With wrap, N steps return to the starting variant
- A single-variant enum never changes
"""

import enum
from dataclasses import dataclass, field

import pytest

from reflectecs import (
    EnumDirection,
    NoDefaultValueError,
    ReflectSetSuccess,
    ReflectSettings,
    ReflectTarget,
    TypeMismatchError,
    World,
)
from reflectecs.reflect.enums import (
    construct_default_variant,
    next_enum_variant,
    next_index_in_direction,
)
from reflectecs.registry import ReflectEnum, type_info_of

FORWARD = EnumDirection.FORWARD
BACKWARD = EnumDirection.BACKWARD
CHANGED = ReflectSetSuccess.CHANGED
NO_CHANGES = ReflectSetSuccess.NO_CHANGES


class Mode(ReflectEnum):
    pass


@dataclass
class Idle(Mode):
    pass


@dataclass
class Walking(Mode):
    speed: float = 1.0


@dataclass
class Pair(Mode, positional=True):
    a: int = 5
    b: str = "x"


class Solo(ReflectEnum):
    pass


@dataclass
class Only(Solo):
    pass


@dataclass
class Key:
    code: str


class Gate(ReflectEnum):
    pass


@dataclass
class Open(Gate):
    pass


@dataclass
class Locked(Gate):
    key: Key = field(default_factory=lambda: Key("k"))


class Light(enum.Enum):
    RED = 1
    YELLOW = 2
    GREEN = 3


@dataclass
class Actor:
    mode: Mode = field(default_factory=Idle)
    light: Light = Light.RED
    solo: Solo = field(default_factory=Only)
    gate: Gate = field(default_factory=Open)
    hp: int = 10


@pytest.fixture
def world(world: World) -> World:
    world.type_registry.register_component(Actor)
    return world


def _settings(wrap: bool) -> ReflectSettings:
    return ReflectSettings(wrap_enum_variants=wrap, strict_trait_expect=False)


# Index stepping


@pytest.mark.parametrize(
    ("index", "length", "direction", "wrap", "expected"),
    [
        (0, 3, FORWARD, False, 1),
        (2, 3, FORWARD, False, None),
        (2, 3, FORWARD, True, 0),
        (1, 3, BACKWARD, False, 0),
        (0, 3, BACKWARD, False, None),
        (0, 3, BACKWARD, True, 2),
        (0, 1, FORWARD, True, None),
        (0, 1, BACKWARD, True, None),
        (-1, 3, FORWARD, True, None),
        (3, 3, BACKWARD, True, None),
    ],
)
def test_next_index_in_direction(index, length, direction, wrap, expected):
    assert next_index_in_direction(index, length, direction, wrap) == expected


# Default construction


def test_unit_variant_default(registry):
    variant = type_info_of(Mode).variant_named("Idle")

    assert construct_default_variant(variant, registry) == Idle()


def test_payload_variants_use_registry_defaults(registry):
    """Fields take the type's default, not the dataclass field default."""
    info = type_info_of(Mode)

    assert construct_default_variant(info.variant_named("Walking"), registry) == Walking(0.0)
    assert construct_default_variant(info.variant_named("Pair"), registry) == Pair(0, "")


def test_enum_member_is_its_own_default(registry):
    variant = type_info_of(Light).variant_named("YELLOW")

    assert construct_default_variant(variant, registry) is Light.YELLOW


def test_missing_field_default_fails(registry):
    variant = type_info_of(Gate).variant_named("Locked")

    with pytest.raises(NoDefaultValueError):
        construct_default_variant(variant, registry)


def test_next_enum_variant(registry):
    assert next_enum_variant(Idle(), registry, FORWARD, wrap=False) == Walking(0.0)
    assert next_enum_variant(Light.GREEN, registry, FORWARD, wrap=False) is None
    assert next_enum_variant(Light.GREEN, registry, FORWARD, wrap=True) is Light.RED
    with pytest.raises(TypeMismatchError):
        next_enum_variant(5, registry, FORWARD, wrap=True)


# Toggling stored values


def test_forward_without_wrap_changes_n_minus_one_times(world: World) -> None:
    """CRITICAL: Cycling stops at the last variant."""
    entity = world.spawn(Actor())
    target = ReflectTarget.new_record(entity, Actor, "mode")

    results = [target.toggle_enum(world, FORWARD, wrap=False) for _ in range(4)]

    assert results == [CHANGED, CHANGED, NO_CHANGES, NO_CHANGES]
    assert target.read_enum_variant_name(world) == "Pair"


def test_backward_at_first_variant_is_no_change(world: World) -> None:
    entity = world.spawn(Actor())
    target = ReflectTarget.new_record(entity, Actor, "mode")
    before = world.last_changed(entity, Actor)

    assert target.toggle_enum(world, BACKWARD, wrap=False) is NO_CHANGES
    assert world.last_changed(entity, Actor) == before


def test_wrap_returns_to_start(world: World) -> None:
    """CRITICAL: N wrapped steps visit every variant and come back."""
    entity = world.spawn(Actor())
    target = ReflectTarget.new_record(entity, Actor, "mode")

    names = []
    for _ in range(3):
        assert target.toggle_enum(world, FORWARD, wrap=True) is CHANGED
        names.append(target.read_enum_variant_name(world))

    assert names == ["Walking", "Pair", "Idle"]


def test_backward_wrap_goes_to_last(world: World) -> None:
    entity = world.spawn(Actor())
    target = ReflectTarget.new_record(entity, Actor, "mode")

    target.toggle_enum(world, BACKWARD, wrap=True)

    assert world.get_copy(entity, Actor).mode == Pair(0, "")


def test_single_variant_never_changes(world: World) -> None:
    entity = world.spawn(Actor())
    target = ReflectTarget.new_record(entity, Actor, "solo")

    assert target.toggle_enum(world, FORWARD, wrap=True) is NO_CHANGES
    assert target.toggle_enum(world, BACKWARD, wrap=True) is NO_CHANGES


def test_toggle_python_enum(world: World) -> None:
    entity = world.spawn(Actor())
    target = ReflectTarget.new_record(entity, Actor, "light")

    target.toggle_enum(world, FORWARD)

    assert world.get_copy(entity, Actor).light is Light.YELLOW
    assert target.read_enum_variant_name(world) == "YELLOW"


def test_wrap_defaults_to_settings(registry) -> None:
    registry.register_component(Actor)
    world = World(type_registry=registry, settings=_settings(wrap=True))
    entity = world.spawn(Actor(light=Light.GREEN))
    target = ReflectTarget.new_record(entity, Actor, "light")

    assert target.toggle_enum(world) is CHANGED
    assert world.get_copy(entity, Actor).light is Light.RED


def test_explicit_wrap_overrides_settings(registry) -> None:
    registry.register_component(Actor)
    world = World(type_registry=registry, settings=_settings(wrap=True))
    entity = world.spawn(Actor(light=Light.GREEN))

    result = ReflectTarget.new_record(entity, Actor, "light").toggle_enum(world, wrap=False)

    assert result is NO_CHANGES


def test_failed_default_leaves_value(world: World) -> None:
    """No partial value is stored when the next variant cannot be built."""
    entity = world.spawn(Actor())
    target = ReflectTarget.new_record(entity, Actor, "gate")

    with pytest.raises(NoDefaultValueError):
        target.toggle_enum(world, FORWARD)

    assert world.get_copy(entity, Actor).gate == Open()


def test_toggle_non_enum_fails(world: World) -> None:
    entity = world.spawn(Actor())

    with pytest.raises(TypeMismatchError):
        ReflectTarget.new_record(entity, Actor, "hp").toggle_enum(world)
