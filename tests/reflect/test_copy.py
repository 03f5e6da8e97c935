"""Tests for copying shared components between records."""

from dataclasses import dataclass, field

import pytest

from reflectecs import EntityId, EntityNotFoundError, World, reflect_copy_shared_components


@dataclass
class A:
    value: int = 0
    notes: list[str] = field(default_factory=list)


@dataclass
class B:
    value: int = 0


@dataclass
class C:
    value: int = 0


@dataclass
class Unreflected:
    value: int = 0


@pytest.fixture
def world(world: World) -> World:
    for cls in (A, B, C):
        world.type_registry.register_component(cls)
    return world


def test_copies_only_shared_types(world: World) -> None:
    """Types on one side only are left alone."""
    target = world.spawn(A(1), C(1))
    source = world.spawn(A(2), B(2))

    copied = reflect_copy_shared_components(world, target, source)

    assert copied == (A,)
    assert world.get_copy(target, A) == A(2)
    assert world.get_copy(target, C) == C(1)
    assert not world.has(target, B)
    assert world.get_copy(source, A) == A(2)


def test_copies_follow_source_order(world: World) -> None:
    target = world.spawn(C(1), B(1), A(1))
    source = world.spawn(A(2), B(2), C(2))

    assert reflect_copy_shared_components(world, target, source) == (A, B, C)


def test_type_filter(world: World) -> None:
    target = world.spawn(A(1), B(1))
    source = world.spawn(A(2), B(2))

    copied = reflect_copy_shared_components(world, target, source, type_filter=lambda t: t is B)

    assert copied == (B,)
    assert world.get_copy(target, A) == A(1)


def test_unregistered_types_are_skipped(world: World) -> None:
    target = world.spawn(Unreflected(1))
    source = world.spawn(Unreflected(2))

    assert reflect_copy_shared_components(world, target, source) == ()
    assert world.get_copy(target, Unreflected) == Unreflected(1)


def test_copies_are_independent(world: World) -> None:
    target = world.spawn(A())
    source = world.spawn(A(notes=["x"]))

    reflect_copy_shared_components(world, target, source)
    world.component_ref(source, A).notes.append("y")

    assert world.get_copy(target, A).notes == ["x"]


def test_copy_marks_target_changed(world: World) -> None:
    target = world.spawn(A(1))
    source = world.spawn(A(2))
    before = world.last_changed(target, A)

    reflect_copy_shared_components(world, target, source)

    assert world.last_changed(target, A) > before


def test_missing_records(world: World) -> None:
    existing = world.spawn(A())
    missing = EntityId(index=4242)

    with pytest.raises(EntityNotFoundError):
        reflect_copy_shared_components(world, missing, existing)
    with pytest.raises(EntityNotFoundError):
        reflect_copy_shared_components(world, existing, missing)
