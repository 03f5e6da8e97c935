"""Tests for World: records, singletons, borrows and read-only views.

Critical Invariants:
- Public getters return copies
- Conflicting borrows raise NoAccessError
- Read-only views never write
"""

import warnings
from dataclasses import dataclass

import pytest

from reflectecs import NoAccessError, SystemEntity, World


@dataclass
class Counter:
    value: int = 0


@dataclass
class Tag:
    name: str = ""


def test_world_creates_singleton_holder(world: World) -> None:
    assert world.entity_exists(SystemEntity.WORLD)


def test_get_copy_isolated_from_world_state(world: World) -> None:
    """CRITICAL: Mutating a returned copy must not change world state."""
    entity = world.spawn(Counter(1))

    copy = world.get_copy(entity, Counter)
    copy.value = 99

    assert world.get_copy(entity, Counter).value == 1


def test_spawn_warns_on_duplicate_types(world: World) -> None:
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        entity = world.spawn(Counter(1), Counter(2))

    assert any("multiple components of type Counter" in str(w.message) for w in caught)
    assert world.get_copy(entity, Counter).value == 2


def test_singletons_live_on_world_entity(world: World) -> None:
    world.set_singleton(Tag("global"))

    assert world.singleton_copy(Tag) == Tag("global")
    assert world.has(SystemEntity.WORLD, Tag)


def test_remove_component(world: World) -> None:
    entity = world.spawn(Counter(1), Tag("t"))

    assert world.remove(entity, Counter)
    assert world.component_types(entity) == (Tag,)


# Borrows


def test_shared_borrows_stack(world: World) -> None:
    entity = world.spawn(Counter())

    with world.shared(entity, Counter), world.shared(entity, Counter):
        assert world.get_copy(entity, Counter) == Counter()


def test_exclusive_conflicts_with_shared(world: World) -> None:
    """CRITICAL: A record cannot be written while it is being read."""
    entity = world.spawn(Counter())

    with world.shared(entity, Counter):
        with pytest.raises(NoAccessError, match="already borrowed"):
            with world.exclusive(entity, Counter):
                pass


def test_shared_conflicts_with_exclusive(world: World) -> None:
    entity = world.spawn(Counter())

    with world.exclusive(entity, Counter):
        with pytest.raises(NoAccessError, match="exclusively borrowed"):
            with world.shared(entity, Counter):
                pass


def test_borrow_released_after_error(world: World) -> None:
    entity = world.spawn(Counter())

    with pytest.raises(RuntimeError):
        with world.exclusive(entity, Counter):
            raise RuntimeError("boom")

    with world.exclusive(entity, Counter):
        pass


def test_borrows_are_per_type(world: World) -> None:
    entity = world.spawn(Counter(), Tag())

    with world.exclusive(entity, Counter), world.exclusive(entity, Tag):
        pass


def test_set_refused_while_borrowed(world: World) -> None:
    entity = world.spawn(Counter())

    with world.shared(entity, Counter):
        with pytest.raises(NoAccessError):
            world.set(entity, Counter(5))
        with pytest.raises(NoAccessError):
            world.remove(entity, Counter)


def test_change_ticks_visible_through_world(world: World) -> None:
    entity = world.spawn(Counter())
    before = world.last_changed(entity, Counter)

    world.set(entity, Counter(1))

    assert world.last_changed(entity, Counter) > before
    assert world.change_tick == world.last_changed(entity, Counter)


# Read-only views


def test_view_reads_but_never_writes(world: World) -> None:
    entity = world.spawn(Counter(2))
    view = world.read_only()

    assert view.get_copy(entity, Counter) == Counter(2)
    assert view.has(entity, Counter)
    assert entity in list(view.entities())
    with view.shared(entity, Counter):
        pass

    with pytest.raises(NoAccessError):
        view.exclusive(entity, Counter)
    with pytest.raises(NoAccessError):
        view.write_component(entity, Counter(3))
    with pytest.raises(NoAccessError):
        view.mark_changed(entity, Counter)


def test_view_defers_to_world_queue(world: World) -> None:
    entity = world.spawn(Counter(2))
    view = world.read_only()

    view.defer(lambda w: w.set(entity, Counter(7)))

    assert world.get_copy(entity, Counter) == Counter(2)
    assert len(world.commands) == 1

    world.flush()

    assert world.get_copy(entity, Counter) == Counter(7)
