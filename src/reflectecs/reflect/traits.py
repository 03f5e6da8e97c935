"""Reflected trait dispatch across the components of one record.

A record carries components of unrelated types. Those registered with a
ReflectTrait for some trait class can be viewed through that trait without
knowing their concrete type. Candidates are the component types present on
the record, in attachment order, whose registration has both the trait and
ReflectComponent.

Immutable forms hand the callback a TraitObject over a deep copy, under a
shared borrow. Mutable forms hand it the live component under an exclusive
borrow and mark the component changed afterwards.

Usage:
    reflect_trait_find_one(world, entity, Describe, lambda d: d.describe())

    def bump(counter: TraitObject) -> bool:
        counter.increment()
        return True

    reflect_trait_iter_mut(world, entity, Counter, bump)
"""

from __future__ import annotations

import copy as cp
import logging
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, TypeVar

from reflectecs.errors import (
    AmbiguousTraitError,
    CapabilityNotAvailableError,
    ComponentNotFoundError,
    EntityNotFoundError,
    TypeNotRegisteredError,
)
from reflectecs.registry import ReflectComponent, ReflectTrait, TraitObject

if TYPE_CHECKING:
    from reflectecs.core.identity import EntityId
    from reflectecs.world.access import ReflectAccess

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _matches(
    world: ReflectAccess, entity: EntityId, trait: type
) -> Iterator[tuple[type, ReflectTrait]]:
    if not world.entity_exists(entity):
        raise EntityNotFoundError(entity)
    registry = world.type_registry
    for component_type in world.component_types(entity):
        registration = registry.get(component_type)
        if registration is None or not registration.contains(ReflectComponent):
            continue
        reflect_trait = registration.get(trait)
        if reflect_trait is not None:
            yield component_type, reflect_trait


def _call[T](
    world: ReflectAccess,
    entity: EntityId,
    component_type: type,
    reflect_trait: ReflectTrait,
    callback: Callable[[TraitObject], T],
) -> T:
    with world.shared(entity, component_type):
        value = cp.deepcopy(world.component_ref(entity, component_type))
    return callback(reflect_trait.get(value))


def _call_mut[T](
    world: ReflectAccess,
    entity: EntityId,
    component_type: type,
    reflect_trait: ReflectTrait,
    callback: Callable[[TraitObject], T],
) -> T:
    with world.exclusive(entity, component_type):
        value = world.component_ref(entity, component_type)
        result = callback(reflect_trait.get(value))
        world.mark_changed(entity, component_type)
    return result


def _expect_one(
    world: ReflectAccess, entity: EntityId, trait: type
) -> tuple[type, ReflectTrait]:
    if world.settings.strict_trait_expect:
        matches = list(_matches(world, entity, trait))
        if len(matches) > 1:
            raise AmbiguousTraitError(entity, trait, tuple(t for t, _ in matches))
        first = matches[0] if matches else None
    else:
        first = next(_matches(world, entity, trait), None)
    if first is None:
        raise ComponentNotFoundError(entity, trait)
    return first


def _single(
    world: ReflectAccess, entity: EntityId, component_type: type, trait: type
) -> ReflectTrait:
    registration = world.type_registry.get(component_type)
    if registration is None:
        raise TypeNotRegisteredError(component_type)
    if not registration.contains(ReflectComponent):
        raise CapabilityNotAvailableError(component_type, ReflectComponent)
    reflect_trait = registration.get(trait)
    if reflect_trait is None:
        raise CapabilityNotAvailableError(component_type, trait)
    if not world.entity_exists(entity):
        raise EntityNotFoundError(entity)
    if component_type not in world.component_types(entity):
        raise ComponentNotFoundError(entity, component_type)
    return reflect_trait


def with_reflect_trait(
    world: ReflectAccess,
    entity: EntityId,
    component_type: type,
    trait: type,
    fn: Callable[[TraitObject], R],
) -> R:
    """Run `fn` on one named component viewed through `trait`.

    Raises:
        TypeNotRegisteredError: If the type is unknown to the registry.
        CapabilityNotAvailableError: If it is not a component or lacks the trait.
        EntityNotFoundError: If the entity does not exist.
        ComponentNotFoundError: If the entity lacks the component.
    """
    reflect_trait = _single(world, entity, component_type, trait)
    return _call(world, entity, component_type, reflect_trait, fn)


def with_reflect_trait_mut(
    world: ReflectAccess,
    entity: EntityId,
    component_type: type,
    trait: type,
    fn: Callable[[TraitObject], R],
) -> R:
    """Mutable form of with_reflect_trait()."""
    reflect_trait = _single(world, entity, component_type, trait)
    return _call_mut(world, entity, component_type, reflect_trait, fn)


def reflect_trait_find_one(
    world: ReflectAccess,
    entity: EntityId,
    trait: type,
    callback: Callable[[TraitObject], R | None],
) -> R | None:
    """First non-None callback result over matching components.

    Stops at the first non-None result; later components are not visited.
    Returns None when nothing matches or every callback returned None.
    """
    for component_type, reflect_trait in _matches(world, entity, trait):
        result = _call(world, entity, component_type, reflect_trait, callback)
        if result is not None:
            return result
    return None


def reflect_trait_once(
    world: ReflectAccess,
    entity: EntityId,
    trait: type,
    callback: Callable[[TraitObject], R],
) -> R:
    """Run `callback` on the component implementing `trait`.

    With several matches the first in attachment order is used, unless the
    world's `strict_trait_expect` setting is on.

    Raises:
        ComponentNotFoundError: If no component implements the trait.
        AmbiguousTraitError: In strict mode, if several do. Raised before
            any callback runs.
    """
    component_type, reflect_trait = _expect_one(world, entity, trait)
    return _call(world, entity, component_type, reflect_trait, callback)


def reflect_trait_mut_expect_once(
    world: ReflectAccess,
    entity: EntityId,
    trait: type,
    callback: Callable[[TraitObject], R],
) -> R:
    """Mutable form of reflect_trait_once()."""
    component_type, reflect_trait = _expect_one(world, entity, trait)
    return _call_mut(world, entity, component_type, reflect_trait, callback)


def reflect_trait_iter(
    world: ReflectAccess,
    entity: EntityId,
    trait: type,
    callback: Callable[[TraitObject], bool],
) -> None:
    """Run `callback` on each matching component until it returns False."""
    for component_type, reflect_trait in _matches(world, entity, trait):
        if not _call(world, entity, component_type, reflect_trait, callback):
            return


def reflect_trait_iter_mut(
    world: ReflectAccess,
    entity: EntityId,
    trait: type,
    callback: Callable[[TraitObject], bool],
) -> None:
    """Mutable form of reflect_trait_iter()."""
    for component_type, reflect_trait in _matches(world, entity, trait):
        keep_going = _call_mut(world, entity, component_type, reflect_trait, callback)
        if not keep_going:
            logger.debug(f"{trait.__qualname__} iteration stopped at {component_type.__qualname__}")
            return
