"""Bulk copy of shared components between two records.

Usage:
    copied = reflect_copy_shared_components(world, target, source)
    copied = reflect_copy_shared_components(
        world, target, source, type_filter=lambda t: t is not Name
    )
"""

from __future__ import annotations

import copy as cp
import logging
from typing import TYPE_CHECKING

from reflectecs.errors import EntityNotFoundError
from reflectecs.registry import ReflectComponent

if TYPE_CHECKING:
    from reflectecs.core.identity import EntityId
    from reflectecs.core.types import TypeFilter
    from reflectecs.world.access import ReflectAccess

logger = logging.getLogger(__name__)


def reflect_copy_shared_components(
    world: ReflectAccess,
    target: EntityId,
    source: EntityId,
    type_filter: TypeFilter | None = None,
) -> tuple[type, ...]:
    """Overwrite target's components with copies of the source's.

    A type is copied when both records carry it, it is registered with
    ReflectComponent, and `type_filter` (if given) accepts it. Types present
    on only one side are left alone.

    Returns:
        The copied types, in the source's attachment order.

    Raises:
        EntityNotFoundError: If either record does not exist.
    """
    for entity in (target, source):
        if not world.entity_exists(entity):
            raise EntityNotFoundError(entity)

    registry = world.type_registry
    target_types = set(world.component_types(target))
    copied: list[type] = []
    for component_type in world.component_types(source):
        if component_type not in target_types:
            continue
        reflect_component = registry.get_type_data(component_type, ReflectComponent)
        if reflect_component is None:
            continue
        if type_filter is not None and not type_filter(component_type):
            continue
        with world.shared(source, component_type):
            value = cp.deepcopy(reflect_component.reflect(world, source))
        with world.exclusive(target, component_type):
            reflect_component.write(world, target, value)
        copied.append(component_type)

    logger.debug(f"Copied {[t.__qualname__ for t in copied]} from {source} to {target}")
    return tuple(copied)
