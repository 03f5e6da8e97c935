"""Tests for record identity.

Critical Invariants:
- Generation increments on recycle
- Stale handles are detected
- Reserved IDs are protected
"""

import pytest

from reflectecs.core.identity import EntityId, SystemEntity
from reflectecs.storage.local import LocalStorage


@pytest.fixture
def storage():
    return LocalStorage()


def test_generation_increments_on_recycle(storage):
    """CRITICAL: Recycled entity must have generation+1.

    Why: Prevents a stored ReflectTarget from resolving against a different record.
    """
    entity1 = storage.create_entity()
    assert entity1.generation == 0

    storage.destroy_entity(entity1)

    entity2 = storage.create_entity()
    assert entity2.index == entity1.index, "Should reuse same index"
    assert entity2.generation == 1, "INVARIANT: generation must increment"


def test_stale_handle_detection(storage):
    """CRITICAL: entity_exists() returns False for stale handles."""
    entity_old = storage.create_entity()
    storage.destroy_entity(entity_old)
    entity_new = storage.create_entity()

    assert not storage.entity_exists(entity_old), "Old generation should be stale"
    assert storage.entity_exists(entity_new)


def test_allocated_entities_skip_reserved_range(storage):
    """CRITICAL: First allocated entity index >= _RESERVED_COUNT.

    Why: Prevents collision with the singleton holder SystemEntity.WORLD.
    """
    entity = storage.create_entity()

    assert entity.index >= SystemEntity._RESERVED_COUNT


def test_ensure_entity_rejects_non_reserved_ids(storage):
    with pytest.raises(ValueError, match="not a reserved entity"):
        storage.ensure_entity(EntityId(index=SystemEntity._RESERVED_COUNT + 5))


def test_entity_id_str_shows_index_and_generation():
    assert str(EntityId(index=1001, generation=3)) == "1001v3"
