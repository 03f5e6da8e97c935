"""Record identity models.

Usage:
    entity = EntityId(index=1000, generation=0)
    singletons = SystemEntity.WORLD
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EntityId:
    """Opaque record key with a generation for safe handle reuse.

    A recycled index gets a new generation, so a handle kept across a
    destroy/spawn cycle no longer resolves.
    """

    index: int = 0
    generation: int = 0

    def __str__(self) -> str:
        return f"{self.index}v{self.generation}"


class SystemEntity:
    """Reserved entity IDs. Singletons live on WORLD."""

    WORLD = EntityId(index=0, generation=0)

    _RESERVED_COUNT = 1000  # First 1000 indices reserved
