"""Core primitives: identity and shared type aliases.

Architecture Note:
    core/ contains stateless building blocks. Stateful services live in
    registry/, storage/ and world/; the reflection engine lives in reflect/.
"""

from reflectecs.core.identity import EntityId, SystemEntity
from reflectecs.core.types import Copy, TypeFilter

__all__ = [
    "Copy",
    "TypeFilter",
    "EntityId",
    "SystemEntity",
]
