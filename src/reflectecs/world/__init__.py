"""World state, access scoping, and deferred commands.

Architecture Note:
    world/ is a stateful service layer that owns records and singletons.
    The reflection engine (reflect/) is stateless and reaches the world only
    through the ReflectAccess surface defined in world.access.
"""

from reflectecs.world.access import BorrowTracker, ReflectAccess, WorldView
from reflectecs.world.commands import Command, CommandOutcome, CommandQueue, FnCommand
from reflectecs.world.world import World

__all__ = [
    "World",
    "WorldView",
    "ReflectAccess",
    "BorrowTracker",
    "Command",
    "FnCommand",
    "CommandOutcome",
    "CommandQueue",
]
