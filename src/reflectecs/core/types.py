"""Core type definitions for reflectecs."""

from collections.abc import Callable

type Copy[T] = T
"""Type alias indicating a value is a copy that won't auto-persist.

When you see `Copy[T]` in a return type, the returned value is a deep copy.
Mutations to this copy do NOT affect world state. To persist changes, write
them back through a ReflectTarget or `world.set(entity, component)`.
"""

type TypeFilter = Callable[[type], bool]
"""Predicate selecting component types, e.g. for bulk copies."""
