"""Example components and an inspector session for ReflectECS.

This package demonstrates library usage but is not part of the core API.
"""

from .components import Describe, EditorPrefs, Health, Position, Visibility

__all__ = [
    "Describe",
    "EditorPrefs",
    "Health",
    "Position",
    "Visibility",
]
