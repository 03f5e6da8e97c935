"""Example application types an inspector can edit without importing them."""

from dataclasses import dataclass, field
from typing import Protocol

from reflectecs import ReflectEnum, component, implements, resource


class Describe(Protocol):
    """Trait: one-line summary shown in the inspector's record list."""

    def describe(self) -> str: ...


@implements(Describe)
@component
@dataclass(slots=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def describe(self) -> str:
        return f"at ({self.x:g}, {self.y:g})"


@implements(Describe)
@component
@dataclass(slots=True)
class Health:
    hp: int = 10
    max_hp: int = 10
    tags: list[str] = field(default_factory=list)

    def describe(self) -> str:
        return f"{self.hp}/{self.max_hp} hp"


@component
class Visibility(ReflectEnum):
    """Example: enum whose variants carry data."""


@dataclass
class Visible(Visibility):
    pass


@dataclass
class Hidden(Visibility):
    pass


@dataclass
class Tinted(Visibility, positional=True):
    r: int = 255
    g: int = 255
    b: int = 255


@resource
@dataclass(slots=True)
class EditorPrefs:
    grid_size: int = 8
    snap: bool = True
