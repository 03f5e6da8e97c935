"""Data-carrying enums.

Plain `enum.Enum` covers unit-only enums. ReflectEnum covers enums whose
variants carry payloads: the root subclasses ReflectEnum and every variant is
a direct dataclass subclass of the root. Declaration order is variant order.

Usage:
    class Shape(ReflectEnum):
        pass

    @dataclass
    class Empty(Shape):
        pass

    @dataclass
    class Circle(Shape):
        radius: float = 1.0

    @dataclass
    class Rgb(Shape, positional=True):  # fields addressed as .0, .1, .2
        r: int = 0
        g: int = 0
        b: int = 0
"""

from __future__ import annotations

from typing import Any, ClassVar


class ReflectEnum:
    """Base class for enum roots whose variants carry data."""

    __enum_root__: ClassVar[type[ReflectEnum]]
    __variants__: ClassVar[tuple[type[ReflectEnum], ...]]
    __positional__: ClassVar[bool] = False

    def __init_subclass__(cls, positional: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if ReflectEnum in cls.__bases__:
            cls.__enum_root__ = cls
            cls.__variants__ = ()
            return

        root = cls.__enum_root__
        if root not in cls.__bases__:
            raise TypeError(
                f"Variant {cls.__qualname__} must subclass its enum {root.__qualname__} directly"
            )
        # dataclass(slots=True) re-creates the class without class keywords
        if positional:
            cls.__positional__ = True

        names = [variant.__qualname__ for variant in root.__variants__]
        if cls.__qualname__ in names:
            index = names.index(cls.__qualname__)
            root.__variants__ = (*root.__variants__[:index], cls, *root.__variants__[index + 1 :])
        else:
            root.__variants__ = (*root.__variants__, cls)

    @property
    def variant_name(self) -> str:
        return type(self).__name__

    @property
    def variant_index(self) -> int:
        return type(self).__enum_root__.__variants__.index(type(self))


def enum_root(cls: type) -> type[ReflectEnum] | None:
    """Return the ReflectEnum root for a root or variant class, else None."""
    if isinstance(cls, type) and issubclass(cls, ReflectEnum) and cls is not ReflectEnum:
        return cls.__enum_root__
    return None
