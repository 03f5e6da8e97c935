"""Type registry, registration decorators and default-value lookup.

Usage:
    registry = TypeRegistry()
    registry.register_component(Position)
    registry.register_resource(Settings)
    registry.register_trait(Clickable, Button)

    # Or against the process-wide registry:
    @component
    @dataclass
    class Position:
        x: float = 0.0
        y: float = 0.0
"""

from __future__ import annotations

import dataclasses
import enum
import hashlib
import inspect
import logging
from collections.abc import Callable, Iterator
from typing import Any, get_args, get_origin, overload

from reflectecs.errors import NoDefaultValueError
from reflectecs.registry.describe import (
    hint_class,
    is_namedtuple,
    is_optional,
    is_pydantic,
    type_info_of,
)
from reflectecs.registry.enums import ReflectEnum, enum_root
from reflectecs.registry.models import (
    ReflectComponent,
    ReflectDebug,
    ReflectDefault,
    ReflectPartialEq,
    ReflectResource,
    ReflectTrait,
    TypeInfo,
    TypeKind,
)

logger = logging.getLogger(__name__)

_BUILTINS: tuple[type, ...] = (bool, int, float, str, type(None), list, tuple, dict)


def _stable_type_id(cls: type) -> int:
    """Generate deterministic ID from fully qualified class name.

    Uses SHA256 hash of the fully qualified name so that the same code yields
    the same IDs in every process.
    """
    fqn = f"{cls.__module__}.{cls.__qualname__}"
    return int(hashlib.sha256(fqn.encode()).hexdigest()[:16], 16)


def _default_factory_for(info: TypeInfo) -> Callable[[], Any] | None:
    """Infer a zero-argument constructor, if the class has one."""
    cls = info.type
    if info.kind is TypeKind.ENUM and issubclass(cls, enum.Enum):
        return lambda: next(iter(cls))
    if dataclasses.is_dataclass(cls):
        required = [
            f
            for f in dataclasses.fields(cls)
            if f.init
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        ]
        return None if required else cls
    if is_pydantic(cls):
        fields = cls.model_fields.values()  # type: ignore[attr-defined]
        return None if any(f.is_required() for f in fields) else cls
    if is_namedtuple(cls):
        complete = len(cls._field_defaults) == len(cls._fields)  # type: ignore[attr-defined]
        return cls if complete else None
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return None
    required_params = [
        p
        for p in signature.parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    return None if required_params else cls


class TypeRegistration:
    """Structural descriptor plus capability table of one registered type."""

    __slots__ = ("_type", "type_id", "data")

    def __init__(self, cls: type) -> None:
        self._type = cls
        self.type_id = _stable_type_id(cls)
        self.data: dict[Any, Any] = {}

    @property
    def type(self) -> type:
        return self._type

    @property
    def type_info(self) -> TypeInfo:
        return type_info_of(self._type)

    @property
    def type_path(self) -> str:
        return f"{self._type.__module__}.{self._type.__qualname__}"

    def insert(self, type_data: Any) -> None:
        """Add capability data, keyed by its class (or by trait for ReflectTrait)."""
        key = type_data.trait if isinstance(type_data, ReflectTrait) else type(type_data)
        self.data[key] = type_data

    def get[D](self, capability: type[D]) -> D | None:
        return self.data.get(capability)

    def contains(self, capability: type) -> bool:
        return capability in self.data

    def __repr__(self) -> str:
        names = ", ".join(getattr(k, "__name__", repr(k)) for k in self.data)
        return f"TypeRegistration({self.type_path}, [{names}])"


class TypeRegistry:
    """Process-local map from classes to their registrations.

    Builtin primitives and containers are registered on construction. Register
    application types before the first reflection call that needs them; after
    that the registry is read-only in practice.
    """

    def __init__(self, register_builtins: bool = True) -> None:
        self._by_type: dict[type, TypeRegistration] = {}
        self._by_type_id: dict[int, type] = {}
        self._by_path: dict[str, type] = {}
        if register_builtins:
            self._register_builtins()

    def _register_builtins(self) -> None:
        for cls in _BUILTINS:
            registration = self._add(cls)
            factory: Callable[[], Any] = (lambda: None) if cls is type(None) else cls
            registration.insert(ReflectDefault(factory))
            registration.insert(ReflectPartialEq())
            registration.insert(ReflectDebug())

    def _add(self, cls: type) -> TypeRegistration:
        registration = TypeRegistration(cls)
        existing = self._by_type_id.get(registration.type_id)
        if existing is not None and existing is not cls:
            raise RuntimeError(
                f"Type ID collision: {cls} and {existing} hash to {registration.type_id}"
            )
        self._by_type[cls] = registration
        self._by_type_id[registration.type_id] = cls
        self._by_path[registration.type_path] = cls
        return registration

    def _infer_type_data(self, registration: TypeRegistration) -> None:
        cls = registration.type
        info = registration.type_info
        registration.insert(ReflectDebug())
        if isinstance(cls, type) and issubclass(cls, ReflectEnum):
            registration.insert(ReflectPartialEq())
            registration.insert(ReflectDefault(lambda: self._default_reflect_enum(cls)))
            return
        if cls.__eq__ is not object.__eq__ or issubclass(cls, enum.Enum):
            registration.insert(ReflectPartialEq())
        factory = _default_factory_for(info)
        if factory is not None:
            registration.insert(ReflectDefault(factory))

    def _default_reflect_enum(self, root: type[ReflectEnum]) -> Any:
        # Late import: the engine depends on the registry, not the reverse
        from reflectecs.reflect.enums import construct_default_variant

        variants = type_info_of(root).variants
        if not variants:
            raise NoDefaultValueError(root, ReflectDefault)
        return construct_default_variant(variants[0], self)

    def register(self, cls: type, *type_data: Any) -> TypeRegistration:
        """Register a class and return its registration.

        Equality, debug and default capabilities are inferred from the class.
        Extra type data is added on top; registering twice only adds data.
        Variants of a ReflectEnum register their root. Reflectable classes
        named in field type hints are registered too, so nested values compare
        and serialize on their own. Registering a ReflectEnum root again picks
        up variants declared since.

        Raises:
            RuntimeError: If the type ID collides with another registered type.
        """
        cls = enum_root(cls) or cls
        registration = self._by_type.get(cls)
        if registration is None:
            registration = self._add(cls)
            self._infer_type_data(registration)
            logger.debug(f"Registered type {registration.type_path}")
            self._register_field_types(registration.type_info)
        elif enum_root(cls) is not None:
            # Variants may have been declared since the root was registered
            self._register_field_types(registration.type_info)
        for data in type_data:
            registration.insert(data)
        return registration

    def _register_field_types(self, info: TypeInfo) -> None:
        fields = [*info.fields, *(f for variant in info.variants for f in variant.fields)]
        for field in fields:
            for dependency in _hint_classes(field.type_hint):
                if dependency not in self and _is_reflectable(dependency):
                    self.register(dependency)

    def register_component(self, cls: type, *type_data: Any) -> TypeRegistration:
        """Register a class that can be attached to records."""
        return self.register(cls, ReflectComponent(enum_root(cls) or cls), *type_data)

    def register_resource(self, cls: type, *type_data: Any) -> TypeRegistration:
        """Register a class that lives as a singleton."""
        return self.register(cls, ReflectResource(enum_root(cls) or cls), *type_data)

    def register_type_data(self, cls: type, type_data: Any) -> None:
        """Add capability data to an already registered type.

        Raises:
            KeyError: If the type is not registered.
        """
        registration = self.get(cls)
        if registration is None:
            raise KeyError(f"Type {cls.__qualname__} is not registered")
        registration.insert(type_data)

    def register_trait(
        self, trait: type, cls: type, **functions: Callable[..., Any]
    ) -> ReflectTrait:
        """Register `cls` as an implementation of `trait`.

        Each public method declared on the trait is looked up on `cls`, unless
        given explicitly as a keyword argument.

        Raises:
            TypeError: If `cls` lacks one of the trait's methods.
        """
        table: dict[str, Callable[..., Any]] = {}
        for name in trait_method_names(trait):
            function = functions.get(name, getattr(cls, name, None))
            if function is None:
                raise TypeError(
                    f"{cls.__qualname__} does not implement {trait.__qualname__}.{name}"
                )
            table[name] = function
        reflect_trait = ReflectTrait(trait=trait, implementor=cls, functions=table)
        self.register(cls, reflect_trait)
        return reflect_trait

    def get(self, cls: type) -> TypeRegistration | None:
        return self._by_type.get(enum_root(cls) or cls)

    def get_type_data[D](self, cls: type, capability: type[D]) -> D | None:
        registration = self.get(cls)
        if registration is None:
            return None
        return registration.data.get(capability)

    def get_with_type_path(self, type_path: str) -> TypeRegistration | None:
        cls = self._by_path.get(type_path)
        return None if cls is None else self._by_type[cls]

    def get_with_type_id(self, type_id: int) -> TypeRegistration | None:
        cls = self._by_type_id.get(type_id)
        return None if cls is None else self._by_type[cls]

    def type_key_for_path(self, type_path: str) -> type | None:
        """Return the registered class for a human-readable type path."""
        return self._by_path.get(type_path)

    def is_registered(self, cls: type) -> bool:
        return self.get(cls) is not None

    def default_value_for(self, hint: Any) -> Any:
        """Build the default value of a type hint from registered capabilities.

        Optional hints default to None, fixed tuples to a tuple of defaults and
        generic containers to their origin's default.

        Raises:
            NoDefaultValueError: If no capability provides a default.
        """
        if is_optional(hint):
            return None
        if get_origin(hint) is tuple:
            args = get_args(hint)
            if args and args[-1] is not Ellipsis:
                return tuple(self.default_value_for(arg) for arg in args)
        cls = hint_class(hint)
        if cls is None:
            raise NoDefaultValueError(hint, ReflectDefault)
        reflect_default = self.get_type_data(cls, ReflectDefault)
        if reflect_default is None:
            raise NoDefaultValueError(cls, ReflectDefault)
        return reflect_default.default()

    def __contains__(self, cls: object) -> bool:
        return isinstance(cls, type) and self.is_registered(cls)

    def __iter__(self) -> Iterator[TypeRegistration]:
        return iter(list(self._by_type.values()))

    def __len__(self) -> int:
        return len(self._by_type)


def trait_method_names(trait: type) -> tuple[str, ...]:
    """Public methods declared by a trait class and its trait bases."""
    names: list[str] = []
    for base in reversed(trait.__mro__):
        if base.__module__ in ("builtins", "typing", "abc"):
            continue
        for name, attr in vars(base).items():
            if name.startswith("_") or name in names:
                continue
            if callable(attr) or isinstance(attr, (staticmethod, classmethod)):
                names.append(name)
    return tuple(names)


# Module-level registry instance
_registry = TypeRegistry()


def get_registry() -> TypeRegistry:
    """Access the process-wide type registry used by the decorators."""
    return _registry


def _hint_classes(hint: Any) -> Iterator[type]:
    """Classes named by a type hint, generic arguments included."""
    cls = hint_class(hint)
    if cls is not None:
        yield cls
    for arg in get_args(hint):
        yield from _hint_classes(arg)


def _is_reflectable(cls: type) -> bool:
    return (
        dataclasses.is_dataclass(cls)
        or is_pydantic(cls)
        or is_namedtuple(cls)
        or enum_root(cls) is not None
        or (isinstance(cls, type) and issubclass(cls, enum.Enum))
    )


def _check_reflectable(cls: type) -> None:
    if not _is_reflectable(cls):
        raise TypeError(
            f"{cls.__name__} must be a dataclass, Pydantic model, NamedTuple or enum. "
            f"Did you forget @dataclass decorator?"
        )


@overload
def component(cls: type) -> type: ...


@overload
def component(cls: None = None) -> Callable[[type], type]: ...


def component(cls: type | None = None) -> type | Callable[[type], type]:
    """Register a class with the process-wide registry as a component type.

    Supports both `@component` and `@component()`. Apply it AFTER @dataclass.

    Raises:
        TypeError: If the class has no reflectable shape.
    """

    def decorator(c: type) -> type:
        _check_reflectable(c)
        _registry.register_component(c)
        return c

    if cls is None:
        return decorator
    return decorator(cls)


@overload
def resource(cls: type) -> type: ...


@overload
def resource(cls: None = None) -> Callable[[type], type]: ...


def resource(cls: type | None = None) -> type | Callable[[type], type]:
    """Register a class with the process-wide registry as a singleton type."""

    def decorator(c: type) -> type:
        _check_reflectable(c)
        _registry.register_resource(c)
        return c

    if cls is None:
        return decorator
    return decorator(cls)


def implements(trait: type, **functions: Callable[..., Any]) -> Callable[[type], type]:
    """Register the decorated class as a `trait` implementation globally.

    Example:
        >>> @implements(Clickable)
        ... @component
        ... @dataclass
        ... class Button:
        ...     def click(self) -> None: ...
    """

    def decorator(cls: type) -> type:
        _registry.register_trait(trait, cls, **functions)
        return cls

    return decorator
