"""Path resolution over live values.

Path grammar:
    ""              the root value
    "a.b"           named fields
    "a.0", "a[0]"   tuple-struct, tuple-variant, tuple and list elements
    ".a"            an optional leading dot

Resolution walks the live value, so only fields of the active enum variant
resolve. The result is a FieldRef: a handle that reads the field and, when
resolved mutably, writes it back. Writes through immutable containers
(frozen dataclasses, frozen pydantic models, NamedTuples, tuples) rebuild the
container and write it into its parent, up to the root.

Usage:
    ref = resolve_path(root, "stats.hp", writer=store_root)
    ref.get()
    ref.set(12)
"""

from __future__ import annotations

import copy as cp
import dataclasses
import functools
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_args

from reflectecs.errors import FieldNotFoundError, NoAccessError, SetFailedError
from reflectecs.reflect.value import is_assignable
from reflectecs.registry import FieldInfo, TypeKind, VariantKind, type_info_of, variant_info_of
from reflectecs.registry.describe import is_pydantic

_TOKEN = re.compile(r"(?:^|\.)(?:(?P<name>[A-Za-z_]\w*)|(?P<index>\d+))|\[(?P<bracket>\d+)\]")


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One step of a path: a field name or a positional index."""

    key: str | int
    text: str


@functools.lru_cache(maxsize=512)
def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Split a path into segments.

    Raises:
        FieldNotFoundError: If the path is malformed.
    """
    segments: list[PathSegment] = []
    pos = 0
    while pos < len(path):
        match = _TOKEN.match(path, pos)
        if match is None:
            raise FieldNotFoundError(path, path[pos:], "malformed path")
        if match.group("name") is not None:
            key: str | int = match.group("name")
        else:
            key = int(match.group("index") or match.group("bracket"))
        segments.append(PathSegment(key=key, text=match.group(0).lstrip(".")))
        pos = match.end()
    return tuple(segments)


class _WriteLog:
    __slots__ = ("written",)

    def __init__(self) -> None:
        self.written = False


class FieldRef:
    """Handle to one resolved field.

    Read-only handles (resolved without a writer) return deep copies from
    get() and raise NoAccessError from set(). Mutable handles return the live
    value.

    Attributes:
        path: The path this handle was resolved from.
        type_hint: Declared type of the field, None for the root.
    """

    __slots__ = ("path", "type_hint", "_getter", "_setter", "_log")

    def __init__(
        self,
        path: str,
        type_hint: Any,
        getter: Callable[[], Any],
        setter: Callable[[Any], None] | None,
        log: _WriteLog,
    ) -> None:
        self.path = path
        self.type_hint = type_hint
        self._getter = getter
        self._setter = setter
        self._log = log

    @property
    def writable(self) -> bool:
        return self._setter is not None

    @property
    def written(self) -> bool:
        """True once any handle of the same resolution has been written."""
        return self._log.written

    def get(self) -> Any:
        value = self._getter()
        return value if self._setter is not None else cp.deepcopy(value)

    def set(self, value: Any) -> None:
        """Replace the field's whole value.

        Raises:
            NoAccessError: If the handle is read-only.
            SetFailedError: If the value cannot be stored in this field.
        """
        if self._setter is None:
            raise NoAccessError(f"Field {self.path!r} was resolved read-only")
        self.check_assignable(value)
        self._setter(value)
        self._log.written = True

    def check_assignable(self, value: Any) -> None:
        """Raise SetFailedError if `value` cannot be stored in this field."""
        current = self._getter()
        if not is_assignable(current, value, self.type_hint):
            raise SetFailedError(
                f"Cannot assign {type(value).__qualname__} to {self.path or '<root>'!r} "
                f"holding {type(current).__qualname__}"
            )

    def __repr__(self) -> str:
        mode = "rw" if self.writable else "ro"
        return f"FieldRef({self.path!r}, {mode})"


def resolve_path(
    root: Any, path: str, writer: Callable[[Any], None] | None = None
) -> FieldRef:
    """Resolve `path` against `root`.

    Args:
        root: Live root value.
        path: Field path, see module docstring.
        writer: Stores a replacement root. Without it the handle is read-only.

    Raises:
        FieldNotFoundError: If a segment does not exist on the current value.
    """
    log = _WriteLog()
    cell = [root]

    root_setter: Callable[[Any], None] | None = None
    if writer is not None:

        def root_setter(value: Any) -> None:
            writer(value)
            cell[0] = value

    ref = FieldRef("", None, lambda: cell[0], root_setter, log)
    value = root
    for segment in parse_path(path):
        ref = _child_ref(ref, value, segment, path, log)
        value = ref._getter()
    ref.path = path
    return ref


# Child access: each accessor reads a child from its container and writes it
# back, returning a rebuilt container when the write cannot happen in place.

type _Reader = Callable[[Any], Any]
type _Writer = Callable[[Any, Any], Any | None]


def _child_ref(
    parent: FieldRef, container: Any, segment: PathSegment, path: str, log: _WriteLog
) -> FieldRef:
    read, write, hint = _accessor(container, parent.type_hint, segment, path)

    def getter() -> Any:
        return read(parent._getter())

    setter: Callable[[Any], None] | None = None
    parent_setter = parent._setter
    if parent_setter is not None:

        def setter(value: Any) -> None:
            rebuilt = write(parent._getter(), value)
            if rebuilt is not None:
                parent_setter(rebuilt)

    return FieldRef(segment.text, hint, getter, setter, log)


def _accessor(
    container: Any, container_hint: Any, segment: PathSegment, path: str
) -> tuple[_Reader, _Writer, Any]:
    info = type_info_of(type(container))
    key = segment.key

    if info.kind is TypeKind.ENUM:
        variant = variant_info_of(container)
        if variant is None or variant.kind is VariantKind.UNIT:
            name = variant.name if variant is not None else type(container).__qualname__
            raise FieldNotFoundError(path, segment.text, f"unit variant {name} has no fields")
        by_index = variant.kind is VariantKind.TUPLE
        field = _lookup(
            variant.fields, segment, path, variant.name, by_name=not by_index, by_index=by_index
        )
        return _attribute_accessor(field)

    if info.kind is TypeKind.STRUCT:
        field = _lookup(info.fields, segment, path, info.type.__qualname__, by_name=True)
        return _attribute_accessor(field)

    if info.kind is TypeKind.TUPLE_STRUCT:
        field = _lookup(
            info.fields, segment, path, info.type.__qualname__, by_name=True, by_index=True
        )
        return (
            lambda c: c[field.index],
            lambda c, v: c._replace(**{field.name: v}),
            field.type_hint,
        )

    if info.kind in (TypeKind.LIST, TypeKind.TUPLE):
        if not isinstance(key, int):
            raise FieldNotFoundError(path, segment.text, "sequence elements are addressed by index")
        if key >= len(container):
            raise FieldNotFoundError(
                path, segment.text, f"index out of range for length {len(container)}"
            )
        if info.kind is TypeKind.LIST:
            return (
                lambda c: c[key],
                _set_item_factory(key),
                _element_hint(container_hint, key, tuple_=False),
            )
        return (
            lambda c: c[key],
            lambda c, v: (*c[:key], v, *c[key + 1 :]),
            _element_hint(container_hint, key, tuple_=True),
        )

    if info.kind is TypeKind.MAP:
        if not isinstance(key, str) or key not in container:
            raise FieldNotFoundError(path, segment.text, "no such key")
        args = get_args(container_hint)
        return lambda c: c[key], _set_item_factory(key), args[1] if len(args) == 2 else Any

    raise FieldNotFoundError(
        path, segment.text, f"{type(container).__qualname__} value has no fields"
    )


def _lookup(
    fields: tuple[FieldInfo, ...],
    segment: PathSegment,
    path: str,
    owner: str,
    by_name: bool = False,
    by_index: bool = False,
) -> FieldInfo:
    key = segment.key
    found: FieldInfo | None = None
    if isinstance(key, int):
        if not by_index:
            raise FieldNotFoundError(path, segment.text, f"fields of {owner} are addressed by name")
        if key < len(fields):
            found = fields[key]
    else:
        if not by_name:
            raise FieldNotFoundError(
                path, segment.text, f"fields of {owner} are addressed by index"
            )
        found = next((f for f in fields if f.name == key), None)
    if found is None:
        raise FieldNotFoundError(path, segment.text, f"{owner} has no such field")
    return found


def _attribute_accessor(field: FieldInfo) -> tuple[_Reader, _Writer, Any]:
    name = field.name
    return lambda c: getattr(c, name), lambda c, v: _set_attribute(c, name, v), field.type_hint


def _set_attribute(container: Any, name: str, value: Any) -> Any | None:
    cls = type(container)
    if dataclasses.is_dataclass(container):
        if cls.__dataclass_params__.frozen:  # type: ignore[attr-defined]
            return dataclasses.replace(container, **{name: value})
        setattr(container, name, value)
        return None
    if is_pydantic(cls):
        if container.model_config.get("frozen", False):
            return container.model_copy(update={name: value})
        try:
            setattr(container, name, value)
        except ValueError as err:
            # pydantic validate_assignment rejects the value
            raise SetFailedError(f"{cls.__qualname__}.{name} rejected value: {err}") from err
        return None
    setattr(container, name, value)
    return None


def _set_item_factory(key: Any) -> _Writer:
    def write(container: Any, value: Any) -> None:
        container[key] = value

    return write


def _element_hint(container_hint: Any, index: int, tuple_: bool) -> Any:
    args = get_args(container_hint)
    if not args:
        return Any
    if not tuple_:
        return args[0]
    if len(args) == 2 and args[1] is Ellipsis:
        return args[0]
    return args[index] if index < len(args) else Any
