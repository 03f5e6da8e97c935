"""Tests for path parsing and resolution over live values.

Critical Invariants:
- Only fields of the active enum variant resolve
- Writes through immutable containers rebuild up to the first mutable parent
- Read-only handles never write and hand out copies
"""

from dataclasses import dataclass, field
from typing import NamedTuple

import pytest
from pydantic import BaseModel, ConfigDict, Field

from reflectecs.errors import FieldNotFoundError, NoAccessError, SetFailedError
from reflectecs.reflect.path import parse_path, resolve_path
from reflectecs.registry import ReflectEnum


@dataclass
class Stats:
    hp: int = 10
    speed: float = 1.0


@dataclass(frozen=True)
class Badge:
    title: str = ""
    rank: int = 0


class Point(NamedTuple):
    x: float = 0.0
    y: float = 0.0


class Shape(ReflectEnum):
    pass


@dataclass
class Empty(Shape):
    pass


@dataclass
class Circle(Shape):
    radius: float = 1.0


@dataclass
class Rgb(Shape, positional=True):
    r: int = 0
    g: int = 0
    b: int = 0


class Profile(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    level: int = Field(default=1, ge=0)


class Card(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""


@dataclass
class Player:
    stats: Stats = field(default_factory=Stats)
    badge: Badge = field(default_factory=Badge)
    pos: Point = field(default_factory=Point)
    shape: Shape = field(default_factory=Circle)
    inventory: list[str] = field(default_factory=list)
    pair: tuple[int, int] = (0, 0)
    scores: dict[str, int] = field(default_factory=dict)
    profile: Profile = field(default_factory=Profile)
    card: Card = field(default_factory=Card)


def resolve_mut(root, path):
    """Resolve writably, recording root replacements."""
    written: list = []
    return resolve_path(root, path, writer=written.append), written


# Parsing


def test_empty_path_is_root():
    assert parse_path("") == ()


def test_parse_mixed_segments():
    segments = parse_path("a.b[2].0")

    assert [s.key for s in segments] == ["a", "b", 2, 0]
    assert [s.text for s in segments] == ["a", "b", "[2]", "0"]


def test_leading_dot_is_optional():
    assert parse_path(".a.b") == parse_path("a.b")


@pytest.mark.parametrize("path", ["a..b", "a.", ".", "[x]", "a b", "a[1"])
def test_malformed_paths_fail(path):
    with pytest.raises(FieldNotFoundError, match="malformed path"):
        parse_path(path)


# Reads


def test_read_nested_fields():
    player = Player(stats=Stats(hp=5), inventory=["sword"], scores={"alice": 3})

    assert resolve_path(player, "stats.hp").get() == 5
    assert resolve_path(player, "inventory[0]").get() == "sword"
    assert resolve_path(player, "pos.1").get() == 0.0
    assert resolve_path(player, "pos.y").get() == 0.0
    assert resolve_path(player, "scores.alice").get() == 3
    assert resolve_path(player, "profile.level").get() == 1


def test_resolved_ref_reports_path_and_hint():
    ref = resolve_path(Player(), "stats.speed")

    assert ref.path == "stats.speed"
    assert ref.type_hint is float
    assert resolve_path(Player(), "pair[1]").type_hint is int


def test_root_ref_has_no_hint():
    ref = resolve_path(Stats(), "")

    assert ref.path == ""
    assert ref.type_hint is None


def test_read_only_get_returns_copy():
    """CRITICAL: Values handed out by read-only handles are detached."""
    player = Player()

    stats = resolve_path(player, "stats").get()
    stats.hp = 0

    assert player.stats.hp == 10


def test_read_only_set_is_refused():
    ref = resolve_path(Player(), "stats.hp")

    assert not ref.writable
    with pytest.raises(NoAccessError):
        ref.set(1)


# Missing fields


def test_unknown_field():
    with pytest.raises(FieldNotFoundError) as info:
        resolve_path(Player(), "stats.mana")

    assert info.value.path == "stats.mana"
    assert info.value.segment == "mana"


def test_numeric_segment_on_struct_fails():
    with pytest.raises(FieldNotFoundError, match="addressed by name"):
        resolve_path(Player(), "stats.0")


def test_index_out_of_range():
    with pytest.raises(FieldNotFoundError, match="out of range"):
        resolve_path(Player(inventory=["a"]), "inventory[3]")


def test_value_has_no_fields():
    with pytest.raises(FieldNotFoundError, match="has no fields"):
        resolve_path(Player(), "stats.hp.bits")


def test_missing_map_key():
    with pytest.raises(FieldNotFoundError, match="no such key"):
        resolve_path(Player(), "scores.bob")


def test_only_active_variant_fields_resolve():
    """CRITICAL: Resolution follows the live variant, not the declared type."""
    player = Player(shape=Circle(radius=2.0))
    assert resolve_path(player, "shape.radius").get() == 2.0
    with pytest.raises(FieldNotFoundError):
        resolve_path(player, "shape.r")

    player.shape = Rgb(1, 2, 3)
    assert resolve_path(player, "shape.1").get() == 2
    with pytest.raises(FieldNotFoundError, match="addressed by index"):
        resolve_path(player, "shape.g")
    with pytest.raises(FieldNotFoundError):
        resolve_path(player, "shape.radius")

    player.shape = Empty()
    with pytest.raises(FieldNotFoundError, match="unit variant Empty"):
        resolve_path(player, "shape.x")


# Writes


def test_write_mutable_struct_in_place():
    player = Player()
    ref, written = resolve_mut(player, "stats.hp")

    ref.set(3)

    assert player.stats.hp == 3
    assert written == []
    assert ref.written


def test_write_through_frozen_dataclass_rebuilds():
    """Frozen containers are replaced in their parent, not mutated."""
    player = Player()
    original = player.badge
    ref, written = resolve_mut(player, "badge.rank")

    ref.set(3)

    assert player.badge == Badge(rank=3)
    assert original.rank == 0
    assert written == []


def test_write_frozen_root_goes_through_writer():
    ref, written = resolve_mut(Badge(), "rank")

    ref.set(4)

    assert written == [Badge(rank=4)]
    assert ref.get() == 4


def test_write_namedtuple_field():
    player = Player()
    ref, _ = resolve_mut(player, "pos.y")

    ref.set(5.0)

    assert player.pos == Point(0.0, 5.0)


def test_write_tuple_element():
    player = Player()
    ref, _ = resolve_mut(player, "pair[1]")

    ref.set(7)

    assert player.pair == (0, 7)


def test_write_list_element_and_map_value():
    player = Player(inventory=["sword"], scores={"alice": 1})

    resolve_mut(player, "inventory[0]")[0].set("axe")
    resolve_mut(player, "scores.alice")[0].set(2)

    assert player.inventory == ["axe"]
    assert player.scores == {"alice": 2}


def test_write_frozen_pydantic_model():
    player = Player()
    ref, _ = resolve_mut(player, "card.title")

    ref.set("ace")

    assert player.card.title == "ace"


def test_pydantic_validation_failure_is_set_failed():
    ref, _ = resolve_mut(Player(), "profile.level")

    with pytest.raises(SetFailedError, match="rejected value"):
        ref.set(-1)


def test_write_sibling_variant():
    player = Player(shape=Circle())
    ref, _ = resolve_mut(player, "shape")

    ref.set(Rgb(1, 1, 1))

    assert player.shape == Rgb(1, 1, 1)


def test_write_wrong_type_fails():
    ref, _ = resolve_mut(Player(), "stats.hp")

    with pytest.raises(SetFailedError):
        ref.set("many")
    with pytest.raises(SetFailedError):
        ref.set(True)


def test_int_accepted_for_float_field():
    player = Player()
    resolve_mut(player, "stats.speed")[0].set(2)

    assert player.stats.speed == 2


def test_root_requires_exact_type():
    ref, written = resolve_mut(Stats(), "")

    with pytest.raises(SetFailedError):
        ref.set(Badge())
    ref.set(Stats(hp=1))

    assert written == [Stats(hp=1)]
