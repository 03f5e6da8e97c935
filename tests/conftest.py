"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from reflectecs import ReflectSettings, TypeRegistry, World


@pytest.fixture
def registry():
    """Fresh TypeRegistry with builtins registered."""
    return TypeRegistry()


@pytest.fixture
def settings():
    """Settings with library defaults, independent of the environment."""
    return ReflectSettings(
        wrap_enum_variants=False, strict_trait_expect=False, serialize_indent=None
    )


@pytest.fixture
def world(registry, settings):
    """Fresh World bound to the fresh registry."""
    return World(type_registry=registry, settings=settings)
