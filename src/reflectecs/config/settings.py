"""Engine settings using Pydantic Settings.

Usage:
    from reflectecs.config import ReflectSettings

    # Load from environment variables (REFLECT_*)
    settings = ReflectSettings()

    # Or override with explicit values
    settings = ReflectSettings(wrap_enum_variants=True)
    world = World(settings=settings)
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ReflectSettings(BaseSettings):  # type: ignore[misc]
    """Behaviour switches for the reflection engine.

    Attributes:
        wrap_enum_variants: Default wrap-around for enum cycling when the
            caller does not pass `wrap` explicitly.
        strict_trait_expect: When True, "expect exactly one" trait dispatch
            raises AmbiguousTraitError if several attached types match.
            When False the first match in attachment order wins.
        serialize_indent: JSON indent for serialized reads (None = compact).

    Environment Variables:
        REFLECT_WRAP_ENUM_VARIANTS
        REFLECT_STRICT_TRAIT_EXPECT
        REFLECT_SERIALIZE_INDENT
    """

    model_config = SettingsConfigDict(
        env_prefix="REFLECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    wrap_enum_variants: bool = False
    strict_trait_expect: bool = False
    serialize_indent: int | None = None
