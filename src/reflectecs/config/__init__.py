"""Configuration module using Pydantic Settings.

Usage:
    from reflectecs.config import ReflectSettings

    settings = ReflectSettings(strict_trait_expect=True)
"""

from reflectecs.config.settings import ReflectSettings

__all__ = [
    "ReflectSettings",
]
