"""Storage backends for records and singletons."""

from reflectecs.storage.local import LocalStorage
from reflectecs.storage.protocol import Storage

__all__ = [
    "Storage",
    "LocalStorage",
]
