"""Storage backends for webauthz records."""

from .base import WebauthzStore
from .file_store import JsonFileStore
from .memory_store import InMemoryStore

__all__ = [
    "WebauthzStore",
    "InMemoryStore",
    "JsonFileStore",
]
