"""
Storage Services Package

Provides the abstract key-value medium, its local implementations and the
typed PersistentStore built on top of them.
"""

from iffidb.services.storage.interface import (
    KeyValueMedium,
    StorageError,
)
from iffidb.services.storage.local import (
    InMemoryMedium,
    JsonFileMedium,
)
from iffidb.services.storage.store import (
    PersistentStore,
    StorageKeys,
)

__all__ = [
    # Interfaces
    "KeyValueMedium",
    # Exceptions
    "StorageError",
    # Local media
    "InMemoryMedium",
    "JsonFileMedium",
    # Typed store
    "PersistentStore",
    "StorageKeys",
]
