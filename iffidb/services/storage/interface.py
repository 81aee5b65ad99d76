"""
Abstract Storage Interface

DESIGN DECISION: The store sits on top of a plain string key-value medium,
the same shape as a browser's local storage. This allows us to:
1. Keep everything in memory for tests and throwaway sessions
2. Persist to a single JSON document on disk for real use
3. Swap in another medium later without touching the services

The medium only moves strings. Serialization, defaults and tolerance of
malformed data are the job of PersistentStore.
"""

from abc import ABC, abstractmethod
from typing import Optional

from iffidb.errors import IffiDBError


class KeyValueMedium(ABC):
    """
    Abstract durable key-value medium.

    Each call is atomic at single-key granularity. There are no
    transactions across keys.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Return the raw string stored under key.

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a raw string under key, replacing any prior value.

        Raises:
            StorageError: If the medium cannot be written
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete key. Removing an absent key is a no-op."""
        pass


class StorageError(IffiDBError):
    """Base exception for storage operations."""
    pass
