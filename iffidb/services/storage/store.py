"""
Persistent Store

Typed persistence over a KeyValueMedium. The store exclusively owns three
keys: the record collection, the audit log collection and the current
session user. Services reach them only through the accessors here.

DESIGN DECISION: Stored data is never trusted.
- A key holding malformed JSON reads as absent (the caller's default)
- A collection item that fails validation is skipped with a warning
- A malformed session reads as "no session"
Nothing in this module raises because of bad stored data.

Read-modify-write cycles go through `mutate`/`mutate_records`/`mutate_logs`,
which hold a store-wide lock so two operations can never interleave
between reading a collection and writing it back. Plain `write` and
`remove` take the same lock, since a medium may rewrite its whole
document on every single-key write.
"""

import json
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

import structlog
from pydantic import ValidationError as SchemaError

from iffidb.models.audit import LogEntry
from iffidb.models.record import Record, User
from iffidb.services.storage.interface import KeyValueMedium


logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class StorageKeys:
    """The three logical keys the store persists."""
    records: str
    logs: str
    user: str

    @classmethod
    def for_prefix(cls, prefix: str) -> "StorageKeys":
        return cls(
            records=f"{prefix}_records",
            logs=f"{prefix}_logs",
            user=f"{prefix}_user",
        )


class PersistentStore:
    """
    JSON key-value persistence with typed accessors.

    Usage:
        store = PersistentStore(InMemoryMedium())
        store.save_records([record])
        records = store.load_records()
    """

    def __init__(self, medium: KeyValueMedium, key_prefix: str = "iffidb"):
        self._medium = medium
        self._keys = StorageKeys.for_prefix(key_prefix)
        self._lock = threading.RLock()

    @property
    def keys(self) -> StorageKeys:
        return self._keys

    # -------------------------------------------------------------------------
    # Raw key access
    # -------------------------------------------------------------------------

    def read(self, key: str, default: Any) -> Any:
        """
        Return the decoded value under key.

        Returns default if the key is absent or holds malformed JSON.
        """
        raw = self._medium.get_item(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("stored_value_malformed", key=key)
            return default

    def write(self, key: str, value: Any) -> None:
        """Serialize value as JSON and store it under key."""
        with self._lock:
            self._medium.set_item(key, json.dumps(value, ensure_ascii=False))

    def remove(self, key: str) -> None:
        with self._lock:
            self._medium.remove_item(key)

    def mutate(self, key: str, default: Any, fn: Callable[[Any], Any]) -> Any:
        """
        Atomically replace the value under key with fn(current).

        If fn raises, nothing is written.
        """
        with self._lock:
            updated = fn(self.read(key, default))
            self.write(key, updated)
            return updated

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def load_records(self) -> list[Record]:
        """All records, newest first."""
        return self._load_collection(self._keys.records, Record)

    def save_records(self, records: list[Record]) -> None:
        self.write(self._keys.records, [r.to_storage() for r in records])

    def mutate_records(
        self,
        fn: Callable[[list[Record]], tuple[list[Record], T]],
    ) -> T:
        """
        Read-modify-write the record collection.

        fn receives the current records and returns (new_records, result);
        new_records is persisted and result is returned. If fn raises,
        the collection is left untouched.
        """
        with self._lock:
            updated, result = fn(self.load_records())
            self.save_records(updated)
            return result

    # -------------------------------------------------------------------------
    # Audit log
    # -------------------------------------------------------------------------

    def load_logs(self) -> list[LogEntry]:
        """All log entries, newest first."""
        return self._load_collection(self._keys.logs, LogEntry)

    def save_logs(self, entries: list[LogEntry]) -> None:
        self.write(self._keys.logs, [e.to_storage() for e in entries])

    def mutate_logs(
        self,
        fn: Callable[[list[LogEntry]], list[LogEntry]],
    ) -> list[LogEntry]:
        """Read-modify-write the log collection."""
        with self._lock:
            updated = fn(self.load_logs())
            self.save_logs(updated)
            return updated

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def load_user(self) -> Optional[User]:
        data = self.read(self._keys.user, None)
        if data is None:
            return None
        try:
            return User.model_validate(data)
        except SchemaError:
            logger.warning("stored_user_malformed", key=self._keys.user)
            return None

    def save_user(self, user: User) -> None:
        self.write(self._keys.user, user.to_storage())

    def clear_user(self) -> None:
        self.remove(self._keys.user)

    # -------------------------------------------------------------------------

    def _load_collection(self, key: str, model: type) -> list:
        data = self.read(key, [])
        if not isinstance(data, list):
            logger.warning("stored_collection_malformed", key=key)
            return []

        items = []
        skipped = 0
        for raw in data:
            try:
                items.append(model.model_validate(raw))
            except SchemaError:
                skipped += 1

        if skipped:
            logger.warning("stored_items_skipped", key=key, skipped=skipped)
        return items
